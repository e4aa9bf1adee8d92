"""
Financial analysis routes for vendor evaluation.

This module exposes the financial analysis engine over JSON:
- Cost breakdown entries (create, update, delete, list, bulk import)
- TCO calculation per vendor or for a whole project, with rankings
- Sensitivity scenarios and what-if runs
- ROI calculations with payback and risk adjustment
- Financial assumptions
- Dashboard and cost comparison aggregates

Routes:
    GET    /api/projects/{id}/costs                        - List cost entries (?vendor_id=)
    POST   /api/projects/{id}/costs                        - Create cost entry
    POST   /api/projects/{id}/vendors/{vid}/costs/bulk     - Bulk import cost entries
    PATCH  /api/costs/{entry_id}                           - Update cost entry
    DELETE /api/costs/{entry_id}                           - Delete cost entry
    POST   /api/projects/{id}/vendors/{vid}/tco            - Calculate TCO for a vendor
    POST   /api/projects/{id}/tco/calculate-all            - Calculate TCO for all vendors
    GET    /api/projects/{id}/tco                          - TCO summaries by rank
    GET    /api/projects/{id}/scenarios                    - List scenarios
    POST   /api/projects/{id}/scenarios                    - Create scenario
    PATCH  /api/scenarios/{sid}                            - Update scenario
    DELETE /api/scenarios/{sid}                            - Delete scenario
    POST   /api/scenarios/{sid}/run                        - Run sensitivity analysis
    POST   /api/projects/{id}/vendors/{vid}/roi            - Calculate ROI
    GET    /api/projects/{id}/roi                          - ROI calculations, best first
    GET    /api/projects/{id}/assumptions                  - List assumptions
    POST   /api/projects/{id}/assumptions                  - Create assumption
    PATCH  /api/assumptions/{aid}                          - Update assumption
    DELETE /api/assumptions/{aid}                          - Delete assumption
    GET    /api/projects/{id}/dashboard                    - Dashboard aggregate
    GET    /api/projects/{id}/cost-comparison              - Per-vendor cost comparison
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.config import DEFAULT_TCO_YEARS
from app.db import get_db
from app.logging_config import get_logger
from app.services import assumptions as assumption_service
from app.services import cost_ledger, dashboard, roi as roi_service, sensitivity, tco as tco_service
from app.services.projects import get_project

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


# =============================================================================
# Request models
# =============================================================================

class CostEntryRequest(BaseModel):
    """Request model for creating a cost entry."""
    vendor_id: Optional[int] = None
    cost_category: Optional[str] = None
    cost_description: Optional[str] = None
    year_1_cost: Any = 0
    year_2_cost: Any = 0
    year_3_cost: Any = 0
    year_4_cost: Any = 0
    year_5_cost: Any = 0
    is_recurring: bool = False
    is_estimated: bool = True
    notes: Optional[str] = None
    source: Optional[str] = None

    def yearly_costs(self) -> List[Any]:
        return [self.year_1_cost, self.year_2_cost, self.year_3_cost, self.year_4_cost, self.year_5_cost]


class BulkCostRequest(BaseModel):
    """Request model for bulk importing cost entries for one vendor."""
    costs: List[Dict[str, Any]]


class TCORequest(BaseModel):
    """Request model for TCO calculation options."""
    years: int = DEFAULT_TCO_YEARS
    discount_rate: float = 0
    total_users: Optional[int] = None


class AdjustmentModel(BaseModel):
    """One sensitivity adjustment."""
    variable: str
    adjustment_type: str
    value: float


class ScenarioRequest(BaseModel):
    """Request model for creating a sensitivity scenario."""
    scenario_name: str
    scenario_description: Optional[str] = None
    is_baseline: bool = False
    adjustments: List[AdjustmentModel] = Field(default_factory=list)


class BenefitModel(BaseModel):
    """One benefit line; year_N overrides annual_value for that year."""
    category: str = "other"
    description: Optional[str] = None
    annual_value: float = 0
    year_1: Optional[float] = None
    year_2: Optional[float] = None
    year_3: Optional[float] = None
    year_4: Optional[float] = None
    year_5: Optional[float] = None


class ROIRequest(BaseModel):
    """Request model for ROI calculation."""
    benefit_breakdown: List[BenefitModel] = Field(default_factory=list)
    risk_adjustment_percent: float = 0
    methodology_notes: Optional[str] = None
    assumptions_used: Optional[str] = None


class AssumptionRequest(BaseModel):
    """Request model for creating a financial assumption."""
    assumption_name: str
    assumption_category: str
    assumption_value: str
    assumption_unit: Optional[str] = None
    impact_description: Optional[str] = None
    applies_to: str = "all"


# =============================================================================
# Cost entries
# =============================================================================

@router.get("/projects/{project_id}/costs")
def list_costs(project_id: int, vendor_id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    get_project(db, project_id)
    entries = cost_ledger.list_cost_entries(db, project_id, vendor_id)
    return {"costs": [e.to_dict() for e in entries]}


@router.post("/projects/{project_id}/costs")
def create_cost(project_id: int, data: CostEntryRequest, db: Session = Depends(get_db)):
    entry = cost_ledger.create_cost_entry(
        db,
        project_id,
        data.vendor_id,
        data.cost_category,
        data.yearly_costs(),
        description=data.cost_description,
        is_recurring=data.is_recurring,
        is_estimated=data.is_estimated,
        notes=data.notes,
        source=data.source,
    )
    return JSONResponse(entry.to_dict(), status_code=201)


@router.post("/projects/{project_id}/vendors/{vendor_id}/costs/bulk")
def bulk_import_costs(project_id: int, vendor_id: int, data: BulkCostRequest, db: Session = Depends(get_db)):
    entries = cost_ledger.bulk_import_costs(db, project_id, vendor_id, data.costs)
    return {"success": True, "imported": len(entries), "costs": [e.to_dict() for e in entries]}


@router.patch("/costs/{entry_id}")
def update_cost(entry_id: int, fields: Dict[str, Any], db: Session = Depends(get_db)):
    return cost_ledger.update_cost_entry(db, entry_id, fields).to_dict()


@router.delete("/costs/{entry_id}")
def delete_cost(entry_id: int, db: Session = Depends(get_db)):
    cost_ledger.delete_cost_entry(db, entry_id)
    return {"success": True}


# =============================================================================
# TCO
# =============================================================================

@router.post("/projects/{project_id}/vendors/{vendor_id}/tco")
def calculate_vendor_tco(project_id: int, vendor_id: int, data: TCORequest, db: Session = Depends(get_db)):
    summary = tco_service.calculate_tco(
        db, project_id, vendor_id,
        years=data.years, discount_rate=data.discount_rate, total_users=data.total_users
    )
    return summary.to_dict()


@router.post("/projects/{project_id}/tco/calculate-all")
def calculate_all_tco(project_id: int, data: TCORequest, db: Session = Depends(get_db)):
    tco_service.calculate_all_tco(
        db, project_id,
        years=data.years, discount_rate=data.discount_rate, total_users=data.total_users
    )
    # Rankings settle only after the last vendor, so report the final state
    return {"tco_summaries": [s.to_dict() for s in tco_service.get_tco_summaries(db, project_id)]}


@router.get("/projects/{project_id}/tco")
def list_tco(project_id: int, db: Session = Depends(get_db)):
    get_project(db, project_id)
    return {"tco_summaries": [s.to_dict() for s in tco_service.get_tco_summaries(db, project_id)]}


# =============================================================================
# Sensitivity scenarios
# =============================================================================

@router.get("/projects/{project_id}/scenarios")
def list_scenarios(project_id: int, db: Session = Depends(get_db)):
    get_project(db, project_id)
    return {"scenarios": [s.to_dict() for s in sensitivity.get_scenarios(db, project_id)]}


@router.post("/projects/{project_id}/scenarios")
def create_scenario(project_id: int, data: ScenarioRequest, db: Session = Depends(get_db)):
    scenario = sensitivity.create_scenario(
        db,
        project_id,
        data.scenario_name,
        adjustments=[a.model_dump() for a in data.adjustments],
        description=data.scenario_description,
        is_baseline=data.is_baseline,
    )
    return JSONResponse(scenario.to_dict(), status_code=201)


@router.patch("/scenarios/{scenario_id}")
def update_scenario(scenario_id: int, fields: Dict[str, Any], db: Session = Depends(get_db)):
    return sensitivity.update_scenario(db, scenario_id, fields).to_dict()


@router.delete("/scenarios/{scenario_id}")
def delete_scenario(scenario_id: int, db: Session = Depends(get_db)):
    sensitivity.delete_scenario(db, scenario_id)
    return {"success": True}


@router.post("/scenarios/{scenario_id}/run")
def run_scenario(scenario_id: int, db: Session = Depends(get_db)):
    outcome = sensitivity.run_sensitivity_analysis(db, scenario_id)
    return {
        "scenario": outcome["scenario"].to_dict(),
        "details": outcome["details"],
        "ranking_changed": outcome["ranking_changed"],
        "recommendation_changed": outcome["recommendation_changed"],
    }


# =============================================================================
# ROI
# =============================================================================

@router.post("/projects/{project_id}/vendors/{vendor_id}/roi")
def calculate_vendor_roi(project_id: int, vendor_id: int, data: ROIRequest, db: Session = Depends(get_db)):
    roi = roi_service.calculate_roi(
        db,
        project_id,
        vendor_id,
        benefit_breakdown=[b.model_dump(exclude_none=True) for b in data.benefit_breakdown],
        risk_adjustment_percent=data.risk_adjustment_percent,
        methodology_notes=data.methodology_notes,
        assumptions_used=data.assumptions_used,
    )
    return roi.to_dict()


@router.get("/projects/{project_id}/roi")
def list_roi(project_id: int, db: Session = Depends(get_db)):
    get_project(db, project_id)
    return {"roi_calculations": [r.to_dict() for r in roi_service.get_roi_calculations(db, project_id)]}


# =============================================================================
# Assumptions
# =============================================================================

@router.get("/projects/{project_id}/assumptions")
def list_assumptions(project_id: int, db: Session = Depends(get_db)):
    get_project(db, project_id)
    return {"assumptions": [a.to_dict() for a in assumption_service.get_assumptions(db, project_id)]}


@router.post("/projects/{project_id}/assumptions")
def create_assumption(project_id: int, data: AssumptionRequest, db: Session = Depends(get_db)):
    assumption = assumption_service.create_assumption(
        db,
        project_id,
        data.assumption_name,
        data.assumption_category,
        data.assumption_value,
        unit=data.assumption_unit,
        impact_description=data.impact_description,
        applies_to=data.applies_to,
    )
    return JSONResponse(assumption.to_dict(), status_code=201)


@router.patch("/assumptions/{assumption_id}")
def update_assumption(assumption_id: int, fields: Dict[str, Any], db: Session = Depends(get_db)):
    return assumption_service.update_assumption(db, assumption_id, fields).to_dict()


@router.delete("/assumptions/{assumption_id}")
def delete_assumption(assumption_id: int, db: Session = Depends(get_db)):
    assumption_service.delete_assumption(db, assumption_id)
    return {"success": True}


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/projects/{project_id}/dashboard")
def get_dashboard(project_id: int, db: Session = Depends(get_db)):
    return dashboard.get_dashboard_data(db, project_id)


@router.get("/projects/{project_id}/cost-comparison")
def get_cost_comparison(project_id: int, db: Session = Depends(get_db)):
    return {"vendors": dashboard.get_cost_comparison_data(db, project_id)}
