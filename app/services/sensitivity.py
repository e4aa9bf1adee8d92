"""
Sensitivity (what-if) analysis for vendor TCO.

A scenario is an ordered list of adjustments. Each adjustment names a
variable that resolves to a set of cost categories, an adjustment type and
a value:

    percent     adds cost_sum * value / 100
    fixed       adds value once, regardless of cost mass
    multiplier  adds cost_sum * (value - 1), rescaling that slice by value

cost_sum is the vendor's spend in the resolved categories over the first
SENSITIVITY_WINDOW_YEARS years, independent of the TCO horizon. Adjustments
accumulate in authored order on top of the baseline total_tco; vendors are
then re-sorted (stably) and compared with the baseline ranking.

Running a scenario requires TCO summaries to exist already; the baseline
is never computed implicitly.
"""

import math
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import SENSITIVITY_WINDOW_YEARS
from app.errors import NotFoundError, PreconditionError, ValidationError
from app.logging_config import get_logger
from app.models.financial import (
    ADJUSTMENT_TYPES, COST_CATEGORIES, ONE_TIME_CATEGORIES, RECURRING_CATEGORIES,
    CostBreakdown, SensitivityScenario
)
from app.services.cost_ledger import list_cost_entries
from app.services.locking import project_lock
from app.services.projects import get_project
from app.services.tco import get_tco_summaries

logger = get_logger(__name__)

# Adjustment variable -> cost categories it addresses
VARIABLE_CATEGORIES = {
    "implementation_cost": ["implementation"],
    "license_cost": ["license"],
    "support_cost": ["support"],
    "training_cost": ["training"],
    "integration_cost": ["integration"],
    "infrastructure_cost": ["infrastructure"],
    "all_costs": list(COST_CATEGORIES),
    "one_time_costs": ONE_TIME_CATEGORIES,
    "recurring_costs": RECURRING_CATEGORIES,
}

UPDATABLE_FIELDS = {"scenario_name", "scenario_description", "is_baseline", "adjustments", "analysis_notes"}


def resolve_categories(variable: str) -> List[str]:
    """
    Map an adjustment variable to the cost categories it covers.

    Named variables come from VARIABLE_CATEGORIES; a bare cost category
    name addresses just that category. Anything else is rejected.
    """
    if variable in VARIABLE_CATEGORIES:
        return list(VARIABLE_CATEGORIES[variable])
    if variable in COST_CATEGORIES:
        return [variable]
    raise ValidationError(
        f"Unknown adjustment variable '{variable}'. Use one of: "
        f"{', '.join(VARIABLE_CATEGORIES)} or a cost category"
    )


def validate_adjustments(adjustments: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Check and normalise an adjustment list, preserving its order."""
    normalised = []
    for position, adjustment in enumerate(adjustments or [], start=1):
        variable = adjustment.get("variable")
        adjustment_type = adjustment.get("adjustment_type")
        value = adjustment.get("value")

        if not variable:
            raise ValidationError(f"Adjustment {position}: variable is required")
        resolve_categories(variable)
        if adjustment_type not in ADJUSTMENT_TYPES:
            raise ValidationError(
                f"Adjustment {position}: type must be one of {', '.join(ADJUSTMENT_TYPES)}"
            )
        if isinstance(value, bool):
            raise ValidationError(f"Adjustment {position}: value must be a number")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Adjustment {position}: value must be a number")
        if not math.isfinite(value):
            raise ValidationError(f"Adjustment {position}: value must be a finite number")

        normalised.append({"variable": variable, "adjustment_type": adjustment_type, "value": value})
    return normalised


def window_cost_sum(entries: Iterable[CostBreakdown], categories: Sequence[str],
                    window: int = SENSITIVITY_WINDOW_YEARS) -> float:
    """Sum entries in the given categories over the first `window` years."""
    wanted = set(categories)
    return sum(
        sum(entry.year_costs()[:window])
        for entry in entries
        if entry.cost_category in wanted
    )


def apply_adjustments(baseline_total: float, entries: Sequence[CostBreakdown],
                      adjustments: Sequence[Dict[str, Any]]) -> float:
    """Apply adjustments cumulatively, in order, to one vendor's baseline total."""
    adjusted = baseline_total
    for adjustment in adjustments:
        cost_sum = window_cost_sum(entries, resolve_categories(adjustment["variable"]))
        value = adjustment["value"]
        adjustment_type = adjustment["adjustment_type"]

        if adjustment_type == "percent":
            adjusted += cost_sum * (value / 100)
        elif adjustment_type == "fixed":
            adjusted += value
        elif adjustment_type == "multiplier":
            adjusted += cost_sum * (value - 1)
    return adjusted


def compare_rankings(baseline: Sequence[int], adjusted: Sequence[int]) -> Tuple[bool, bool]:
    """
    Return (ranking_changed, recommendation_changed).

    The recommendation is the rank-1 vendor, so it can only change when the
    ranking does.
    """
    ranking_changed = list(baseline) != list(adjusted)
    recommendation_changed = ranking_changed and bool(baseline) and bool(adjusted) and baseline[0] != adjusted[0]
    return ranking_changed, recommendation_changed


# =============================================================================
# Scenario CRUD
# =============================================================================

def create_scenario(
    db: Session,
    project_id: int,
    name: str,
    adjustments: Optional[List[Dict[str, Any]]] = None,
    description: Optional[str] = None,
    is_baseline: bool = False,
) -> SensitivityScenario:
    get_project(db, project_id)
    if not name or not name.strip():
        raise ValidationError("Scenario name is required")

    scenario = SensitivityScenario(
        evaluation_project_id=project_id,
        scenario_name=name.strip(),
        scenario_description=description or None,
        is_baseline=bool(is_baseline),
    )
    scenario.set_adjustments(validate_adjustments(adjustments))
    scenario.set_results({})
    db.add(scenario)
    db.commit()
    db.refresh(scenario)

    logger.info(
        f"Sensitivity scenario created: {scenario.scenario_name} (ID: {scenario.id}) "
        f"with {len(scenario.get_adjustments())} adjustments"
    )
    return scenario


def get_scenario(db: Session, scenario_id: int) -> SensitivityScenario:
    scenario = db.query(SensitivityScenario).filter(SensitivityScenario.id == scenario_id).first()
    if not scenario:
        raise NotFoundError(f"Scenario {scenario_id} not found")
    return scenario


def get_scenarios(db: Session, project_id: int) -> List[SensitivityScenario]:
    """Scenarios for a project, baseline scenarios first, then in creation order."""
    return db.query(SensitivityScenario).filter(
        SensitivityScenario.evaluation_project_id == project_id
    ).order_by(
        SensitivityScenario.is_baseline.desc(),
        SensitivityScenario.created_at,
        SensitivityScenario.id
    ).all()


def update_scenario(db: Session, scenario_id: int, fields: Dict[str, Any]) -> SensitivityScenario:
    """
    Partially update a scenario.

    Changing the adjustments clears stored results and flags, since they no
    longer describe the scenario. All fields are validated before any is
    applied.
    """
    scenario = get_scenario(db, scenario_id)

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown scenario fields: {', '.join(sorted(unknown))}")

    changes = {}
    for key, value in fields.items():
        if key == "adjustments":
            value = validate_adjustments(value)
        elif key == "scenario_name":
            if not value or not value.strip():
                raise ValidationError("Scenario name is required")
            value = value.strip()
        elif key == "is_baseline":
            value = bool(value)
        changes[key] = value

    for key, value in changes.items():
        if key == "adjustments":
            scenario.set_adjustments(value)
            scenario.set_results({})
            scenario.ranking_changed = False
            scenario.recommendation_changed = False
        else:
            setattr(scenario, key, value)

    db.commit()
    db.refresh(scenario)
    logger.info(f"Scenario updated (ID: {scenario_id}): {', '.join(sorted(fields))}")
    return scenario


def delete_scenario(db: Session, scenario_id: int) -> bool:
    scenario = get_scenario(db, scenario_id)
    db.delete(scenario)
    db.commit()
    logger.info(f"Scenario deleted: {scenario.scenario_name} (ID: {scenario_id})")
    return True


# =============================================================================
# Analysis
# =============================================================================

def run_sensitivity_analysis(db: Session, scenario_id: int) -> Dict[str, Any]:
    """
    Apply a scenario's adjustments to every vendor and compare rankings.

    Returns:
        Dictionary containing:
        - scenario: the updated SensitivityScenario
        - details: per-vendor rows in adjusted rank order
        - ranking_changed / recommendation_changed flags
    """
    scenario = get_scenario(db, scenario_id)
    project_id = scenario.evaluation_project_id
    adjustments = validate_adjustments(scenario.get_adjustments())

    with project_lock(project_id):
        summaries = get_tco_summaries(db, project_id)
        if not summaries:
            raise PreconditionError("No TCO data available. Please calculate TCO first.")

        entries_by_vendor = defaultdict(list)
        for entry in list_cost_entries(db, project_id):
            entries_by_vendor[entry.vendor_id].append(entry)

        baseline_ranking = [s.vendor_id for s in summaries]
        details = []
        for summary in summaries:
            baseline = summary.total_tco or 0.0
            adjusted = apply_adjustments(baseline, entries_by_vendor[summary.vendor_id], adjustments)
            details.append({
                "vendor_id": summary.vendor_id,
                "vendor_name": summary.vendor.vendor_name if summary.vendor else None,
                "baseline_tco": baseline,
                "adjusted_tco": adjusted,
                "difference": adjusted - baseline,
                "percent_change": (adjusted - baseline) / baseline * 100 if baseline > 0 else 0.0,
            })

        details.sort(key=lambda row: row["adjusted_tco"])
        new_ranking = [row["vendor_id"] for row in details]
        ranking_changed, recommendation_changed = compare_rankings(baseline_ranking, new_ranking)

        results = {}
        for new_rank, row in enumerate(details, start=1):
            old_rank = baseline_ranking.index(row["vendor_id"]) + 1
            row["old_rank"] = old_rank
            row["new_rank"] = new_rank
            row["rank_change"] = old_rank - new_rank
            results[str(row["vendor_id"])] = {
                "baseline_tco": row["baseline_tco"],
                "adjusted_tco": row["adjusted_tco"],
                "difference": row["difference"],
                "old_rank": old_rank,
                "new_rank": new_rank,
                "rank_change": row["rank_change"],
            }

        scenario.set_results(results)
        scenario.ranking_changed = ranking_changed
        scenario.recommendation_changed = recommendation_changed
        try:
            db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving sensitivity results for scenario {scenario_id}: {e}")
            db.rollback()
            raise
        db.refresh(scenario)

    logger.info(
        f"Sensitivity analysis run: {scenario.scenario_name} (ID: {scenario_id}), "
        f"ranking_changed={ranking_changed}, recommendation_changed={recommendation_changed}"
    )
    return {
        "scenario": scenario,
        "details": details,
        "ranking_changed": ranking_changed,
        "recommendation_changed": recommendation_changed,
    }
