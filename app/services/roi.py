"""
ROI calculator for vendor evaluation.

Combines a benefit projection with the vendor's stored TCO:

    net_benefit       = total_benefits - total_costs
    roi_percent       = net_benefit / total_costs * 100   (0 when costs are 0)
    risk_adjusted_roi = roi_percent * (1 - risk_adjustment / 100)

Benefits are given as a breakdown list. Each item carries a flat
annual_value and may override individual years with year_1..year_5.
total_benefits covers the same horizon as the vendor's TCO summary.

Payback is found by walking month by month through the first three years,
spreading each year's benefit and cost evenly over its twelve months.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import PAYBACK_MAX_MONTHS
from app.errors import PreconditionError, ValidationError
from app.logging_config import get_logger
from app.models.financial import BENEFIT_CATEGORIES, YEARS, ROICalculation
from app.services.projects import get_project, get_vendor
from app.services.tco import get_vendor_tco

logger = get_logger(__name__)


def _number(value: Any, label: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{label} must be a finite number")
    return number


def normalize_benefits(benefit_breakdown: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Validate benefit items, keeping only the keys the calculation reads."""
    normalized = []
    for position, benefit in enumerate(benefit_breakdown or [], start=1):
        category = benefit.get("category") or "other"
        if category not in BENEFIT_CATEGORIES:
            raise ValidationError(
                f"Benefit {position}: category must be one of {', '.join(BENEFIT_CATEGORIES)}"
            )
        item = {
            "category": category,
            "description": benefit.get("description"),
            "annual_value": _number(benefit.get("annual_value"), f"Benefit {position} annual_value") or 0.0,
        }
        for year in range(1, YEARS + 1):
            value = _number(benefit.get(f"year_{year}"), f"Benefit {position} year_{year}")
            if value is not None:
                item[f"year_{year}"] = value
        normalized.append(item)
    return normalized


def yearly_benefits(benefits: Sequence[Dict[str, Any]]) -> List[float]:
    """Per-year benefit totals; an explicit year_N overrides annual_value for that year."""
    totals = [0.0] * YEARS
    for benefit in benefits:
        annual = benefit.get("annual_value") or 0.0
        for i in range(YEARS):
            override = benefit.get(f"year_{i + 1}")
            totals[i] += override if override is not None else annual
    return totals


def simulate_payback(yearly_benefits: Sequence[float], yearly_costs: Sequence[float],
                     max_months: int = PAYBACK_MAX_MONTHS) -> Optional[int]:
    """
    Month in which cumulative net benefit first becomes non-negative.

    Month m (1-based) of year y contributes benefits[y] / 12 - costs[y] / 12.
    Missing years count as 0.

    Returns:
        1-based month index, or None if payback does not happen within max_months
    """
    if max_months <= 0:
        return None
    years = -(-max_months // 12)
    benefits = np.zeros(years)
    costs = np.zeros(years)
    b = np.asarray(yearly_benefits[:years], dtype=float)
    c = np.asarray(yearly_costs[:years], dtype=float)
    benefits[:len(b)] = b
    costs[:len(c)] = c

    monthly_net = np.repeat(benefits / 12 - costs / 12, 12)[:max_months]
    cumulative = np.cumsum(monthly_net)
    hits = np.flatnonzero(cumulative >= 0)
    return int(hits[0]) + 1 if hits.size else None


def roi_metrics(total_benefits: float, total_costs: float, risk_adjustment_percent: float = 0) -> Dict[str, float]:
    net_benefit = total_benefits - total_costs
    roi_percent = net_benefit / total_costs * 100 if total_costs > 0 else 0.0
    return {
        "net_benefit": net_benefit,
        "roi_percent": roi_percent,
        "risk_adjusted_roi": roi_percent * (1 - risk_adjustment_percent / 100),
    }


def calculate_roi(
    db: Session,
    project_id: int,
    vendor_id: int,
    benefit_breakdown: Optional[List[Dict[str, Any]]] = None,
    risk_adjustment_percent: float = 0,
    methodology_notes: Optional[str] = None,
    assumptions_used: Optional[str] = None,
) -> ROICalculation:
    """
    Calculate and store ROI for a vendor against its TCO summary.

    Raises:
        PreconditionError: if the vendor has no TCO summary yet
    """
    get_project(db, project_id)
    vendor = get_vendor(db, project_id, vendor_id)

    risk_adjustment = _number(risk_adjustment_percent, "Risk adjustment") or 0.0
    if not 0 <= risk_adjustment <= 100:
        raise ValidationError(f"Risk adjustment must be between 0 and 100 (got {risk_adjustment})")
    benefits = normalize_benefits(benefit_breakdown)

    tco = get_vendor_tco(db, project_id, vendor_id)
    if tco is None:
        raise PreconditionError(
            f"No TCO data for vendor {vendor_id}. Please calculate TCO first."
        )

    years = tco.tco_years or 3
    total_costs = tco.total_tco or 0.0
    benefit_totals = yearly_benefits(benefits)
    total_benefits = sum(benefit_totals[:years])
    metrics = roi_metrics(total_benefits, total_costs, risk_adjustment)

    # Payback only counts when the first year already produces benefit
    payback_months = None
    if benefit_totals[0] > 0:
        payback_months = simulate_payback(benefit_totals, tco.yearly_totals())

    roi = db.query(ROICalculation).filter(
        ROICalculation.evaluation_project_id == project_id,
        ROICalculation.vendor_id == vendor_id
    ).first()
    if roi is None:
        roi = ROICalculation(evaluation_project_id=project_id, vendor_id=vendor_id)
        db.add(roi)

    for i, value in enumerate(benefit_totals, start=1):
        setattr(roi, f"year_{i}_benefits", value)
    roi.set_benefit_breakdown(benefits)
    roi.total_benefits = total_benefits
    roi.total_costs = total_costs
    roi.net_benefit = metrics["net_benefit"]
    roi.roi_percent = metrics["roi_percent"]
    roi.payback_months = payback_months
    roi.risk_adjustment_percent = risk_adjustment
    roi.risk_adjusted_roi = metrics["risk_adjusted_roi"]
    roi.methodology_notes = methodology_notes or None
    roi.assumptions_used = assumptions_used or None
    roi.calculated_at = datetime.utcnow()

    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error storing ROI for vendor {vendor_id} in project {project_id}: {e}")
        db.rollback()
        raise
    db.refresh(roi)

    logger.info(
        f"ROI calculated for {vendor.vendor_name} (vendor {vendor_id}): "
        f"{roi.roi_percent:.1f}% (risk-adjusted {roi.risk_adjusted_roi:.1f}%), payback {payback_months} months"
    )
    return roi


def get_roi_calculations(db: Session, project_id: int) -> List[ROICalculation]:
    """ROI calculations for a project, best ROI first."""
    return db.query(ROICalculation).filter(
        ROICalculation.evaluation_project_id == project_id
    ).order_by(ROICalculation.roi_percent.desc(), ROICalculation.id).all()


def get_vendor_roi(db: Session, project_id: int, vendor_id: int) -> Optional[ROICalculation]:
    return db.query(ROICalculation).filter(
        ROICalculation.evaluation_project_id == project_id,
        ROICalculation.vendor_id == vendor_id
    ).first()
