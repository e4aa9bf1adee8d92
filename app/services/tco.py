"""
TCO calculator for vendor evaluation.

Aggregates a vendor's cost ledger into five yearly totals and derives:
- total TCO over a 1-5 year horizon (years past the horizon are ignored)
- NPV-adjusted TCO when a discount rate is given
- per-user cost per year and per month when a user count is given

Each calculation overwrites the vendor's TCOSummary and reranks the project.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import DEFAULT_TCO_YEARS, MAX_TCO_YEARS
from app.errors import ValidationError
from app.logging_config import get_logger
from app.models.financial import YEARS, CostBreakdown, TCOSummary
from app.services.cost_ledger import list_cost_entries
from app.services.locking import project_lock
from app.services.projects import get_project, get_vendor, list_vendors
from app.services.ranking import update_tco_rankings

logger = get_logger(__name__)


def yearly_totals(entries: Iterable[CostBreakdown]) -> List[float]:
    """Sum each year's cost across entries."""
    totals = [0.0] * YEARS
    for entry in entries:
        for i, cost in enumerate(entry.year_costs()):
            totals[i] += cost
    return totals


def horizon_total(totals: Sequence[float], years: int) -> float:
    return sum(totals[:years])


def npv_total(totals: Sequence[float], years: int, discount_rate: float) -> float:
    """
    Net present value of the first `years` yearly totals.

    Year 1 is undiscounted: NPV = sum(total[i] / (1 + rate) ** i).
    A rate of 0 or less returns the plain horizon total.
    """
    if not discount_rate or discount_rate <= 0:
        return horizon_total(totals, years)
    values = np.asarray(totals[:years], dtype=float)
    factors = np.power(1.0 + discount_rate, np.arange(len(values)))
    return float(np.sum(values / factors))


def per_user_costs(total: float, years: int, total_users: Optional[int]) -> Tuple[Optional[float], Optional[float]]:
    """Return (per user per year, per user per month), or (None, None) without users."""
    if not total_users or total_users <= 0:
        return None, None
    per_year = total / years / total_users
    return per_year, per_year / 12


def validate_options(years: int, discount_rate: float, total_users: Optional[int]):
    if not isinstance(years, int) or isinstance(years, bool) or not 1 <= years <= MAX_TCO_YEARS:
        raise ValidationError(f"TCO years must be between 1 and {MAX_TCO_YEARS} (got {years})")
    if discount_rate is None or discount_rate < 0:
        raise ValidationError(f"Discount rate cannot be negative (got {discount_rate})")
    if total_users is not None and total_users < 0:
        raise ValidationError(f"Total users cannot be negative (got {total_users})")


def calculate_tco(
    db: Session,
    project_id: int,
    vendor_id: int,
    years: int = DEFAULT_TCO_YEARS,
    discount_rate: float = 0,
    total_users: Optional[int] = None,
) -> TCOSummary:
    """
    Calculate and store the TCO summary for one vendor, then rerank the project.

    Args:
        years: TCO horizon, 1-5
        discount_rate: Annual rate as a fraction (0.08 for 8%); 0 disables NPV
        total_users: Optional user count for per-user metrics

    Returns:
        The upserted TCOSummary with its fresh rank
    """
    validate_options(years, discount_rate, total_users)
    get_project(db, project_id)
    vendor = get_vendor(db, project_id, vendor_id)

    with project_lock(project_id):
        entries = list_cost_entries(db, project_id, vendor_id)
        totals = yearly_totals(entries)
        total_tco = horizon_total(totals, years)
        npv_tco = npv_total(totals, years, discount_rate)
        per_year, per_month = per_user_costs(total_tco, years, total_users)

        summary = db.query(TCOSummary).filter(
            TCOSummary.evaluation_project_id == project_id,
            TCOSummary.vendor_id == vendor_id
        ).first()
        if summary is None:
            summary = TCOSummary(evaluation_project_id=project_id, vendor_id=vendor_id)
            db.add(summary)

        summary.tco_years = years
        summary.discount_rate = discount_rate
        for i, total in enumerate(totals, start=1):
            setattr(summary, f"year_{i}_total", total)
        summary.total_tco = total_tco
        summary.npv_tco = npv_tco
        summary.total_users = total_users
        summary.cost_per_user_per_year = per_year
        summary.cost_per_user_per_month = per_month
        summary.calculated_at = datetime.utcnow()

        try:
            db.commit()
            update_tco_rankings(db, project_id)
        except SQLAlchemyError as e:
            logger.error(f"Error storing TCO for vendor {vendor_id} in project {project_id}: {e}")
            db.rollback()
            raise

        db.refresh(summary)

    logger.info(
        f"TCO calculated for {vendor.vendor_name} (vendor {vendor_id}): "
        f"{years}y total {total_tco:,.2f}, NPV {npv_tco:,.2f}, rank {summary.tco_rank}"
    )
    return summary


def calculate_all_tco(
    db: Session,
    project_id: int,
    years: int = DEFAULT_TCO_YEARS,
    discount_rate: float = 0,
    total_users: Optional[int] = None,
) -> List[TCOSummary]:
    """
    Calculate TCO for every vendor in the project, in vendor order.

    Each vendor is committed on its own; if one fails, vendors already
    calculated stay committed and the error propagates.
    """
    validate_options(years, discount_rate, total_users)
    get_project(db, project_id)

    results = []
    with project_lock(project_id):
        for vendor in list_vendors(db, project_id):
            results.append(calculate_tco(db, project_id, vendor.id, years, discount_rate, total_users))

    logger.info(f"TCO calculated for all {len(results)} vendors in project {project_id}")
    return results


def get_tco_summaries(db: Session, project_id: int) -> List[TCOSummary]:
    """TCO summaries for a project ordered by rank."""
    return db.query(TCOSummary).filter(
        TCOSummary.evaluation_project_id == project_id
    ).order_by(TCOSummary.tco_rank, TCOSummary.id).all()


def get_vendor_tco(db: Session, project_id: int, vendor_id: int) -> Optional[TCOSummary]:
    return db.query(TCOSummary).filter(
        TCOSummary.evaluation_project_id == project_id,
        TCOSummary.vendor_id == vendor_id
    ).first()
