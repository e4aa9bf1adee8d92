"""
Read-only financial dashboard aggregates.

Combines cost entries, TCO summaries, scenarios, assumptions and ROI
results for one project into the structures the dashboard and report
layers render. Nothing here writes to the database.
"""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.config import SENSITIVITY_WINDOW_YEARS
from app.logging_config import get_logger
from app.models.financial import YEARS
from app.services.assumptions import get_assumptions
from app.services.cost_ledger import list_cost_entries
from app.services.projects import get_project
from app.services.ranking import percent_above
from app.services.roi import get_roi_calculations
from app.services.sensitivity import get_scenarios
from app.services.tco import get_tco_summaries

logger = get_logger(__name__)


def _window_total(entry) -> float:
    return sum(entry.year_costs()[:SENSITIVITY_WINDOW_YEARS])


def _vendor_name(row):
    return row.vendor.vendor_name if row.vendor else None


def cost_by_category(entries) -> Dict[str, float]:
    """Years 1-3 spend per cost category across all vendors."""
    totals: Dict[str, float] = {}
    for entry in entries:
        totals[entry.cost_category] = totals.get(entry.cost_category, 0.0) + _window_total(entry)
    return totals


def get_dashboard_data(db: Session, project_id: int) -> Dict[str, Any]:
    """
    Build the financial analysis dashboard for a project.

    Returns:
        Dictionary containing:
        - stats: counts, lowest/highest TCO, TCO spread, best ROI
        - cost_breakdowns, tco_summaries, scenarios, assumptions, roi_calculations
        - cost_by_category: years 1-3 spend per category
    """
    get_project(db, project_id)

    entries = list_cost_entries(db, project_id)
    summaries = get_tco_summaries(db, project_id)
    scenarios = get_scenarios(db, project_id)
    assumptions = get_assumptions(db, project_id)
    roi_calculations = get_roi_calculations(db, project_id)

    stats: Dict[str, Any] = {
        "vendors_with_costs": len({e.vendor_id for e in entries}),
        "total_cost_entries": len(entries),
        "tco_calculated": len(summaries),
        "scenarios_count": len(scenarios),
        "assumptions_count": len(assumptions),
        "roi_calculated": len(roi_calculations),
    }

    if summaries:
        ordered = sorted(summaries, key=lambda s: s.total_tco or 0.0)
        lowest, highest = ordered[0], ordered[-1]
        stats["lowest_tco"] = {
            "vendor_id": lowest.vendor_id,
            "vendor_name": _vendor_name(lowest),
            "amount": lowest.total_tco,
        }
        stats["highest_tco"] = {
            "vendor_id": highest.vendor_id,
            "vendor_name": _vendor_name(highest),
            "amount": highest.total_tco,
        }
        stats["tco_spread"] = (highest.total_tco or 0.0) - (lowest.total_tco or 0.0)
        stats["tco_spread_percent"] = percent_above(highest.total_tco or 0.0, lowest.total_tco or 0.0)

    if roi_calculations:
        best = roi_calculations[0]
        stats["best_roi"] = {
            "vendor_id": best.vendor_id,
            "vendor_name": _vendor_name(best),
            "roi_percent": best.roi_percent,
            "payback_months": best.payback_months,
        }

    logger.debug(
        f"Dashboard built for project {project_id}: {len(entries)} cost entries, "
        f"{len(summaries)} TCO summaries, {len(scenarios)} scenarios"
    )

    return {
        "stats": stats,
        "cost_breakdowns": [e.to_dict() for e in entries],
        "tco_summaries": [s.to_dict() for s in summaries],
        "scenarios": [s.to_dict() for s in scenarios],
        "assumptions": [a.to_dict() for a in assumptions],
        "roi_calculations": [r.to_dict() for r in roi_calculations],
        "cost_by_category": cost_by_category(entries),
    }


def get_cost_comparison_data(db: Session, project_id: int) -> List[Dict[str, Any]]:
    """Per-vendor category totals (years 1-3) and yearly totals, with TCO rank where known."""
    get_project(db, project_id)

    vendors: Dict[int, Dict[str, Any]] = {}
    for entry in list_cost_entries(db, project_id):
        row = vendors.setdefault(entry.vendor_id, {
            "vendor_id": entry.vendor_id,
            "vendor_name": _vendor_name(entry) or "Unknown",
            "categories": {},
            "yearly_totals": [0.0] * YEARS,
        })
        row["categories"][entry.cost_category] = row["categories"].get(entry.cost_category, 0.0) + _window_total(entry)
        for i, cost in enumerate(entry.year_costs()):
            row["yearly_totals"][i] += cost

    for summary in get_tco_summaries(db, project_id):
        row = vendors.get(summary.vendor_id)
        if row is not None:
            row["tco"] = summary.total_tco
            row["tco_rank"] = summary.tco_rank
            row["percent_vs_lowest"] = summary.percent_vs_lowest

    return list(vendors.values())
