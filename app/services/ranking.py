"""
Ranking engine for TCO summaries.

Vendors are ordered ascending by total TCO with a stable sort, so equal
totals keep their lookup order. Rank is the 1-based position and
percent_vs_lowest is measured against the rank-1 total.
"""

from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session

from app.logging_config import get_logger
from app.models.financial import TCOSummary

logger = get_logger(__name__)


def percent_above(value: float, lowest: float) -> float:
    """Percent by which value exceeds lowest; 0 when lowest is not positive."""
    if lowest <= 0:
        return 0.0
    return max(0.0, (value - lowest) / lowest * 100)


def rank_totals(totals: Sequence[float]) -> List[Tuple[int, int, float]]:
    """
    Rank a sequence of totals.

    Args:
        totals: Totals in lookup order

    Returns:
        (original index, rank, percent_vs_lowest) tuples in rank order
    """
    if not totals:
        return []
    order = sorted(range(len(totals)), key=lambda i: totals[i])
    lowest = totals[order[0]]
    return [
        (index, position, percent_above(totals[index], lowest))
        for position, index in enumerate(order, start=1)
    ]


def update_tco_rankings(db: Session, project_id: int) -> List[TCOSummary]:
    """
    Recompute tco_rank and percent_vs_lowest for every summary in a project.

    Lookup order is summary id order, which is the order vendors were first
    calculated. Does nothing when the project has no summaries.
    """
    summaries = db.query(TCOSummary).filter(
        TCOSummary.evaluation_project_id == project_id
    ).order_by(TCOSummary.id).all()

    if not summaries:
        return []

    ranked = rank_totals([s.total_tco or 0.0 for s in summaries])
    ordered = []
    for index, rank, percent in ranked:
        summary = summaries[index]
        summary.tco_rank = rank
        summary.percent_vs_lowest = percent
        ordered.append(summary)

    db.commit()
    logger.debug(f"Rankings updated for project {project_id}: {len(ordered)} vendors")
    return ordered
