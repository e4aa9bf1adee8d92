"""
Tests for TCO ranking.

Tests stable ordering, dense ranks and percent-above-lowest.
"""

import pytest
from sqlalchemy.orm import Session

from app.models.evaluation import EvaluationProject, Vendor
from app.models.financial import TCOSummary
from app.services.ranking import percent_above, rank_totals, update_tco_rankings


class TestRankTotals:
    """Test suite for the pure ranking function."""

    def test_two_vendors_percent_vs_lowest(self):
        """100000 vs 120000: lowest is rank 1 at 0%, the other rank 2 at 20%."""
        ranked = rank_totals([100000, 120000])
        assert ranked == [(0, 1, 0.0), (1, 2, pytest.approx(20.0))]

    def test_ranks_are_contiguous(self):
        ranked = rank_totals([300, 100, 500, 200])
        assert [rank for _, rank, _ in ranked] == [1, 2, 3, 4]
        assert [index for index, _, _ in ranked] == [1, 3, 0, 2]

    def test_ties_keep_lookup_order(self):
        ranked = rank_totals([50, 50, 10, 50])
        assert [index for index, _, _ in ranked] == [2, 0, 1, 3]
        assert [rank for _, rank, _ in ranked] == [1, 2, 3, 4]

    def test_zero_lowest_gives_zero_percent(self):
        ranked = rank_totals([0, 1000])
        assert [percent for _, _, percent in ranked] == [0.0, 0.0]

    def test_empty(self):
        assert rank_totals([]) == []

    def test_percent_above(self):
        assert percent_above(150, 100) == pytest.approx(50.0)
        assert percent_above(100, 100) == 0.0
        assert percent_above(100, 0) == 0.0


class TestUpdateRankings:
    """Test suite for writing ranks back onto TCO summaries."""

    def test_no_summaries_is_noop(self, db_session: Session, test_project: EvaluationProject):
        assert update_tco_rankings(db_session, test_project.id) == []

    def test_ranks_written_to_summaries(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor
    ):
        db_session.add_all([
            TCOSummary(evaluation_project_id=test_project.id, vendor_id=vendor_a.id, total_tco=120000),
            TCOSummary(evaluation_project_id=test_project.id, vendor_id=vendor_b.id, total_tco=100000),
        ])
        db_session.commit()

        ordered = update_tco_rankings(db_session, test_project.id)

        assert [s.vendor_id for s in ordered] == [vendor_b.id, vendor_a.id]
        assert ordered[0].tco_rank == 1
        assert ordered[0].percent_vs_lowest == 0
        assert ordered[1].tco_rank == 2
        assert ordered[1].percent_vs_lowest == pytest.approx(20.0)
