"""
Tests for the dashboard aggregates and financial assumptions.
"""

import pytest
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.evaluation import EvaluationProject, Vendor
from app.services import assumptions as assumption_service
from app.services import roi as roi_service
from app.services import sensitivity
from app.services.dashboard import get_cost_comparison_data, get_dashboard_data


class TestDashboard:
    """Test suite for get_dashboard_data."""

    def test_empty_project(self, db_session: Session, test_project: EvaluationProject):
        data = get_dashboard_data(db_session, test_project.id)

        assert data["stats"]["total_cost_entries"] == 0
        assert data["stats"]["tco_calculated"] == 0
        assert "lowest_tco" not in data["stats"]
        assert "best_roi" not in data["stats"]
        assert data["cost_by_category"] == {}
        assert data["tco_summaries"] == []

    def test_unknown_project(self, db_session: Session):
        with pytest.raises(NotFoundError):
            get_dashboard_data(db_session, 999)

    def test_costs_without_tco(self, db_session: Session, test_project: EvaluationProject, vendor_costs: dict):
        data = get_dashboard_data(db_session, test_project.id)

        assert data["stats"]["vendors_with_costs"] == 2
        assert data["stats"]["total_cost_entries"] == 4
        assert data["cost_by_category"] == {"implementation": 15000, "license": 28000}
        assert len(data["cost_breakdowns"]) == 4

    def test_full_dashboard(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor,
        baseline_tco: list
    ):
        roi_service.calculate_roi(db_session, test_project.id, vendor_b.id, [
            {"category": "efficiency", "annual_value": 20000},
        ])
        sensitivity.create_scenario(db_session, test_project.id, "Baseline", is_baseline=True)
        assumption_service.create_assumption(db_session, test_project.id, "Discount rate", "discount", "8", unit="%")

        data = get_dashboard_data(db_session, test_project.id)
        stats = data["stats"]

        assert stats["tco_calculated"] == 2
        assert stats["lowest_tco"] == {"vendor_id": vendor_a.id, "vendor_name": "Acme Systems", "amount": 20000}
        assert stats["highest_tco"]["vendor_id"] == vendor_b.id
        assert stats["tco_spread"] == 3000
        assert stats["tco_spread_percent"] == pytest.approx(15.0)
        assert stats["best_roi"]["vendor_id"] == vendor_b.id
        assert stats["scenarios_count"] == 1
        assert stats["assumptions_count"] == 1
        assert [s["tco_rank"] for s in data["tco_summaries"]] == [1, 2]
        assert data["assumptions"][0]["assumption_value"] == "8"

    def test_cost_comparison(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor,
        baseline_tco: list
    ):
        rows = get_cost_comparison_data(db_session, test_project.id)
        by_vendor = {row["vendor_id"]: row for row in rows}

        assert by_vendor[vendor_a.id]["categories"] == {"implementation": 10000, "license": 10000}
        assert by_vendor[vendor_a.id]["yearly_totals"] == [10000, 5000, 5000, 0, 0]
        assert by_vendor[vendor_b.id]["tco"] == 23000
        assert by_vendor[vendor_b.id]["tco_rank"] == 2


class TestAssumptions:
    """Test suite for financial assumption CRUD."""

    def test_create_and_list(self, db_session: Session, test_project: EvaluationProject):
        assumption_service.create_assumption(db_session, test_project.id, "User growth", "growth", 10, unit="%")
        assumption_service.create_assumption(db_session, test_project.id, "Seat count", "adoption", "250")

        names = [a.assumption_name for a in assumption_service.get_assumptions(db_session, test_project.id)]
        assert names == ["Seat count", "User growth"]

    def test_duplicate_name_rejected(self, db_session: Session, test_project: EvaluationProject):
        assumption_service.create_assumption(db_session, test_project.id, "Inflation", "discount", "3")
        with pytest.raises(ValidationError):
            assumption_service.create_assumption(db_session, test_project.id, "Inflation", "discount", "4")

    def test_invalid_category(self, db_session: Session, test_project: EvaluationProject):
        with pytest.raises(ValidationError):
            assumption_service.create_assumption(db_session, test_project.id, "Mood", "vibes", "good")

    def test_update_and_delete(self, db_session: Session, test_project: EvaluationProject):
        assumption = assumption_service.create_assumption(db_session, test_project.id, "Inflation", "discount", "3")

        updated = assumption_service.update_assumption(db_session, assumption.id, {"assumption_value": 4.5})
        assert updated.assumption_value == "4.5"

        with pytest.raises(ValidationError):
            assumption_service.update_assumption(db_session, assumption.id, {"evaluation_project_id": 2})

        assumption_service.delete_assumption(db_session, assumption.id)
        with pytest.raises(NotFoundError):
            assumption_service.get_assumption(db_session, assumption.id)
