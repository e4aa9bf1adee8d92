"""
Tests for sensitivity analysis.

Tests variable resolution, adjustment arithmetic, scenario CRUD and
ranking/recommendation change detection.
"""

import pytest
from sqlalchemy.orm import Session

from app.errors import NotFoundError, PreconditionError, ValidationError
from app.models.evaluation import EvaluationProject, Vendor
from app.models.financial import COST_CATEGORIES, CostBreakdown
from app.services import sensitivity
from app.services.sensitivity import (
    apply_adjustments, compare_rankings, resolve_categories, validate_adjustments, window_cost_sum
)
from app.services.tco import calculate_all_tco


def adj(variable, adjustment_type, value):
    return {"variable": variable, "adjustment_type": adjustment_type, "value": value}


@pytest.fixture
def acme_entries():
    """Implementation [10000, 0, 0] and license [0, 5000, 5000]: TCO 20000."""
    return [
        CostBreakdown(cost_category="implementation", year_1_cost=10000),
        CostBreakdown(cost_category="license", year_2_cost=5000, year_3_cost=5000),
    ]


class TestResolveCategories:
    """Test suite for the variable to category mapping."""

    def test_named_variables(self):
        assert resolve_categories("implementation_cost") == ["implementation"]
        assert resolve_categories("license_cost") == ["license"]
        assert resolve_categories("all_costs") == list(COST_CATEGORIES)

    def test_recurring_split(self):
        recurring = resolve_categories("recurring_costs")
        one_time = resolve_categories("one_time_costs")
        assert set(recurring) == {"license", "support", "infrastructure"}
        assert set(recurring) | set(one_time) == set(COST_CATEGORIES)
        assert not set(recurring) & set(one_time)

    def test_literal_category(self):
        assert resolve_categories("travel") == ["travel"]

    def test_unknown_variable_rejected(self):
        with pytest.raises(ValidationError):
            resolve_categories("adoption_rate")


class TestApplyAdjustments:
    """Test suite for adjustment arithmetic on one vendor."""

    def test_percent_on_implementation(self, acme_entries):
        """+20% on implementation adds 10000 * 0.20 = 2000."""
        adjusted = apply_adjustments(20000, acme_entries, [adj("implementation_cost", "percent", 20)])
        assert adjusted == pytest.approx(22000)

    def test_fixed_adds_value_once(self, acme_entries):
        adjusted = apply_adjustments(20000, acme_entries, [adj("license_cost", "fixed", 7500)])
        assert adjusted == 27500

    def test_multiplier_of_one_is_noop(self, acme_entries):
        adjusted = apply_adjustments(20000, acme_entries, [adj("all_costs", "multiplier", 1)])
        assert adjusted == 20000

    def test_multiplier_rescales_slice(self, acme_entries):
        adjusted = apply_adjustments(20000, acme_entries, [adj("license_cost", "multiplier", 1.5)])
        assert adjusted == pytest.approx(25000)

    def test_adjustments_accumulate_in_order(self, acme_entries):
        adjusted = apply_adjustments(20000, acme_entries, [
            adj("implementation_cost", "percent", 10),
            adj("all_costs", "percent", -50),
            adj("training_cost", "fixed", 300),
        ])
        assert adjusted == pytest.approx(20000 + 1000 - 10000 + 300)

    def test_no_adjustments_returns_baseline(self, acme_entries):
        assert apply_adjustments(20000, acme_entries, []) == 20000

    def test_window_is_three_years(self):
        entries = [CostBreakdown(cost_category="support", year_1_cost=100, year_3_cost=100, year_4_cost=1000, year_5_cost=1000)]
        assert window_cost_sum(entries, ["support"]) == 200
        assert apply_adjustments(2200, entries, [adj("support_cost", "percent", 100)]) == pytest.approx(2400)


class TestCompareRankings:
    """Test suite for ranking change flags."""

    def test_identical(self):
        assert compare_rankings([1, 2, 3], [1, 2, 3]) == (False, False)

    def test_lower_ranks_swap(self):
        assert compare_rankings([1, 2, 3], [1, 3, 2]) == (True, False)

    def test_top_vendor_changes(self):
        assert compare_rankings([1, 2, 3], [2, 1, 3]) == (True, True)


class TestScenarioCRUD:
    """Test suite for scenario create/update/delete."""

    def test_create_scenario_preserves_adjustment_order(
        self,
        db_session: Session,
        test_project: EvaluationProject
    ):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Cost overrun", [
            adj("implementation_cost", "percent", 20),
            adj("license", "fixed", 1000),
        ])

        assert [a["variable"] for a in scenario.get_adjustments()] == ["implementation_cost", "license"]
        assert scenario.get_results() == {}
        assert scenario.ranking_changed is False

    @pytest.mark.parametrize("bad", [
        adj("implementation_cost", "exponential", 2),
        adj("adoption_rate", "percent", -40),
        adj("implementation_cost", "percent", "lots"),
        adj("implementation_cost", "percent", float("nan")),
        adj("license_cost", "multiplier", float("inf")),
        adj("license_cost", "fixed", "-inf"),
        {"adjustment_type": "percent", "value": 5},
    ])
    def test_create_scenario_rejects_invalid_adjustments(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        bad: dict
    ):
        with pytest.raises(ValidationError):
            sensitivity.create_scenario(db_session, test_project.id, "Bad", [bad])

    def test_create_scenario_requires_name(self, db_session: Session, test_project: EvaluationProject):
        with pytest.raises(ValidationError):
            sensitivity.create_scenario(db_session, test_project.id, "  ")

    def test_scenarios_listed_baseline_first(self, db_session: Session, test_project: EvaluationProject):
        sensitivity.create_scenario(db_session, test_project.id, "What-if")
        sensitivity.create_scenario(db_session, test_project.id, "Baseline", is_baseline=True)

        names = [s.scenario_name for s in sensitivity.get_scenarios(db_session, test_project.id)]
        assert names == ["Baseline", "What-if"]

    def test_rejected_update_leaves_scenario_unchanged(
        self,
        db_session: Session,
        test_project: EvaluationProject
    ):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Overrun", [
            adj("implementation_cost", "percent", 20),
        ])

        with pytest.raises(ValidationError):
            sensitivity.update_scenario(db_session, scenario.id, {"adjustments": [], "scenario_name": ""})

        sensitivity.create_scenario(db_session, test_project.id, "Unrelated")
        db_session.expire_all()

        stored = sensitivity.get_scenario(db_session, scenario.id)
        assert stored.scenario_name == "Overrun"
        assert len(stored.get_adjustments()) == 1

    def test_delete_scenario(self, db_session: Session, test_project: EvaluationProject):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Temp")
        sensitivity.delete_scenario(db_session, scenario.id)
        with pytest.raises(NotFoundError):
            sensitivity.get_scenario(db_session, scenario.id)


class TestRunSensitivityAnalysis:
    """Test suite for running scenarios against the baseline TCO."""

    def test_requires_baseline_tco(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_costs: dict
    ):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Too early")
        with pytest.raises(PreconditionError):
            sensitivity.run_sensitivity_analysis(db_session, scenario.id)

    def test_unknown_scenario(self, db_session: Session, test_project: EvaluationProject):
        with pytest.raises(NotFoundError):
            sensitivity.run_sensitivity_analysis(db_session, 404)

    def test_empty_adjustments_reproduce_baseline(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor,
        baseline_tco: list
    ):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Identity")
        outcome = sensitivity.run_sensitivity_analysis(db_session, scenario.id)

        assert outcome["ranking_changed"] is False
        assert outcome["recommendation_changed"] is False
        assert [row["vendor_id"] for row in outcome["details"]] == [vendor_a.id, vendor_b.id]

        results = outcome["scenario"].get_results()
        assert results[str(vendor_a.id)] == {
            "baseline_tco": 20000,
            "adjusted_tco": 20000,
            "difference": 0,
            "old_rank": 1,
            "new_rank": 1,
            "rank_change": 0,
        }

    def test_recommendation_flip(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor,
        baseline_tco: list
    ):
        """Doubling implementation pushes Acme (30000) above Bolt (28000)."""
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Implementation overrun", [
            adj("implementation_cost", "percent", 100),
        ])
        outcome = sensitivity.run_sensitivity_analysis(db_session, scenario.id)

        assert outcome["ranking_changed"] is True
        assert outcome["recommendation_changed"] is True

        results = outcome["scenario"].get_results()
        assert results[str(vendor_a.id)]["adjusted_tco"] == pytest.approx(30000)
        assert results[str(vendor_a.id)]["rank_change"] == -1
        assert results[str(vendor_b.id)]["adjusted_tco"] == pytest.approx(28000)
        assert results[str(vendor_b.id)]["new_rank"] == 1
        assert results[str(vendor_b.id)]["rank_change"] == 1

        stored = sensitivity.get_scenario(db_session, scenario.id)
        assert stored.recommendation_changed is True

    def test_ranking_change_without_recommendation_change(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        vendor_b: Vendor,
        vendor_costs: dict,
        make_cost
    ):
        """
        Acme 20000, Bolt 23000, Cirrus 24000 (training only).
        +20% on recurring costs: Acme 22000, Cirrus 24000, Bolt 26600.
        """
        cirrus = Vendor(evaluation_project_id=test_project.id, vendor_name="Cirrus")
        db_session.add(cirrus)
        db_session.commit()
        make_cost(test_project, cirrus, "training", [24000])
        calculate_all_tco(db_session, test_project.id)

        scenario = sensitivity.create_scenario(db_session, test_project.id, "License uplift", [
            adj("recurring_costs", "percent", 20),
        ])
        outcome = sensitivity.run_sensitivity_analysis(db_session, scenario.id)

        assert [row["vendor_id"] for row in outcome["details"]] == [vendor_a.id, cirrus.id, vendor_b.id]
        assert outcome["ranking_changed"] is True
        assert outcome["recommendation_changed"] is False

    def test_rerun_overwrites_results(
        self,
        db_session: Session,
        test_project: EvaluationProject,
        vendor_a: Vendor,
        baseline_tco: list
    ):
        scenario = sensitivity.create_scenario(db_session, test_project.id, "Flip", [
            adj("implementation_cost", "percent", 100),
        ])
        sensitivity.run_sensitivity_analysis(db_session, scenario.id)

        sensitivity.update_scenario(db_session, scenario.id, {"adjustments": []})
        cleared = sensitivity.get_scenario(db_session, scenario.id)
        assert cleared.get_results() == {}
        assert cleared.ranking_changed is False

        outcome = sensitivity.run_sensitivity_analysis(db_session, scenario.id)
        assert outcome["ranking_changed"] is False
        assert outcome["scenario"].get_results()[str(vendor_a.id)]["adjusted_tco"] == 20000

    def test_validate_adjustments_normalises_values(self):
        normalised = validate_adjustments([adj("license_cost", "percent", "15")])
        assert normalised == [{"variable": "license_cost", "adjustment_type": "percent", "value": 15.0}]
