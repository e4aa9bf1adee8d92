"""
Financial Analysis Models

This module defines database models for vendor financial analysis including:
- Itemized cost breakdowns per vendor and category (up to 5 years)
- Calculated TCO summaries with rankings
- Sensitivity (what-if) scenarios and their results
- Project-level financial assumptions
- ROI calculations with benefit breakdowns

It also holds the fixed category tables the engine dispatches on.
"""

import json
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Float, Boolean, ForeignKey, Text, DateTime, UniqueConstraint
)
from sqlalchemy.orm import relationship

from app.models import Base

YEARS = 5


# Cost categories: (key, label, description, typically recurring)
COST_CATEGORIES = {
    "license": {"label": "License Fees", "description": "Software license fees", "recurring": True},
    "implementation": {"label": "Implementation", "description": "Implementation/setup costs", "recurring": False},
    "data_migration": {"label": "Data Migration", "description": "Data migration costs", "recurring": False},
    "training": {"label": "Training", "description": "Training costs", "recurring": False},
    "support": {"label": "Support & Maintenance", "description": "Annual support/maintenance", "recurring": True},
    "infrastructure": {"label": "Infrastructure", "description": "Hardware/cloud infrastructure", "recurring": True},
    "integration": {"label": "Integration", "description": "Integration development", "recurring": False},
    "customization": {"label": "Customization", "description": "Customization/configuration", "recurring": False},
    "consulting": {"label": "Consulting", "description": "Professional services", "recurring": False},
    "travel": {"label": "Travel", "description": "Travel expenses", "recurring": False},
    "contingency": {"label": "Contingency", "description": "Contingency buffer", "recurring": False},
    "other": {"label": "Other", "description": "Other costs", "recurring": False},
}

RECURRING_CATEGORIES = [key for key, cfg in COST_CATEGORIES.items() if cfg["recurring"]]
ONE_TIME_CATEGORIES = [key for key, cfg in COST_CATEGORIES.items() if not cfg["recurring"]]

ADJUSTMENT_TYPES = ("percent", "fixed", "multiplier")

BENEFIT_CATEGORIES = {
    "efficiency": {"label": "Efficiency Gains", "description": "Time and productivity savings"},
    "cost_reduction": {"label": "Cost Reduction", "description": "Direct cost savings"},
    "revenue": {"label": "Revenue Impact", "description": "Revenue increases or protection"},
    "risk_mitigation": {"label": "Risk Mitigation", "description": "Risk reduction value"},
    "compliance": {"label": "Compliance", "description": "Regulatory compliance value"},
    "other": {"label": "Other Benefits", "description": "Other quantifiable benefits"},
}

ASSUMPTION_CATEGORIES = {
    "general": "General assumptions",
    "cost": "Cost-related assumptions",
    "timeline": "Timeline-related assumptions",
    "adoption": "User adoption assumptions",
    "growth": "Growth projections",
    "risk": "Risk factors",
    "discount": "Discount and inflation rates",
}


def _iso(value):
    return value.isoformat() if value else None


class CostBreakdown(Base):
    """
    Itemized cost entry for one vendor in one cost category.

    Attributes:
        cost_category: One of COST_CATEGORIES
        year_1_cost..year_5_cost: Non-negative yearly amounts (default 0)
        is_recurring: Whether this specific entry recurs
        is_estimated: Whether the figure is an estimate rather than a quote
        source: Where the cost came from (RFP response, negotiation, etc.)
    """
    __tablename__ = "vendor_cost_breakdowns"
    __table_args__ = (
        UniqueConstraint("evaluation_project_id", "vendor_id", "cost_category", "cost_description",
                         name="uq_cost_breakdown_vendor_category_description"),
    )

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    cost_category = Column(String(50), nullable=False)
    cost_description = Column(String(255), nullable=True)

    year_1_cost = Column(Float, default=0)
    year_2_cost = Column(Float, default=0)
    year_3_cost = Column(Float, default=0)
    year_4_cost = Column(Float, default=0)
    year_5_cost = Column(Float, default=0)

    is_recurring = Column(Boolean, default=False)
    is_estimated = Column(Boolean, default=True)

    notes = Column(Text, nullable=True)
    source = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    vendor = relationship("Vendor")

    def year_costs(self):
        """Return the five yearly amounts as a list, missing values as 0."""
        return [getattr(self, f"year_{i}_cost") or 0.0 for i in range(1, YEARS + 1)]

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "vendor_id": self.vendor_id,
            "vendor_name": self.vendor.vendor_name if self.vendor else None,
            "cost_category": self.cost_category,
            "cost_description": self.cost_description,
            **{f"year_{i}_cost": cost for i, cost in enumerate(self.year_costs(), start=1)},
            "is_recurring": self.is_recurring,
            "is_estimated": self.is_estimated,
            "notes": self.notes,
            "source": self.source,
        }


class TCOSummary(Base):
    """
    Calculated Total Cost of Ownership for one vendor.

    Derived from CostBreakdown rows and overwritten on every recalculation.
    tco_rank is 1 for the lowest total; percent_vs_lowest is 0 for rank 1.
    """
    __tablename__ = "vendor_tco_summaries"
    __table_args__ = (
        UniqueConstraint("evaluation_project_id", "vendor_id", name="uq_tco_summary_vendor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)

    tco_years = Column(Integer, nullable=False, default=3)
    discount_rate = Column(Float, default=0)

    year_1_total = Column(Float, default=0)
    year_2_total = Column(Float, default=0)
    year_3_total = Column(Float, default=0)
    year_4_total = Column(Float, default=0)
    year_5_total = Column(Float, default=0)

    total_tco = Column(Float, default=0)
    npv_tco = Column(Float, default=0)

    total_users = Column(Integer, nullable=True)
    cost_per_user_per_year = Column(Float, nullable=True)
    cost_per_user_per_month = Column(Float, nullable=True)

    tco_rank = Column(Integer, nullable=True)
    percent_vs_lowest = Column(Float, nullable=True)

    calculated_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    vendor = relationship("Vendor")

    def yearly_totals(self):
        return [getattr(self, f"year_{i}_total") or 0.0 for i in range(1, YEARS + 1)]

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "vendor_id": self.vendor_id,
            "vendor_name": self.vendor.vendor_name if self.vendor else None,
            "tco_years": self.tco_years,
            "discount_rate": self.discount_rate,
            **{f"year_{i}_total": total for i, total in enumerate(self.yearly_totals(), start=1)},
            "total_tco": self.total_tco,
            "npv_tco": self.npv_tco,
            "total_users": self.total_users,
            "cost_per_user_per_year": self.cost_per_user_per_year,
            "cost_per_user_per_month": self.cost_per_user_per_month,
            "tco_rank": self.tco_rank,
            "percent_vs_lowest": self.percent_vs_lowest,
            "calculated_at": _iso(self.calculated_at),
        }


class SensitivityScenario(Base):
    """
    What-if scenario applying ordered cost adjustments to the baseline TCO.

    adjustments and results are stored as JSON strings; use the
    get_/set_ helpers rather than the raw columns.
    """
    __tablename__ = "sensitivity_scenarios"

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)

    scenario_name = Column(String(255), nullable=False)
    scenario_description = Column(Text, nullable=True)
    is_baseline = Column(Boolean, default=False)

    adjustments_data = Column(Text, nullable=False, default="[]")  # JSON list
    results_data = Column(Text, nullable=False, default="{}")  # JSON object keyed by vendor id

    ranking_changed = Column(Boolean, default=False)
    recommendation_changed = Column(Boolean, default=False)
    analysis_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def get_adjustments(self):
        return json.loads(self.adjustments_data or "[]")

    def set_adjustments(self, adjustments):
        self.adjustments_data = json.dumps(adjustments)

    def get_results(self):
        return json.loads(self.results_data or "{}")

    def set_results(self, results):
        self.results_data = json.dumps(results)

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "scenario_name": self.scenario_name,
            "scenario_description": self.scenario_description,
            "is_baseline": self.is_baseline,
            "adjustments": self.get_adjustments(),
            "results": self.get_results(),
            "ranking_changed": self.ranking_changed,
            "recommendation_changed": self.recommendation_changed,
            "analysis_notes": self.analysis_notes,
            "created_at": _iso(self.created_at),
        }


class FinancialAssumption(Base):
    """Project-level financial assumption used to document calculations."""
    __tablename__ = "financial_assumptions"
    __table_args__ = (
        UniqueConstraint("evaluation_project_id", "assumption_name", name="uq_assumption_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)

    assumption_name = Column(String(255), nullable=False)
    assumption_category = Column(String(50), nullable=False)
    assumption_value = Column(String(255), nullable=False)
    assumption_unit = Column(String(50), nullable=True)  # %, years, users, currency, etc.
    impact_description = Column(Text, nullable=True)
    applies_to = Column(String(50), default="all")  # 'all' or a vendor id

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "assumption_name": self.assumption_name,
            "assumption_category": self.assumption_category,
            "assumption_value": self.assumption_value,
            "assumption_unit": self.assumption_unit,
            "impact_description": self.impact_description,
            "applies_to": self.applies_to,
        }


class ROICalculation(Base):
    """
    Return on Investment for one vendor.

    total_costs is copied from the vendor's TCOSummary.total_tco at
    calculation time. payback_months is None when cumulative benefit never
    catches up with cumulative cost inside the payback window.
    """
    __tablename__ = "roi_calculations"
    __table_args__ = (
        UniqueConstraint("evaluation_project_id", "vendor_id", name="uq_roi_vendor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    evaluation_project_id = Column(Integer, ForeignKey("evaluation_projects.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)

    year_1_benefits = Column(Float, default=0)
    year_2_benefits = Column(Float, default=0)
    year_3_benefits = Column(Float, default=0)
    year_4_benefits = Column(Float, default=0)
    year_5_benefits = Column(Float, default=0)

    benefit_breakdown_data = Column(Text, nullable=False, default="[]")  # JSON list

    total_benefits = Column(Float, default=0)
    total_costs = Column(Float, default=0)
    net_benefit = Column(Float, default=0)
    roi_percent = Column(Float, default=0)
    payback_months = Column(Integer, nullable=True)

    risk_adjustment_percent = Column(Float, default=0)
    risk_adjusted_roi = Column(Float, default=0)

    methodology_notes = Column(Text, nullable=True)
    assumptions_used = Column(Text, nullable=True)

    calculated_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    vendor = relationship("Vendor")

    def yearly_benefits(self):
        return [getattr(self, f"year_{i}_benefits") or 0.0 for i in range(1, YEARS + 1)]

    def get_benefit_breakdown(self):
        return json.loads(self.benefit_breakdown_data or "[]")

    def set_benefit_breakdown(self, breakdown):
        self.benefit_breakdown_data = json.dumps(breakdown)

    def to_dict(self):
        return {
            "id": self.id,
            "evaluation_project_id": self.evaluation_project_id,
            "vendor_id": self.vendor_id,
            "vendor_name": self.vendor.vendor_name if self.vendor else None,
            **{f"year_{i}_benefits": value for i, value in enumerate(self.yearly_benefits(), start=1)},
            "benefit_breakdown": self.get_benefit_breakdown(),
            "total_benefits": self.total_benefits,
            "total_costs": self.total_costs,
            "net_benefit": self.net_benefit,
            "roi_percent": self.roi_percent,
            "payback_months": self.payback_months,
            "risk_adjustment_percent": self.risk_adjustment_percent,
            "risk_adjusted_roi": self.risk_adjusted_roi,
            "methodology_notes": self.methodology_notes,
            "assumptions_used": self.assumptions_used,
            "calculated_at": _iso(self.calculated_at),
        }
