"""Create evaluation and financial analysis tables

Revision ID: 3f8a21c4d9e0
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f8a21c4d9e0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create projects, vendors, cost breakdowns, TCO summaries, scenarios, assumptions and ROI tables."""
    op.create_table(
        'evaluation_projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_evaluation_projects_id'), 'evaluation_projects', ['id'], unique=False)

    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('vendor_name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_vendors_evaluation_project_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vendors_id'), 'vendors', ['id'], unique=False)
    op.create_index(op.f('ix_vendors_evaluation_project_id'), 'vendors', ['evaluation_project_id'], unique=False)

    op.create_table(
        'vendor_cost_breakdowns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('cost_category', sa.String(length=50), nullable=False),
        sa.Column('cost_description', sa.String(length=255), nullable=True),
        sa.Column('year_1_cost', sa.Float(), nullable=True),
        sa.Column('year_2_cost', sa.Float(), nullable=True),
        sa.Column('year_3_cost', sa.Float(), nullable=True),
        sa.Column('year_4_cost', sa.Float(), nullable=True),
        sa.Column('year_5_cost', sa.Float(), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=True),
        sa.Column('is_estimated', sa.Boolean(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_cost_breakdowns_evaluation_project_id'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], name='fk_cost_breakdowns_vendor_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('evaluation_project_id', 'vendor_id', 'cost_category', 'cost_description',
                            name='uq_cost_breakdown_vendor_category_description')
    )
    op.create_index(op.f('ix_vendor_cost_breakdowns_id'), 'vendor_cost_breakdowns', ['id'], unique=False)
    op.create_index(op.f('ix_vendor_cost_breakdowns_evaluation_project_id'), 'vendor_cost_breakdowns',
                    ['evaluation_project_id'], unique=False)
    op.create_index(op.f('ix_vendor_cost_breakdowns_vendor_id'), 'vendor_cost_breakdowns',
                    ['vendor_id'], unique=False)

    op.create_table(
        'vendor_tco_summaries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('tco_years', sa.Integer(), nullable=False),
        sa.Column('discount_rate', sa.Float(), nullable=True),
        sa.Column('year_1_total', sa.Float(), nullable=True),
        sa.Column('year_2_total', sa.Float(), nullable=True),
        sa.Column('year_3_total', sa.Float(), nullable=True),
        sa.Column('year_4_total', sa.Float(), nullable=True),
        sa.Column('year_5_total', sa.Float(), nullable=True),
        sa.Column('total_tco', sa.Float(), nullable=True),
        sa.Column('npv_tco', sa.Float(), nullable=True),
        sa.Column('total_users', sa.Integer(), nullable=True),
        sa.Column('cost_per_user_per_year', sa.Float(), nullable=True),
        sa.Column('cost_per_user_per_month', sa.Float(), nullable=True),
        sa.Column('tco_rank', sa.Integer(), nullable=True),
        sa.Column('percent_vs_lowest', sa.Float(), nullable=True),
        sa.Column('calculated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_tco_summaries_evaluation_project_id'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], name='fk_tco_summaries_vendor_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('evaluation_project_id', 'vendor_id', name='uq_tco_summary_vendor')
    )
    op.create_index(op.f('ix_vendor_tco_summaries_id'), 'vendor_tco_summaries', ['id'], unique=False)
    op.create_index(op.f('ix_vendor_tco_summaries_evaluation_project_id'), 'vendor_tco_summaries',
                    ['evaluation_project_id'], unique=False)

    op.create_table(
        'sensitivity_scenarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('scenario_name', sa.String(length=255), nullable=False),
        sa.Column('scenario_description', sa.Text(), nullable=True),
        sa.Column('is_baseline', sa.Boolean(), nullable=True),
        sa.Column('adjustments_data', sa.Text(), nullable=False),
        sa.Column('results_data', sa.Text(), nullable=False),
        sa.Column('ranking_changed', sa.Boolean(), nullable=True),
        sa.Column('recommendation_changed', sa.Boolean(), nullable=True),
        sa.Column('analysis_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_sensitivity_scenarios_evaluation_project_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sensitivity_scenarios_id'), 'sensitivity_scenarios', ['id'], unique=False)
    op.create_index(op.f('ix_sensitivity_scenarios_evaluation_project_id'), 'sensitivity_scenarios',
                    ['evaluation_project_id'], unique=False)

    op.create_table(
        'financial_assumptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('assumption_name', sa.String(length=255), nullable=False),
        sa.Column('assumption_category', sa.String(length=50), nullable=False),
        sa.Column('assumption_value', sa.String(length=255), nullable=False),
        sa.Column('assumption_unit', sa.String(length=50), nullable=True),
        sa.Column('impact_description', sa.Text(), nullable=True),
        sa.Column('applies_to', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_financial_assumptions_evaluation_project_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('evaluation_project_id', 'assumption_name', name='uq_assumption_name')
    )
    op.create_index(op.f('ix_financial_assumptions_id'), 'financial_assumptions', ['id'], unique=False)
    op.create_index(op.f('ix_financial_assumptions_evaluation_project_id'), 'financial_assumptions',
                    ['evaluation_project_id'], unique=False)

    op.create_table(
        'roi_calculations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluation_project_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('year_1_benefits', sa.Float(), nullable=True),
        sa.Column('year_2_benefits', sa.Float(), nullable=True),
        sa.Column('year_3_benefits', sa.Float(), nullable=True),
        sa.Column('year_4_benefits', sa.Float(), nullable=True),
        sa.Column('year_5_benefits', sa.Float(), nullable=True),
        sa.Column('benefit_breakdown_data', sa.Text(), nullable=False),
        sa.Column('total_benefits', sa.Float(), nullable=True),
        sa.Column('total_costs', sa.Float(), nullable=True),
        sa.Column('net_benefit', sa.Float(), nullable=True),
        sa.Column('roi_percent', sa.Float(), nullable=True),
        sa.Column('payback_months', sa.Integer(), nullable=True),
        sa.Column('risk_adjustment_percent', sa.Float(), nullable=True),
        sa.Column('risk_adjusted_roi', sa.Float(), nullable=True),
        sa.Column('methodology_notes', sa.Text(), nullable=True),
        sa.Column('assumptions_used', sa.Text(), nullable=True),
        sa.Column('calculated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['evaluation_project_id'], ['evaluation_projects.id'],
                                name='fk_roi_calculations_evaluation_project_id'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], name='fk_roi_calculations_vendor_id'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('evaluation_project_id', 'vendor_id', name='uq_roi_vendor')
    )
    op.create_index(op.f('ix_roi_calculations_id'), 'roi_calculations', ['id'], unique=False)
    op.create_index(op.f('ix_roi_calculations_evaluation_project_id'), 'roi_calculations',
                    ['evaluation_project_id'], unique=False)


def downgrade() -> None:
    """Drop all financial analysis tables."""
    op.drop_index(op.f('ix_roi_calculations_evaluation_project_id'), table_name='roi_calculations')
    op.drop_index(op.f('ix_roi_calculations_id'), table_name='roi_calculations')
    op.drop_table('roi_calculations')

    op.drop_index(op.f('ix_financial_assumptions_evaluation_project_id'), table_name='financial_assumptions')
    op.drop_index(op.f('ix_financial_assumptions_id'), table_name='financial_assumptions')
    op.drop_table('financial_assumptions')

    op.drop_index(op.f('ix_sensitivity_scenarios_evaluation_project_id'), table_name='sensitivity_scenarios')
    op.drop_index(op.f('ix_sensitivity_scenarios_id'), table_name='sensitivity_scenarios')
    op.drop_table('sensitivity_scenarios')

    op.drop_index(op.f('ix_vendor_tco_summaries_evaluation_project_id'), table_name='vendor_tco_summaries')
    op.drop_index(op.f('ix_vendor_tco_summaries_id'), table_name='vendor_tco_summaries')
    op.drop_table('vendor_tco_summaries')

    op.drop_index(op.f('ix_vendor_cost_breakdowns_vendor_id'), table_name='vendor_cost_breakdowns')
    op.drop_index(op.f('ix_vendor_cost_breakdowns_evaluation_project_id'), table_name='vendor_cost_breakdowns')
    op.drop_index(op.f('ix_vendor_cost_breakdowns_id'), table_name='vendor_cost_breakdowns')
    op.drop_table('vendor_cost_breakdowns')

    op.drop_index(op.f('ix_vendors_evaluation_project_id'), table_name='vendors')
    op.drop_index(op.f('ix_vendors_id'), table_name='vendors')
    op.drop_table('vendors')

    op.drop_index(op.f('ix_evaluation_projects_id'), table_name='evaluation_projects')
    op.drop_table('evaluation_projects')
