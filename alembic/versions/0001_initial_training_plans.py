"""create training plan tables

Revision ID: 0001_initial_training_plans
Revises:
Create Date: 2026-10-17 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_training_plans'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'exercise_variants',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contraindication_tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_exercise_variants_id', 'exercise_variants', ['id'])

    op.create_table(
        'exercise_library',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_exercise_library_id', 'exercise_library', ['id'])
    op.create_index('ix_exercise_library_name', 'exercise_library', ['name'])

    op.create_table(
        'plan_templates',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('goal', sa.String(length=32), nullable=False),
        sa.Column('experience_level', sa.String(length=32), nullable=False),
        sa.Column('days_per_week', sa.Integer(), nullable=False),
        sa.Column('session_minutes', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_built_in', sa.Boolean(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_plan_templates_id', 'plan_templates', ['id'])
    op.create_index('ix_plan_templates_slug', 'plan_templates', ['slug'], unique=True)
    op.create_index('ix_plan_templates_goal', 'plan_templates', ['goal'])
    op.create_index('ix_plan_templates_experience_level', 'plan_templates', ['experience_level'])
    op.create_index('ix_plan_templates_user_id', 'plan_templates', ['user_id'])

    op.create_table(
        'plan_blocks',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            'plan_template_id', sa.Integer(), sa.ForeignKey('plan_templates.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('block_order', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('weeks', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_plan_blocks_id', 'plan_blocks', ['id'])
    op.create_index('ix_plan_blocks_plan_template_id', 'plan_blocks', ['plan_template_id'])

    op.create_table(
        'plan_weeks',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            'plan_template_id', sa.Integer(), sa.ForeignKey('plan_templates.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('block_id', sa.Integer(), sa.ForeignKey('plan_blocks.id', ondelete='SET NULL'), nullable=True),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_plan_weeks_id', 'plan_weeks', ['id'])
    op.create_index('ix_plan_weeks_plan_template_id', 'plan_weeks', ['plan_template_id'])

    # day_of_week is not unique per week on purpose; duplicates are repaired in place
    op.create_table(
        'plan_days',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            'plan_template_id', sa.Integer(), sa.ForeignKey('plan_templates.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('week_id', sa.Integer(), sa.ForeignKey('plan_weeks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('focus', sa.String(length=255), nullable=False),
        sa.Column('estimated_minutes', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_plan_days_id', 'plan_days', ['id'])
    op.create_index('ix_plan_days_plan_template_id', 'plan_days', ['plan_template_id'])
    op.create_index('ix_plan_days_week_id', 'plan_days', ['week_id'])

    op.create_table(
        'plan_prescriptions',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('plan_day_id', sa.Integer(), sa.ForeignKey('plan_days.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column(
            'exercise_variant_id',
            sa.Integer(),
            sa.ForeignKey('exercise_variants.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'exercise_library_id',
            sa.Integer(),
            sa.ForeignKey('exercise_library.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('target_sets', sa.Integer(), nullable=False),
        sa.Column('target_reps', sa.String(length=32), nullable=False),
        sa.Column('target_rir', sa.Integer(), nullable=True),
        sa.Column('rest_seconds', sa.Integer(), nullable=True),
        sa.Column('notes', sa.String(length=512), nullable=True),
        sa.Column('substitution_tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_plan_prescriptions_id', 'plan_prescriptions', ['id'])
    op.create_index('ix_plan_prescriptions_plan_day_id', 'plan_prescriptions', ['plan_day_id'])

    op.create_table(
        'user_plan_instances',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column(
            'plan_template_id', sa.Integer(), sa.ForeignKey('plan_templates.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('gym_profile_id', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('goal', sa.String(length=32), nullable=False),
        sa.Column('days_per_week', sa.Integer(), nullable=False),
        sa.Column('session_minutes', sa.Integer(), nullable=False),
        sa.Column('exclusions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_plan_instances_id', 'user_plan_instances', ['id'])
    op.create_index('ix_user_plan_instances_user_id', 'user_plan_instances', ['user_id'])
    op.create_index('ix_user_plan_instances_status', 'user_plan_instances', ['status'])

    op.create_table(
        'user_plan_day_progress',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            'plan_instance_id',
            sa.Integer(),
            sa.ForeignKey('user_plan_instances.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('plan_day_id', sa.Integer(), sa.ForeignKey('plan_days.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('workout_id', sa.Integer(), nullable=True),
        sa.Column('progression_decision', sa.String(length=16), nullable=True),
        sa.Column('decision_reason', sa.String(length=512), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_plan_day_progress_id', 'user_plan_day_progress', ['id'])
    op.create_index('ix_user_plan_day_progress_plan_instance_id', 'user_plan_day_progress', ['plan_instance_id'])
    op.create_index('ix_user_plan_day_progress_user_id', 'user_plan_day_progress', ['user_id'])
    op.create_index('ix_user_plan_day_progress_plan_day_id', 'user_plan_day_progress', ['plan_day_id'])


def downgrade() -> None:
    op.drop_table('user_plan_day_progress')
    op.drop_table('user_plan_instances')
    op.drop_table('plan_prescriptions')
    op.drop_table('plan_days')
    op.drop_table('plan_weeks')
    op.drop_table('plan_blocks')
    op.drop_table('plan_templates')
    op.drop_table('exercise_library')
    op.drop_table('exercise_variants')
