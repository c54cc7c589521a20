"""Initial schema

Revision ID: initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _user_fk():
    return sa.ForeignKey('users.id', ondelete='CASCADE')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False, unique=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(), nullable=True),
        sa.Column('height_cm', sa.Float(), nullable=True),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('activity_level', sa.String(), nullable=True),
        sa.Column('goal_type', sa.String(), nullable=True),
        sa.Column('target_weight', sa.Float(), nullable=True),
        sa.Column('target_date', sa.Date(), nullable=True),
        sa.Column('dietary_restrictions', sa.JSON(), nullable=True),
        sa.Column('allergies', sa.JSON(), nullable=True),
        sa.Column('medical_conditions', sa.JSON(), nullable=True),
        sa.Column('fitness_level', sa.String(), nullable=True),
        sa.Column('preferred_workout_days', sa.JSON(), nullable=True),
        sa.Column('weekly_workout_goal', sa.Integer(), nullable=True),
        sa.Column('water_intake_goal', sa.Float(), nullable=True),
        sa.Column('sleep_goal', sa.Float(), nullable=True),
        sa.Column('meal_prep_preference', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_profiles_id', 'user_profiles', ['id'])

    op.create_table(
        'user_goals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False, unique=True),
        sa.Column('target_calories', sa.Float(), nullable=True),
        sa.Column('target_protein_ratio', sa.Float(), nullable=True),
        sa.Column('target_carbs_ratio', sa.Float(), nullable=True),
        sa.Column('target_fat_ratio', sa.Float(), nullable=True),
        sa.Column('target_weight_kg', sa.Float(), nullable=True),
        sa.Column('target_date', sa.Date(), nullable=True),
        sa.Column('weekly_workout_goal', sa.Integer(), nullable=True),
        sa.Column('water_intake_goal', sa.Float(), nullable=True),
        sa.Column('sleep_goal', sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_goals_id', 'user_goals', ['id'])

    op.create_table(
        'user_preferences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False, unique=True),
        sa.Column('preferences', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_preferences_id', 'user_preferences', ['id'])

    op.create_table(
        'meal_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False),
        sa.Column('meal_type', sa.String(), nullable=False),
        sa.Column('meal_date', sa.Date(), nullable=True),
        sa.Column('meal_time', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('total_calories', sa.Float(), nullable=False),
        sa.Column('total_protein', sa.Float(), nullable=True),
        sa.Column('total_carbs', sa.Float(), nullable=True),
        sa.Column('total_fat', sa.Float(), nullable=True),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_meal_logs_id', 'meal_logs', ['id'])
    op.create_index('ix_meal_logs_user_id', 'meal_logs', ['user_id'])
    op.create_index('ix_meal_logs_meal_date', 'meal_logs', ['meal_date'])
    op.create_index('ix_meal_logs_created_at', 'meal_logs', ['created_at'])

    op.create_table(
        'meal_food_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'meal_log_id',
            sa.Integer(),
            sa.ForeignKey('meal_logs.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('calories', sa.Float(), nullable=True),
        sa.Column('protein', sa.Float(), nullable=True),
        sa.Column('carbs', sa.Float(), nullable=True),
        sa.Column('fat', sa.Float(), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=True),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('barcode', sa.String(), nullable=True),
    )
    op.create_index('ix_meal_food_items_id', 'meal_food_items', ['id'])
    op.create_index('ix_meal_food_items_meal_log_id', 'meal_food_items', ['meal_log_id'])

    op.create_table(
        'food_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('calories', sa.Float(), nullable=True),
        sa.Column('protein', sa.Float(), nullable=True),
        sa.Column('carbs', sa.Float(), nullable=True),
        sa.Column('fat', sa.Float(), nullable=True),
        sa.Column('serving_size', sa.Float(), nullable=True),
        sa.Column('serving_unit', sa.String(), nullable=True),
        sa.Column('barcode', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_food_items_id', 'food_items', ['id'])
    op.create_index('ix_food_items_name', 'food_items', ['name'])
    op.create_index('ix_food_items_barcode', 'food_items', ['barcode'], unique=True)

    op.create_table(
        'weight_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_weight_logs_id', 'weight_logs', ['id'])
    op.create_index('ix_weight_logs_user_id', 'weight_logs', ['user_id'])
    op.create_index('ix_weight_logs_created_at', 'weight_logs', ['created_at'])

    op.create_table(
        'chat_interactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), _user_fk(), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('response', sa.JSON(), nullable=True),
        sa.Column('is_bot', sa.Boolean(), nullable=False),
        sa.Column('confirmed', sa.Boolean(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_chat_interactions_id', 'chat_interactions', ['id'])
    op.create_index('ix_chat_interactions_user_id', 'chat_interactions', ['user_id'])
    op.create_index('ix_chat_interactions_created_at', 'chat_interactions', ['created_at'])


def downgrade() -> None:
    op.drop_table('chat_interactions')
    op.drop_table('weight_logs')
    op.drop_table('food_items')
    op.drop_table('meal_food_items')
    op.drop_table('meal_logs')
    op.drop_table('user_preferences')
    op.drop_table('user_goals')
    op.drop_table('user_profiles')
    op.drop_table('users')
