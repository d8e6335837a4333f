"""initial inventory schema

Revision ID: a1f4c2e8b7d3
Revises:
Create Date: 2026-03-02 09:00:00.000000

Creates users, locations and memberships, areas, bins with their items,
the activity log and per-user AI settings.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1f4c2e8b7d3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'locations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('activity_retention_days', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
    )

    op.create_table(
        'location_members',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('location_id', 'user_id'),
    )
    op.create_index(op.f('ix_location_members_location_id'), 'location_members', ['location_id'])
    op.create_index(op.f('ix_location_members_user_id'), 'location_members', ['user_id'])

    op.create_table(
        'areas',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index(op.f('ix_areas_location_id'), 'areas', ['location_id'])

    op.create_table(
        'bins',
        # 6-character short code from the QR label
        sa.Column('id', sa.String(length=8), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('area_id', sa.String(length=36), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('icon', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=False),
        sa.Column('card_style', sa.String(length=500), nullable=False),
        sa.Column('visibility', sa.String(length=20), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['area_id'], ['areas.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index(op.f('ix_bins_location_id'), 'bins', ['location_id'])

    op.create_table(
        'bin_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('bin_id', sa.String(length=8), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['bin_id'], ['bins.id'], ondelete='CASCADE'),
    )
    op.create_index(op.f('ix_bin_items_bin_id'), 'bin_items', ['bin_id'])

    op.create_table(
        'activity_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('user_name', sa.String(length=255), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.String(length=36), nullable=True),
        sa.Column('entity_name', sa.String(length=255), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('auth_method', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
    )
    # Merge lookups and the retention sweep both scan by location + age
    op.create_index(
        'ix_activity_log_location_created',
        'activity_log',
        ['location_id', 'created_at'],
    )

    op.create_table(
        'user_ai_settings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('api_key', sa.Text(), nullable=False),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('endpoint_url', sa.String(length=2048), nullable=True),
        sa.Column('command_prompt', sa.Text(), nullable=True),
        sa.Column('query_prompt', sa.Text(), nullable=True),
        sa.Column('temperature', sa.Float(), nullable=True),
        sa.Column('max_tokens', sa.Integer(), nullable=True),
        sa.Column('top_p', sa.Float(), nullable=True),
        sa.Column('request_timeout', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id'),
    )


def downgrade() -> None:
    op.drop_table('user_ai_settings')
    op.drop_index('ix_activity_log_location_created', table_name='activity_log')
    op.drop_table('activity_log')
    op.drop_index(op.f('ix_bin_items_bin_id'), table_name='bin_items')
    op.drop_table('bin_items')
    op.drop_index(op.f('ix_bins_location_id'), table_name='bins')
    op.drop_table('bins')
    op.drop_index(op.f('ix_areas_location_id'), table_name='areas')
    op.drop_table('areas')
    op.drop_index(op.f('ix_location_members_user_id'), table_name='location_members')
    op.drop_index(op.f('ix_location_members_location_id'), table_name='location_members')
    op.drop_table('location_members')
    op.drop_table('locations')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
