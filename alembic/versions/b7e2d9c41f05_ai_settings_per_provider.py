"""ai settings per provider

Revision ID: b7e2d9c41f05
Revises: a1f4c2e8b7d3
Create Date: 2026-04-14 10:30:00.000000

Keeps one user_ai_settings row per (user, provider) so switching provider
no longer discards the saved key of the previous one. Adds is_active to
mark the row in use and a structure_prompt override for text structuring.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7e2d9c41f05'
down_revision: Union[str, None] = 'a1f4c2e8b7d3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        'user_ai_settings',
        sa.Column('structure_prompt', sa.Text(), nullable=True),
    )
    op.add_column(
        'user_ai_settings',
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    # Postgres default name for the unnamed UNIQUE(user_id) of the initial schema
    op.drop_constraint('user_ai_settings_user_id_key', 'user_ai_settings', type_='unique')
    op.create_unique_constraint(
        'uq_user_ai_settings_user_provider', 'user_ai_settings', ['user_id', 'provider']
    )
    op.create_index(op.f('ix_user_ai_settings_user_id'), 'user_ai_settings', ['user_id'])


def downgrade() -> None:
    # Only the active row of each user survives the return to one row per user
    op.execute('DELETE FROM user_ai_settings WHERE is_active = false')
    op.drop_index(op.f('ix_user_ai_settings_user_id'), table_name='user_ai_settings')
    op.drop_constraint('uq_user_ai_settings_user_provider', 'user_ai_settings', type_='unique')
    op.create_unique_constraint('user_ai_settings_user_id_key', 'user_ai_settings', ['user_id'])
    op.drop_column('user_ai_settings', 'is_active')
    op.drop_column('user_ai_settings', 'structure_prompt')
