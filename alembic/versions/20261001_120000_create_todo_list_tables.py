"""Create user_profiles, notion_database and todo_list tables.

Revision ID: 3c1f9a7e2b10
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7e2b10'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('subscription_tier', sa.String(length=32), nullable=True),
        sa.Column('subscription_status', sa.String(length=32), nullable=True),
        sa.Column('stripe_customer_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('ix_user_profiles_stripe_customer_id', 'user_profiles', ['stripe_customer_id'])

    op.create_table(
        'notion_database',
        sa.Column('notion_database_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('notion_database_id'),
    )
    op.create_index('ix_notion_database_user_id', 'notion_database', ['user_id'])

    op.create_table(
        'todo_list',
        sa.Column('todo_list_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('notion_database_id', sa.String(length=64), nullable=True),
        sa.Column('notion_sync_database_id', sa.String(length=64), nullable=True),
        sa.Column('last_sync_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('extraction_metadata', JSON_TYPE, nullable=True),
        sa.Column('last_extracted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(
            ['notion_database_id'],
            ['notion_database.notion_database_id'],
            ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('todo_list_id'),
    )
    op.create_index('ix_todo_list_user_id', 'todo_list', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_todo_list_user_id', table_name='todo_list')
    op.drop_table('todo_list')
    op.drop_index('ix_notion_database_user_id', table_name='notion_database')
    op.drop_table('notion_database')
    op.drop_index('ix_user_profiles_stripe_customer_id', table_name='user_profiles')
    op.drop_table('user_profiles')
