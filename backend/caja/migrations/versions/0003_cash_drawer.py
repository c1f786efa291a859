"""Cash drawer state and movements

Revision ID: 0003_cash_drawer
Revises: 0002_app_settings
Create Date: 2025-11-24
"""

from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0003_cash_drawer"
down_revision = "0002_app_settings"
branch_labels = None
depends_on = None


def upgrade():
    cash_state = op.create_table(
        "cash_state",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("denominations_json", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_cash_state_singleton"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cash_movements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("denominations_json", sa.Text(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.CheckConstraint("type IN ('IN', 'OUT')", name="ck_cash_movements_type"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cash_movements_created_at", "cash_movements", ["created_at"], unique=False)

    # Empty drawer
    op.bulk_insert(
        cash_state,
        [{
            "id": 1,
            "denominations_json": "{}",
            "updated_at": datetime.now(timezone.utc).replace(tzinfo=None),
        }],
    )


def downgrade():
    op.drop_index("ix_cash_movements_created_at", table_name="cash_movements")
    op.drop_table("cash_movements")
    op.drop_table("cash_state")
