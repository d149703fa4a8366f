"""Public schema: tenant registry.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19

Run with:
    alembic upgrade public@head
"""

revision = "0001"
down_revision = None
branch_labels = ("public",)
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("apmc_code", sa.String(50), nullable=False, unique=True),
        sa.Column("schema_name", sa.String(50), nullable=False, unique=True),
        sa.Column("place", sa.String(255)),
        sa.Column("mobile_number", sa.String(20)),
        sa.Column("gst_number", sa.String(20)),
        sa.Column("pan_number", sa.String(20)),
        sa.Column("address", sa.Text()),
        sa.Column("settings", sa.JSON()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_tenants_schema_name", "tenants", ["schema_name"])


def downgrade() -> None:
    op.drop_index("ix_tenants_schema_name", table_name="tenants")
    op.drop_table("tenants")
