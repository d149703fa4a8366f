"""Tenant schema: farmers, buyers, lots, bags, bills and audit trail.

Revision ID: 0002
Revises: (none, tenant branch root)
Create Date: 2026-10-19

Run with:
    # Tenant schema (all tables below):
    alembic -x schema=tenant -x tenant_schema=tenant_XXXXX upgrade tenant@head

    # Or for all tenants at once:
    python -m mandi.cli migrate-tenants
"""

revision = "0002"
down_revision = None
branch_labels = ("tenant",)
depends_on = None

from alembic import op
import sqlalchemy as sa


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by", sa.String(36)),
        sa.Column("updated_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ── Parties ──────────────────────────────────────────────

    op.create_table(
        "farmers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_as_in_bank", sa.String(255)),
        sa.Column("mobile", sa.String(20), nullable=False),
        sa.Column("place", sa.String(255), nullable=False),
        sa.Column("bank_name", sa.String(255)),
        sa.Column("account_number", sa.String(50)),
        sa.Column("ifsc_code", sa.String(20)),
        *_audit_columns(),
    )
    op.create_index("ix_farmers_mobile", "farmers", ["mobile"])

    op.create_table(
        "buyers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_person", sa.String(255)),
        sa.Column("mobile", sa.String(20)),
        sa.Column("address", sa.Text()),
        *_audit_columns(),
    )

    # ── Yard operations ──────────────────────────────────────

    op.create_table(
        "lots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("lot_number", sa.String(50), nullable=False, unique=True),
        sa.Column("farmer_id", sa.String(36), sa.ForeignKey("farmers.id"), nullable=False),
        sa.Column("buyer_id", sa.String(36), sa.ForeignKey("buyers.id")),
        sa.Column("number_of_bags", sa.Integer(), nullable=False),
        sa.Column("variety_grade", sa.String(100), nullable=False),
        sa.Column("lot_price", sa.Numeric(10, 2)),
        sa.Column("vehicle_rent", sa.Numeric(10, 2)),
        sa.Column("advance", sa.Numeric(10, 2)),
        sa.Column("unload_hamali", sa.Numeric(10, 2)),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("completed_at", sa.DateTime()),
        *_audit_columns(),
    )
    op.create_index("ix_lots_farmer_id", "lots", ["farmer_id"])
    op.create_index("ix_lots_status", "lots", ["status"])
    op.create_index("ix_lots_created_at", "lots", ["created_at"])

    op.create_table(
        "bags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "lot_id", sa.String(36),
            sa.ForeignKey("lots.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("bag_number", sa.Integer(), nullable=False),
        sa.Column("weight", sa.Numeric(8, 2)),
        sa.Column("grade", sa.String(50)),
        sa.Column("notes", sa.Text()),
        *_audit_columns(),
        sa.UniqueConstraint("lot_id", "bag_number", name="uq_bags_lot_bag_number"),
    )
    op.create_index("ix_bags_lot_id", "bags", ["lot_id"])
    op.create_index("ix_bags_created_at", "bags", ["created_at"])

    # ── Settlement & audit ───────────────────────────────────

    op.create_table(
        "farmer_bills",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("patti_number", sa.String(50), nullable=False, unique=True),
        sa.Column("farmer_id", sa.String(36), sa.ForeignKey("farmers.id"), nullable=False),
        sa.Column("bill_date", sa.Date(), nullable=False),
        sa.Column("lot_ids", sa.JSON()),
        sa.Column("total_bags", sa.Integer(), server_default="0"),
        sa.Column("total_weight", sa.Numeric(12, 2), server_default="0"),
        sa.Column("gross_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("commission", sa.Numeric(12, 2), server_default="0"),
        sa.Column("hamali", sa.Numeric(10, 2), server_default="0"),
        sa.Column("vehicle_rent", sa.Numeric(10, 2), server_default="0"),
        sa.Column("empty_bag_charges", sa.Numeric(10, 2), server_default="0"),
        sa.Column("advance", sa.Numeric(10, 2), server_default="0"),
        sa.Column("rok", sa.Numeric(10, 2), server_default="0"),
        sa.Column("other_charges", sa.Numeric(10, 2), server_default="0"),
        sa.Column("total_deductions", sa.Numeric(14, 2), server_default="0"),
        sa.Column("net_payable", sa.Numeric(14, 2), server_default="0"),
        sa.Column("created_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("farmer_id", "bill_date", name="uq_farmer_bills_farmer_date"),
    )
    op.create_index("ix_farmer_bills_farmer_id", "farmer_bills", ["farmer_id"])
    op.create_index("ix_farmer_bills_bill_date", "farmer_bills", ["bill_date"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50)),
        sa.Column("entity_id", sa.String(36)),
        sa.Column("old_data", sa.JSON()),
        sa.Column("new_data", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("farmer_bills")
    op.drop_table("bags")
    op.drop_table("lots")
    op.drop_table("buyers")
    op.drop_table("farmers")
