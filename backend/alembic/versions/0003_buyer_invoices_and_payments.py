"""Buyer tax invoices and per-lot payment tracking.

Revision ID: 0003
Revises: 0002
"""

import sqlalchemy as sa
from alembic import op

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "lots", sa.Column("payment_status", sa.String(20), server_default="pending")
    )
    op.add_column("lots", sa.Column("amount_due", sa.Numeric(12, 2)))
    op.add_column("lots", sa.Column("amount_paid", sa.Numeric(12, 2), server_default="0"))
    op.add_column("lots", sa.Column("payment_date", sa.Date()))
    op.add_column(
        "lots", sa.Column("bill_generated", sa.Boolean(), server_default=sa.false())
    )
    op.add_column("lots", sa.Column("bill_generated_at", sa.DateTime()))

    op.create_table(
        "tax_invoices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("invoice_number", sa.String(50), nullable=False, unique=True),
        sa.Column("buyer_id", sa.String(36), sa.ForeignKey("buyers.id"), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("lot_ids", sa.JSON()),
        sa.Column("total_bags", sa.Integer(), server_default="0"),
        sa.Column("total_weight", sa.Numeric(12, 2), server_default="0"),
        sa.Column("basic_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("packaging", sa.Numeric(12, 2), server_default="0"),
        sa.Column("weighing_charges", sa.Numeric(12, 2), server_default="0"),
        sa.Column("commission", sa.Numeric(12, 2), server_default="0"),
        sa.Column("taxable_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("cess_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("sgst_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("cgst_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total_tax_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("created_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("buyer_id", "invoice_date", name="uq_tax_invoices_buyer_date"),
    )
    op.create_index("ix_tax_invoices_buyer_id", "tax_invoices", ["buyer_id"])
    op.create_index("ix_tax_invoices_invoice_date", "tax_invoices", ["invoice_date"])


def downgrade() -> None:
    op.drop_table("tax_invoices")
    for column in (
        "bill_generated_at", "bill_generated", "payment_date",
        "amount_paid", "amount_due", "payment_status",
    ):
        op.drop_column("lots", column)
