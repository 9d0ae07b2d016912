"""001 - Vendors, parts, purchase orders and the receiving ledger

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "vendors",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=24), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vendors_name", "vendors", ["name"])

    op.create_table(
        "parts",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("vendor_part_number", sa.String(length=50), nullable=True),
        sa.Column("quantity_on_hand", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity_on_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("vendor_id", sa.BigInteger(), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=True),
        sa.Column("closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("remove_from_view", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
    )
    op.create_index("ix_purchase_orders_vendor_id", "purchase_orders", ["vendor_id"])
    op.create_index("ix_purchase_orders_order_date", "purchase_orders", ["order_date"])
    op.create_index("ix_purchase_orders_closed", "purchase_orders", ["closed"])

    op.create_table(
        "purchase_order_lines",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("purchase_order_id", sa.BigInteger(), nullable=False),
        sa.Column("part_id", sa.BigInteger(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["purchase_order_id"], ["purchase_orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["part_id"], ["parts.id"]),
        sa.UniqueConstraint("purchase_order_id", "part_id", name="uq_purchase_order_line_part"),
    )
    op.create_index(
        "ix_purchase_order_lines_purchase_order_id", "purchase_order_lines", ["purchase_order_id"]
    )
    op.create_index("ix_purchase_order_lines_part_id", "purchase_order_lines", ["part_id"])

    op.create_table(
        "receipt_events",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("receipt_number", sa.String(length=50), nullable=False),
        sa.Column("purchase_order_id", sa.BigInteger(), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("remove_from_view", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["purchase_order_id"], ["purchase_orders.id"]),
    )
    op.create_index("ix_receipt_events_receipt_number", "receipt_events", ["receipt_number"], unique=True)
    op.create_index("ix_receipt_events_purchase_order_id", "receipt_events", ["purchase_order_id"])
    op.create_index("ix_receipt_events_employee_id", "receipt_events", ["employee_id"])

    op.create_table(
        "receipt_lines",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("receipt_event_id", sa.BigInteger(), nullable=False),
        sa.Column("purchase_order_line_id", sa.BigInteger(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["receipt_event_id"], ["receipt_events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["purchase_order_line_id"], ["purchase_order_lines.id"]),
    )
    op.create_index("ix_receipt_lines_receipt_event_id", "receipt_lines", ["receipt_event_id"])
    op.create_index(
        "ix_receipt_lines_purchase_order_line_id", "receipt_lines", ["purchase_order_line_id"]
    )

    op.create_table(
        "return_lines",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("receipt_event_id", sa.BigInteger(), nullable=False),
        sa.Column("purchase_order_line_id", sa.BigInteger(), nullable=False),
        sa.Column("item_description", sa.String(length=200), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=200), nullable=False),
        sa.ForeignKeyConstraint(["receipt_event_id"], ["receipt_events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["purchase_order_line_id"], ["purchase_order_lines.id"]),
    )
    op.create_index("ix_return_lines_receipt_event_id", "return_lines", ["receipt_event_id"])
    op.create_index(
        "ix_return_lines_purchase_order_line_id", "return_lines", ["purchase_order_line_id"]
    )

    op.create_table(
        "unordered_items",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("receipt_event_id", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.String(length=100), nullable=False),
        sa.Column("vendor_part_number", sa.String(length=25), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("remove_from_view", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["receipt_event_id"], ["receipt_events.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_unordered_items_receipt_event_id", "unordered_items", ["receipt_event_id"])

    op.create_table(
        "document_sequences",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("prefix", sa.String(length=20), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("last_number", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("prefix", "year", name="uq_document_sequence_prefix_year"),
        sa.CheckConstraint(
            "last_number >= 0", name="ck_document_sequences_last_number_not_negative"
        ),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.String(length=50), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.BigInteger(), nullable=False),
        sa.Column("entity_identifier", sa.String(length=200), nullable=True),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_employee_id", "audit_logs", ["employee_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("document_sequences")
    op.drop_table("unordered_items")
    op.drop_table("return_lines")
    op.drop_table("receipt_lines")
    op.drop_table("receipt_events")
    op.drop_table("purchase_order_lines")
    op.drop_table("purchase_orders")
    op.drop_table("parts")
    op.drop_table("vendors")
