"""Receiving ledger models.

Every commit writes one ReceiptEvent plus its receipt, return and unordered
item rows. Rows are never updated afterwards; order line totals are always
summed from them.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BigIntPK, CreatedAtMixin


class ReceiptEvent(CreatedAtMixin, Base):
    """One receiving commit against a purchase order."""

    __tablename__ = "receipt_events"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    receipt_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    purchase_order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("purchase_orders.id"), nullable=False, index=True
    )
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    employee_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    remove_from_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    purchase_order: Mapped["PurchaseOrder"] = relationship("PurchaseOrder")
    receipt_lines: Mapped[list["ReceiptLine"]] = relationship(
        "ReceiptLine", back_populates="receipt_event", cascade="all, delete-orphan"
    )
    return_lines: Mapped[list["ReturnLine"]] = relationship(
        "ReturnLine", back_populates="receipt_event", cascade="all, delete-orphan"
    )
    unordered_items: Mapped[list["UnorderedItemRecord"]] = relationship(
        "UnorderedItemRecord", back_populates="receipt_event", cascade="all, delete-orphan"
    )


class ReceiptLine(Base):
    """Quantity of one order line received in a receipt event."""

    __tablename__ = "receipt_lines"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    receipt_event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("receipt_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_order_line_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("purchase_order_lines.id"), nullable=False, index=True
    )
    quantity_received: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    receipt_event: Mapped["ReceiptEvent"] = relationship(
        "ReceiptEvent", back_populates="receipt_lines"
    )
    purchase_order_line: Mapped["PurchaseOrderLine"] = relationship("PurchaseOrderLine")


class ReturnLine(Base):
    """Quantity of one order line sent back to the vendor, with reason."""

    __tablename__ = "return_lines"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    receipt_event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("receipt_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_order_line_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("purchase_order_lines.id"), nullable=False, index=True
    )
    item_description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relationships
    receipt_event: Mapped["ReceiptEvent"] = relationship(
        "ReceiptEvent", back_populates="return_lines"
    )
    purchase_order_line: Mapped["PurchaseOrderLine"] = relationship("PurchaseOrderLine")


class UnorderedItemRecord(Base):
    """Item that arrived with a delivery but was never on the order."""

    __tablename__ = "unordered_items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    receipt_event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("receipt_events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(100), nullable=False)
    vendor_part_number: Mapped[str] = mapped_column(String(25), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    remove_from_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    receipt_event: Mapped["ReceiptEvent"] = relationship(
        "ReceiptEvent", back_populates="unordered_items"
    )
