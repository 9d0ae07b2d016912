"""Procurement models (Vendors, Purchase Orders)."""

from datetime import date

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BaseModel, BigIntPK


class Vendor(BaseModel):
    """Supplier we order parts from."""

    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(24), nullable=True)


class PurchaseOrder(BaseModel):
    """Purchase order placed with a vendor.

    Created by the ordering side; receiving only ever closes it.
    """

    __tablename__ = "purchase_orders"

    vendor_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("vendors.id"), nullable=False, index=True
    )

    # Null until the order has actually been sent to the vendor.
    order_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    remove_from_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    vendor: Mapped["Vendor"] = relationship("Vendor")
    lines: Mapped[list["PurchaseOrderLine"]] = relationship(
        "PurchaseOrderLine", back_populates="purchase_order", cascade="all, delete-orphan"
    )


class PurchaseOrderLine(Base):
    """Purchase order line item (one part, ordered quantity)."""

    __tablename__ = "purchase_order_lines"
    # Lines are addressed by part on the receiving screen
    __table_args__ = (
        UniqueConstraint("purchase_order_id", "part_id", name="uq_purchase_order_line_part"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    purchase_order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    part_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("parts.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    purchase_order: Mapped["PurchaseOrder"] = relationship(
        "PurchaseOrder", back_populates="lines"
    )
    part: Mapped["Part"] = relationship("Part")
