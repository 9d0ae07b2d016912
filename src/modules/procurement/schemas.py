"""Schemas for Procurement module (Purchase Orders)."""

from datetime import date

from src.shared.schemas.base import BaseSchema


class PurchaseOrderSummary(BaseSchema):
    """Open purchase order as listed for receiving."""

    purchase_order_id: int
    order_date: date | None
    vendor: str
    contact_number: str | None


class PurchaseOrderHeader(BaseSchema):
    """Header shown above the receiving lines."""

    purchase_order_id: int
    order_date: date | None
    vendor: str
    contact_number: str
