"""Service layer for Purchase Orders (read side used by receiving)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.exceptions import NotFoundError
from src.modules.procurement.models import PurchaseOrder, PurchaseOrderLine, Vendor
from src.modules.procurement.schemas import PurchaseOrderHeader, PurchaseOrderSummary


def _open_and_visible():
    """Orders that receiving may work on: sent, not closed, not hidden."""
    return (
        PurchaseOrder.closed.is_(False),
        PurchaseOrder.order_date.is_not(None),
        PurchaseOrder.remove_from_view.is_(False),
    )


class PurchaseOrderService:
    """Service for purchase orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_open_orders(self) -> list[PurchaseOrderSummary]:
        """Open orders, most recent first, then vendor name, then order id."""
        result = await self.db.execute(
            select(PurchaseOrder.id, PurchaseOrder.order_date, Vendor.name, Vendor.phone)
            .join(Vendor, PurchaseOrder.vendor_id == Vendor.id)
            .where(*_open_and_visible())
            .order_by(
                PurchaseOrder.order_date.desc(),
                Vendor.name,
                PurchaseOrder.id,
            )
        )
        return [
            PurchaseOrderSummary(
                purchase_order_id=row.id,
                order_date=row.order_date,
                vendor=row.name,
                contact_number=row.phone,
            )
            for row in result.all()
        ]

    async def get_order_header(self, po_id: int) -> PurchaseOrderHeader | None:
        """Header for an open, visible order; None otherwise."""
        result = await self.db.execute(
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id, *_open_and_visible())
            .options(selectinload(PurchaseOrder.vendor))
        )
        purchase_order = result.scalar_one_or_none()
        if purchase_order is None:
            return None

        vendor = purchase_order.vendor
        return PurchaseOrderHeader(
            purchase_order_id=purchase_order.id,
            order_date=purchase_order.order_date,
            vendor=vendor.name if vendor and vendor.name else "Unknown Vendor",
            contact_number=vendor.phone if vendor and vendor.phone else "N/A",
        )

    async def get_purchase_order_by_id(
        self, po_id: int, *, for_update: bool = False
    ) -> PurchaseOrder:
        """Get purchase order by ID, optionally locking its row."""
        query = (
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id)
            .options(selectinload(PurchaseOrder.lines))
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        purchase_order = result.scalar_one_or_none()
        if not purchase_order:
            raise NotFoundError("Purchase order", po_id)
        return purchase_order

    async def get_order_lines(self, po_id: int) -> list[PurchaseOrderLine]:
        """Persisted order lines of an order, by part."""
        result = await self.db.execute(
            select(PurchaseOrderLine)
            .where(PurchaseOrderLine.purchase_order_id == po_id)
            .order_by(PurchaseOrderLine.part_id, PurchaseOrderLine.id)
        )
        return list(result.scalars().all())
