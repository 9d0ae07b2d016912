"""Quantity ledger reader.

Order line totals are never stored; they are summed from receipt and return
rows every time they are read.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.modules.inventory.models import Part
from src.modules.procurement.models import PurchaseOrderLine
from src.modules.receiving.models import ReceiptEvent, ReceiptLine, ReturnLine
from src.modules.receiving.schemas import OrderLineSnapshot


def _ledger_query(po_id: int):
    received_to_date = (
        select(func.coalesce(func.sum(ReceiptLine.quantity_received), 0))
        .where(ReceiptLine.purchase_order_line_id == PurchaseOrderLine.id)
        .correlate(PurchaseOrderLine)
        .scalar_subquery()
    )
    returned_to_date = (
        select(func.coalesce(func.sum(ReturnLine.quantity), 0))
        .where(ReturnLine.purchase_order_line_id == PurchaseOrderLine.id)
        .correlate(PurchaseOrderLine)
        .scalar_subquery()
    )
    last_return_reason = (
        select(ReturnLine.reason)
        .where(ReturnLine.purchase_order_line_id == PurchaseOrderLine.id)
        .order_by(ReturnLine.id.desc())
        .limit(1)
        .correlate(PurchaseOrderLine)
        .scalar_subquery()
    )
    return (
        select(
            PurchaseOrderLine.id,
            PurchaseOrderLine.purchase_order_id,
            PurchaseOrderLine.part_id,
            PurchaseOrderLine.quantity,
            Part.description,
            received_to_date.label("received_to_date"),
            returned_to_date.label("returned_to_date"),
            last_return_reason.label("last_return_reason"),
        )
        .join(Part, Part.id == PurchaseOrderLine.part_id)
        .where(PurchaseOrderLine.purchase_order_id == po_id)
        .order_by(PurchaseOrderLine.part_id, PurchaseOrderLine.id)
    )


class LedgerReader:
    """Reads order line totals from the receipt/return ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order_lines(self, po_id: int, *, fresh: bool = False) -> list[OrderLineSnapshot]:
        """
        Current read model for every line of an order, ordered by part.

        fresh=True drops everything the session has cached before querying;
        use it after a commit or reset. Callers must not touch previously
        loaded ORM instances without reloading them afterwards.
        An order without lines gives an empty list.
        """
        query = _ledger_query(po_id)
        if fresh:
            self.db.expire_all()
            query = query.execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return [
            OrderLineSnapshot(
                purchase_order_id=row.purchase_order_id,
                purchase_order_line_id=row.id,
                part_id=row.part_id,
                description=row.description,
                order_qty=row.quantity,
                received_to_date=int(row.received_to_date or 0),
                returned_to_date=int(row.returned_to_date or 0),
                last_return_reason=row.last_return_reason or "",
            )
            for row in result.all()
        ]

    async def outstanding_by_line(self, po_id: int) -> dict[int, int]:
        """{order line id: outstanding} read straight from the ledger."""
        lines = await self.get_order_lines(po_id)
        return {line.purchase_order_line_id: line.outstanding for line in lines}

    async def get_receipt_history(self, po_id: int) -> list[ReceiptEvent]:
        """Receipt events of an order with their postings, newest first."""
        result = await self.db.execute(
            select(ReceiptEvent)
            .where(
                ReceiptEvent.purchase_order_id == po_id,
                ReceiptEvent.remove_from_view.is_(False),
            )
            .options(
                selectinload(ReceiptEvent.receipt_lines),
                selectinload(ReceiptEvent.return_lines),
                selectinload(ReceiptEvent.unordered_items),
            )
            .order_by(ReceiptEvent.received_at.desc(), ReceiptEvent.id.desc())
        )
        return list(result.scalars().all())
