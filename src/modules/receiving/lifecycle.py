"""Purchase order lifecycle: Open -> Closed, either automatically or forced."""

import logging
from collections.abc import Mapping
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import OrderClosedError, ValidationError
from src.modules.inventory.service import PartService
from src.modules.procurement.models import PurchaseOrder
from src.modules.receiving.schemas import OrderLineSnapshot

logger = logging.getLogger(__name__)

AUTO_CLOSE_NOTE = "PO auto-closed: all items received."


class PurchaseOrderState(StrEnum):
    """Purchase order state as seen by receiving."""

    OPEN = "open"
    CLOSED = "closed"


def state_of(purchase_order: PurchaseOrder) -> PurchaseOrderState:
    return PurchaseOrderState.CLOSED if purchase_order.closed else PurchaseOrderState.OPEN


def should_auto_close(outstanding_by_line: Mapping[int, int]) -> bool:
    """True when the order has lines and none of them is outstanding."""
    return bool(outstanding_by_line) and all(
        outstanding == 0 for outstanding in outstanding_by_line.values()
    )


class PurchaseOrderLifecycle:
    """Drives the Open -> Closed transitions. Closed is terminal.

    Mutations join the caller's transaction; nothing here commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.parts = PartService(db)

    def ensure_open(self, purchase_order: PurchaseOrder) -> None:
        if state_of(purchase_order) is PurchaseOrderState.CLOSED:
            raise OrderClosedError(purchase_order.id)

    def auto_close(self, purchase_order: PurchaseOrder) -> None:
        self.ensure_open(purchase_order)
        purchase_order.closed = True
        purchase_order.notes = AUTO_CLOSE_NOTE
        logger.info("Purchase order %s auto-closed: all items received", purchase_order.id)

    async def force_close(
        self,
        purchase_order: PurchaseOrder,
        reason: str,
        lines: list[OrderLineSnapshot],
    ) -> dict[int, int]:
        """Close with an operator reason, releasing undelivered quantity from on-order.

        lines must be read from the ledger after any staged postings were
        flushed. Returns {part id: quantity released}.
        """
        if not (reason and reason.strip()):
            raise ValidationError("Reason required to force close an order.", field="reason")
        self.ensure_open(purchase_order)

        released: dict[int, int] = {}
        for line in lines:
            if line.outstanding <= 0:
                continue
            part = await self.parts.release_on_order(line.part_id, line.outstanding)
            if part is not None:
                released[line.part_id] = released.get(line.part_id, 0) + line.outstanding

        purchase_order.closed = True
        purchase_order.notes = reason.strip()
        logger.info(
            "Purchase order %s force-closed (%s); released on-order %s",
            purchase_order.id,
            reason.strip(),
            released,
        )
        return released
