"""Service layer for part stock counters."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.modules.inventory.models import Part

logger = logging.getLogger(__name__)


class PartService:
    """Adjusts QuantityOnHand / QuantityOnOrder.

    Callers own the transaction: nothing here commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_part_by_id(self, part_id: int) -> Part:
        """Get part by ID."""
        part = await self.db.scalar(select(Part).where(Part.id == part_id))
        if not part:
            raise NotFoundError("Part", part_id)
        return part

    async def find_part(self, part_id: int) -> Part | None:
        return await self.db.scalar(select(Part).where(Part.id == part_id))

    async def apply_receipt(self, part_id: int, quantity: int) -> Part | None:
        """Move received quantity from on-order to on-hand.

        On-order is deliberately not floored here, unlike release_on_order.
        Returns None when the part no longer exists.
        """
        part = await self.find_part(part_id)
        if part is None:
            logger.warning("Part %s not found while posting receipt of %s", part_id, quantity)
            return None

        part.quantity_on_hand += quantity
        part.quantity_on_order -= quantity
        return part

    async def release_on_order(self, part_id: int, quantity: int) -> Part | None:
        """Drop quantity that will never arrive from on-order, floored at 0."""
        part = await self.find_part(part_id)
        if part is None:
            logger.warning("Part %s not found while releasing %s on order", part_id, quantity)
            return None

        part.quantity_on_order = max(part.quantity_on_order - quantity, 0)
        return part
