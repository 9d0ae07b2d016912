import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.procurement.models import PurchaseOrderLine


class TestPurchaseOrderLine:
    async def test_part_appears_once_per_order(self, db_session: AsyncSession, create_order):
        po, (part,) = await create_order([(4, 0, 4)])

        db_session.add(PurchaseOrderLine(purchase_order_id=po.id, part_id=part.id, quantity=2))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()

    async def test_same_part_on_different_orders(self, db_session: AsyncSession, create_order):
        first, (part,) = await create_order([(4, 0, 4)])
        second, _ = await create_order([(1, 0, 1)])

        db_session.add(PurchaseOrderLine(purchase_order_id=second.id, part_id=part.id, quantity=2))
        await db_session.flush()

        assert first.id != second.id
