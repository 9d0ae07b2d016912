from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.receiving.ledger import LedgerReader
from src.modules.receiving.models import ReceiptEvent, ReceiptLine, ReturnLine


async def _post(
    db_session: AsyncSession,
    po_id: int,
    number: str,
    received: dict[int, int] | None = None,
    returned: dict[int, tuple[int, str]] | None = None,
    received_at: datetime | None = None,
    remove_from_view: bool = False,
) -> ReceiptEvent:
    event = ReceiptEvent(
        receipt_number=number,
        purchase_order_id=po_id,
        received_at=received_at or datetime.now(timezone.utc),
        employee_id="1001",
        remove_from_view=remove_from_view,
    )
    db_session.add(event)
    await db_session.flush()
    for line_id, quantity in (received or {}).items():
        db_session.add(
            ReceiptLine(
                receipt_event_id=event.id,
                purchase_order_line_id=line_id,
                quantity_received=quantity,
            )
        )
    for line_id, (quantity, reason) in (returned or {}).items():
        db_session.add(
            ReturnLine(
                receipt_event_id=event.id,
                purchase_order_line_id=line_id,
                quantity=quantity,
                reason=reason,
            )
        )
    await db_session.commit()
    return event


class TestLedgerReader:
    async def test_lines_without_postings(self, db_session: AsyncSession, create_order):
        po, parts = await create_order([(10, 0, 10), (5, 2, 5)])

        lines = await LedgerReader(db_session).get_order_lines(po.id)

        assert [line.part_id for line in lines] == [parts[0].id, parts[1].id]
        assert [line.outstanding for line in lines] == [10, 5]
        assert all(line.received_to_date == 0 for line in lines)
        assert all(line.last_return_reason == "" for line in lines)
        assert lines[0].description == "Part 1"

    async def test_totals_are_summed_from_postings(self, db_session: AsyncSession, create_order):
        po, _ = await create_order([(10, 0, 10)])
        line_id = po.lines[0].id
        await _post(db_session, po.id, "RCV-T-1", received={line_id: 4})
        await _post(db_session, po.id, "RCV-T-2", received={line_id: 3}, returned={line_id: (1, "bent")})
        await _post(db_session, po.id, "RCV-T-3", returned={line_id: (2, "wrong colour")})

        (line,) = await LedgerReader(db_session).get_order_lines(po.id, fresh=True)

        assert line.received_to_date == 7
        assert line.returned_to_date == 3
        assert line.outstanding == 3
        assert line.last_return_reason == "wrong colour"

    async def test_returns_do_not_change_outstanding(self, db_session: AsyncSession, create_order):
        po, _ = await create_order([(4, 0, 4)])
        line_id = po.lines[0].id
        await _post(db_session, po.id, "RCV-T-1", received={line_id: 4})
        await _post(db_session, po.id, "RCV-T-2", returned={line_id: (2, "damaged")})

        outstanding = await LedgerReader(db_session).outstanding_by_line(po.id)

        assert outstanding == {line_id: 0}

    async def test_order_without_lines(self, db_session: AsyncSession, create_order):
        po, _ = await create_order([])

        assert await LedgerReader(db_session).get_order_lines(po.id) == []
        assert await LedgerReader(db_session).outstanding_by_line(po.id) == {}

    async def test_receipt_history_newest_first(self, db_session: AsyncSession, create_order):
        po, _ = await create_order([(10, 0, 10)])
        line_id = po.lines[0].id
        now = datetime.now(timezone.utc)
        await _post(db_session, po.id, "RCV-T-1", received={line_id: 1}, received_at=now - timedelta(days=1))
        await _post(db_session, po.id, "RCV-T-2", received={line_id: 2}, received_at=now)
        await _post(
            db_session, po.id, "RCV-T-3", received={line_id: 3}, remove_from_view=True
        )
        db_session.expunge_all()

        events = await LedgerReader(db_session).get_receipt_history(po.id)

        assert [event.receipt_number for event in events] == ["RCV-T-2", "RCV-T-1"]
        assert events[0].receipt_lines[0].quantity_received == 2
