"""Service layer for Receiving (reconciliation workflow)."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import AuditAction, create_audit_log
from src.core.documents import next_receipt_number
from src.core.exceptions import (
    BatchValidationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from src.modules.inventory.service import PartService
from src.modules.procurement.models import PurchaseOrder, PurchaseOrderLine
from src.modules.procurement.schemas import PurchaseOrderHeader, PurchaseOrderSummary
from src.modules.procurement.service import PurchaseOrderService
from src.modules.receiving.ledger import LedgerReader
from src.modules.receiving.lifecycle import PurchaseOrderLifecycle, should_auto_close
from src.modules.receiving.models import (
    ReceiptEvent,
    ReceiptLine,
    ReturnLine,
    UnorderedItemRecord,
)
from src.modules.receiving.schemas import (
    CommitResult,
    FieldError,
    IntegrityWarning,
    OrderLineEntry,
    OrderLineSnapshot,
    ReceiptEventResponse,
    ReceivingBatch,
    ReceivingSession,
    UnorderedItem,
)
from src.modules.receiving.validation import (
    ensure_admissible,
    reset_batch,
    validate_batch,
)

logger = logging.getLogger(__name__)


@dataclass
class _Posting:
    """What _post_batch wrote inside the open transaction."""

    receipt_event: ReceiptEvent | None = None
    warnings: list[IntegrityWarning] = field(default_factory=list)
    received_by_part: dict[int, int] = field(default_factory=dict)


def summarize_changes(
    lines: list[OrderLineEntry], unordered_items: list[UnorderedItem]
) -> list[str]:
    """Human readable list of what a batch posts."""
    changes: list[str] = []
    for line in lines:
        if not line.has_changes:
            continue
        entry = f"Part {line.part_id}: Received {line.received}, Returned {line.returned}"
        if line.returned > 0 and line.reason.strip():
            entry += f", Reason: {line.reason.strip()}"
        changes.append(entry)
    for item in unordered_items:
        changes.append(
            f"Unordered Item: {item.description}, Vendor Part ID: {item.vendor_part_id}, "
            f"Quantity: {item.quantity}"
        )
    return changes


class ReceivingService:
    """Reconciles deliveries against purchase orders."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.orders = PurchaseOrderService(db)
        self.ledger = LedgerReader(db)
        self.parts = PartService(db)
        self.lifecycle = PurchaseOrderLifecycle(db)

    # Queries

    async def get_open_order_summaries(self) -> list[PurchaseOrderSummary]:
        return await self.orders.list_open_orders()

    async def get_order_header(self, po_id: int) -> PurchaseOrderHeader | None:
        return await self.orders.get_order_header(po_id)

    async def get_order_lines(self, po_id: int) -> list[OrderLineSnapshot]:
        return await self.ledger.get_order_lines(po_id)

    async def get_order_lines_fresh(self, po_id: int) -> list[OrderLineSnapshot]:
        return await self.ledger.get_order_lines(po_id, fresh=True)

    async def start_session(self, po_id: int) -> ReceivingSession:
        """Header plus a zeroed editing batch; also used for reset."""
        header = await self.get_order_header(po_id)
        if header is None:
            raise NotFoundError("Purchase order", po_id)
        snapshots = await self.get_order_lines_fresh(po_id)
        return ReceivingSession(
            header=header,
            snapshots=snapshots,
            batch=reset_batch(po_id, snapshots),
        )

    async def get_receipt_history(self, po_id: int) -> list[ReceiptEventResponse]:
        await self.orders.get_purchase_order_by_id(po_id)
        events = await self.ledger.get_receipt_history(po_id)
        return [ReceiptEventResponse.model_validate(event) for event in events]

    # Actions

    async def commit_receipt_batch(
        self, po_id: int, batch: ReceivingBatch, employee_id: str
    ) -> CommitResult:
        """
        Post a batch of receipts, returns and unordered items in one transaction.

        The batch is re-validated here (without any force-close reason) before
        anything is written. On success the order may have been auto-closed.

        Raises:
            NoChangesError: nothing entered
            BatchValidationError: rule violations, or received exceeds what is
                still outstanding in the ledger
            NotFoundError / OrderClosedError: order missing or already closed
            PersistenceError: store failure; everything was rolled back
        """
        lines = list(batch.lines)
        unordered_items = list(batch.unordered_items)
        ensure_admissible(validate_batch(lines, unordered_items, None, batch.new_unordered))

        try:
            purchase_order = await self.orders.get_purchase_order_by_id(po_id, for_update=True)
            self.lifecycle.ensure_open(purchase_order)

            posting = await self._post_batch(purchase_order, lines, unordered_items, employee_id)

            outstanding = await self.ledger.outstanding_by_line(po_id)
            if should_auto_close(outstanding):
                self.lifecycle.auto_close(purchase_order)
                await create_audit_log(
                    self.db,
                    action=AuditAction.AUTO_CLOSE,
                    entity_type="PurchaseOrder",
                    entity_id=purchase_order.id,
                    employee_id=employee_id,
                    new_values={"closed": True, "notes": purchase_order.notes},
                )

            order_closed = purchase_order.closed
            closure_notes = purchase_order.notes
            receipt_event = await self._event_response(posting.receipt_event)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Receiving commit for purchase order %s failed: %s", po_id, exc)
            raise PersistenceError("saving", exc) from exc
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Purchase order %s: receipt %s committed by %s (%d warnings, closed=%s)",
            po_id,
            receipt_event.receipt_number if receipt_event else None,
            employee_id,
            len(posting.warnings),
            order_closed,
        )
        return CommitResult(
            purchase_order_id=po_id,
            receipt_event=receipt_event,
            warnings=posting.warnings,
            order_closed=order_closed,
            closure_notes=closure_notes,
            changes=summarize_changes(lines, unordered_items),
            lines=await self.get_order_lines_fresh(po_id),
        )

    async def force_close(
        self,
        po_id: int,
        reason: str,
        employee_id: str,
        batch: ReceivingBatch | None = None,
    ) -> CommitResult:
        """
        Save any staged batch, then close the order with a reason.

        Both happen in one transaction, so a failed save never leaves a
        closed order behind. Undelivered quantities are released from the
        parts' on-order counts (floored at 0).
        """
        if not (reason and reason.strip()):
            raise ValidationError("Reason required to force close an order.", field="reason")

        batch = batch or ReceivingBatch(purchase_order_id=po_id)
        lines = list(batch.lines)
        unordered_items = list(batch.unordered_items)
        ensure_admissible(validate_batch(lines, unordered_items, reason, batch.new_unordered))

        try:
            purchase_order = await self.orders.get_purchase_order_by_id(po_id, for_update=True)
            self.lifecycle.ensure_open(purchase_order)

            posting = _Posting()
            if any(line.has_changes for line in lines) or unordered_items:
                posting = await self._post_batch(
                    purchase_order, lines, unordered_items, employee_id
                )

            snapshots = await self.ledger.get_order_lines(po_id)
            released = await self.lifecycle.force_close(purchase_order, reason, snapshots)
            await create_audit_log(
                self.db,
                action=AuditAction.FORCE_CLOSE,
                entity_type="PurchaseOrder",
                entity_id=purchase_order.id,
                employee_id=employee_id,
                old_values={"closed": False},
                new_values={
                    "closed": True,
                    "notes": purchase_order.notes,
                    "released_on_order": {str(k): v for k, v in released.items()},
                },
                comment=purchase_order.notes,
            )

            closure_notes = purchase_order.notes
            receipt_event = await self._event_response(posting.receipt_event)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Force close of purchase order %s failed: %s", po_id, exc)
            raise PersistenceError("force closing", exc) from exc
        except Exception:
            await self.db.rollback()
            raise

        return CommitResult(
            purchase_order_id=po_id,
            receipt_event=receipt_event,
            warnings=posting.warnings,
            order_closed=True,
            closure_notes=closure_notes,
            changes=summarize_changes(lines, unordered_items),
            lines=await self.get_order_lines_fresh(po_id),
        )

    # Internals

    async def _post_batch(
        self,
        purchase_order: PurchaseOrder,
        lines: list[OrderLineEntry],
        unordered_items: list[UnorderedItem],
        employee_id: str,
    ) -> _Posting:
        """Write the receipt event and its rows; the caller commits."""
        order_lines = {line.id: line for line in purchase_order.lines}
        outstanding = await self.ledger.outstanding_by_line(purchase_order.id)
        self._check_against_order(lines, order_lines, outstanding)

        received_at = datetime.now(timezone.utc)
        receipt_number = await next_receipt_number(self.db, received_at)
        receipt_event = ReceiptEvent(
            receipt_number=receipt_number,
            purchase_order_id=purchase_order.id,
            received_at=received_at,
            employee_id=employee_id,
            remove_from_view=False,
        )
        self.db.add(receipt_event)
        await self.db.flush()

        posting = _Posting(receipt_event=receipt_event)
        for line in lines:
            if not line.has_changes:
                continue
            order_line = order_lines.get(line.purchase_order_line_id)
            if order_line is None:
                warning = IntegrityWarning(
                    purchase_order_line_id=line.purchase_order_line_id,
                    part_id=line.part_id,
                    message=(
                        f"Invalid PurchaseOrderLineID: {line.purchase_order_line_id} "
                        f"does not exist on purchase order {purchase_order.id}."
                    ),
                )
                logger.warning(warning.message)
                posting.warnings.append(warning)
                continue

            if line.received > 0:
                self.db.add(
                    ReceiptLine(
                        receipt_event_id=receipt_event.id,
                        purchase_order_line_id=order_line.id,
                        quantity_received=line.received,
                    )
                )
                await self.parts.apply_receipt(order_line.part_id, line.received)
                posting.received_by_part[order_line.part_id] = (
                    posting.received_by_part.get(order_line.part_id, 0) + line.received
                )

            if line.returned > 0:
                self.db.add(
                    ReturnLine(
                        receipt_event_id=receipt_event.id,
                        purchase_order_line_id=order_line.id,
                        item_description=line.description or None,
                        quantity=line.returned,
                        reason=line.reason.strip(),
                    )
                )

        for item in unordered_items:
            self.db.add(
                UnorderedItemRecord(
                    receipt_event_id=receipt_event.id,
                    description=item.description,
                    vendor_part_number=item.vendor_part_id,
                    quantity=item.quantity,
                    remove_from_view=False,
                )
            )

        await self.db.flush()
        await create_audit_log(
            self.db,
            action=AuditAction.RECEIVE,
            entity_type="ReceiptEvent",
            entity_id=receipt_event.id,
            employee_id=employee_id,
            entity_identifier=receipt_number,
            new_values={
                "purchase_order_id": purchase_order.id,
                "received": {str(k): v for k, v in posting.received_by_part.items()},
                "returned": sum(line.returned for line in lines if line.returned > 0),
                "unordered_items": len(unordered_items),
                "warnings": len(posting.warnings),
            },
        )
        return posting

    @staticmethod
    def _check_against_order(
        lines: list[OrderLineEntry],
        order_lines: dict[int, PurchaseOrderLine],
        outstanding: dict[int, int],
    ) -> None:
        """Re-check the batch against the locked order and the current ledger.

        Entries arrive from the client, so their order_qty and
        outstanding_base are not trusted here. Guards stale sessions whose
        outstanding_base predates another commit, and rejects a line that
        appears more than once.
        """
        errors: list[FieldError] = []
        seen: set[int] = set()
        for line in lines:
            order_line = order_lines.get(line.purchase_order_line_id)
            if order_line is None:
                continue
            key = str(order_line.part_id)
            if order_line.id in seen:
                errors.append(
                    FieldError(
                        key=key,
                        field="line",
                        message=f"Order line {order_line.id} appears more than once in the batch.",
                    )
                )
                continue
            seen.add(order_line.id)

            current = outstanding.get(order_line.id, 0)
            if line.received > current:
                errors.append(
                    FieldError(
                        key=key,
                        field="received",
                        message=(
                            f"Received ({line.received}) cannot exceed "
                            f"Outstanding ({current})."
                        ),
                    )
                )
            if line.returned > order_line.quantity:
                errors.append(
                    FieldError(
                        key=key,
                        field="returned",
                        message=(
                            f"Returned ({line.returned}) cannot exceed "
                            f"Ordered ({order_line.quantity})."
                        ),
                    )
                )
        if errors:
            raise BatchValidationError(errors)

    async def _event_response(
        self, receipt_event: ReceiptEvent | None
    ) -> ReceiptEventResponse | None:
        if receipt_event is None:
            return None
        await self.db.refresh(
            receipt_event, ["receipt_lines", "return_lines", "unordered_items"]
        )
        return ReceiptEventResponse.model_validate(receipt_event)
