"""Schemas for the Receiving module."""

from datetime import datetime

from pydantic import Field, computed_field

from src.modules.procurement.schemas import PurchaseOrderHeader
from src.shared.schemas.base import BaseSchema, FrozenSchema

UNORDERED_KEY = "unordered"


class OrderLineSnapshot(BaseSchema):
    """Ledger read model of one order line."""

    purchase_order_id: int
    purchase_order_line_id: int
    part_id: int
    description: str
    order_qty: int
    received_to_date: int = 0
    returned_to_date: int = 0
    last_return_reason: str = ""

    @computed_field
    @property
    def outstanding(self) -> int:
        return max(self.order_qty - self.received_to_date, 0)


class OrderLineEntry(FrozenSchema):
    """One order line in an editing session.

    outstanding_base is the outstanding quantity when the session started and
    caps what may be received in this batch.
    """

    purchase_order_line_id: int | None = None
    part_id: int
    description: str = ""
    order_qty: int
    outstanding_base: int
    received: int = 0
    returned: int = 0
    reason: str = ""

    @classmethod
    def from_snapshot(cls, snapshot: OrderLineSnapshot) -> "OrderLineEntry":
        return cls(
            purchase_order_line_id=snapshot.purchase_order_line_id,
            part_id=snapshot.part_id,
            description=snapshot.description,
            order_qty=snapshot.order_qty,
            outstanding_base=snapshot.outstanding,
        )

    @property
    def has_changes(self) -> bool:
        return self.received > 0 or self.returned > 0


class UnorderedItem(FrozenSchema):
    """Staged unordered item, ready to be captured on commit."""

    description: str = Field(..., min_length=1, max_length=100)
    vendor_part_id: str = Field(..., min_length=1, max_length=25)
    quantity: int = Field(..., ge=1)


class UnorderedItemDraft(FrozenSchema):
    """Contents of the new unordered item slot; checked by the validation engine."""

    description: str = ""
    vendor_part_id: str = ""
    quantity: int = 0


class ReceivingBatch(FrozenSchema):
    """Immutable snapshot of an in-progress receiving session."""

    purchase_order_id: int
    lines: tuple[OrderLineEntry, ...] = ()
    unordered_items: tuple[UnorderedItem, ...] = ()
    new_unordered: UnorderedItemDraft | None = None
    force_close_reason: str = ""


class FieldError(FrozenSchema):
    """Rule violation for one field. key is a part id or "unordered"."""

    key: str
    field: str
    message: str

    def __str__(self) -> str:
        if self.key == UNORDERED_KEY:
            return f"Unordered Item: {self.message}"
        return f"Part {self.key}: {self.message}"


class ValidationResult(FrozenSchema):
    """Outcome of a validation run.

    no_changes separates "nothing entered" (informational) from rule
    violations (blocking).
    """

    ok: bool
    errors: tuple[FieldError, ...] = ()
    no_changes: bool = False
    message: str = ""

    def by_field(self) -> dict[tuple[str, str], str]:
        # Rules on one field are mutually exclusive, so each key holds one message.
        return {(error.key, error.field): error.message for error in self.errors}

    def errors_for(self, key: str | int) -> list[FieldError]:
        return [error for error in self.errors if error.key == str(key)]


class IntegrityWarning(BaseSchema):
    """Order line that could not be resolved during commit and was skipped."""

    purchase_order_line_id: int | None
    part_id: int
    message: str


class ReceiptLineResponse(BaseSchema):
    id: int
    purchase_order_line_id: int
    quantity_received: int


class ReturnLineResponse(BaseSchema):
    id: int
    purchase_order_line_id: int
    item_description: str | None
    quantity: int
    reason: str


class UnorderedItemResponse(BaseSchema):
    id: int
    description: str
    vendor_part_number: str
    quantity: int


class ReceiptEventResponse(BaseSchema):
    """Persisted receipt event with its postings."""

    id: int
    receipt_number: str
    purchase_order_id: int
    received_at: datetime
    employee_id: str
    receipt_lines: list[ReceiptLineResponse] = Field(default_factory=list)
    return_lines: list[ReturnLineResponse] = Field(default_factory=list)
    unordered_items: list[UnorderedItemResponse] = Field(default_factory=list)


class CommitResult(BaseSchema):
    """Outcome of a successful commit or force-close."""

    purchase_order_id: int
    receipt_event: ReceiptEventResponse | None = None
    warnings: list[IntegrityWarning] = Field(default_factory=list)
    order_closed: bool = False
    closure_notes: str | None = None
    changes: list[str] = Field(default_factory=list)
    lines: list[OrderLineSnapshot] = Field(default_factory=list)


class ReceivingSession(BaseSchema):
    """Header plus a fresh editing batch for one order."""

    header: PurchaseOrderHeader
    snapshots: list[OrderLineSnapshot] = Field(default_factory=list)
    batch: ReceivingBatch


# Request bodies


class ReceiveRequest(BaseSchema):
    """Batch submitted for commit or validation."""

    lines: list[OrderLineEntry] = Field(default_factory=list)
    unordered_items: list[UnorderedItem] = Field(default_factory=list)
    new_unordered: UnorderedItemDraft | None = None
    force_close_reason: str = ""

    def to_batch(self, po_id: int) -> ReceivingBatch:
        return ReceivingBatch(
            purchase_order_id=po_id,
            lines=tuple(self.lines),
            unordered_items=tuple(self.unordered_items),
            new_unordered=self.new_unordered,
            force_close_reason=self.force_close_reason,
        )


class ForceCloseRequest(ReceiveRequest):
    """Force-close with the staged batch saved first."""

    reason: str = Field(..., min_length=1)
