"""Validation engine for receiving batches.

Everything here is pure: no I/O, no clock, no mutation of the inputs. The
live path (apply_edit after each field change) and the commit gate call the
same validate_batch, so identical input always yields an identical result.
"""

from collections.abc import Iterable, Sequence

from src.core.exceptions import BatchValidationError, NoChangesError
from src.modules.receiving.schemas import (
    UNORDERED_KEY,
    FieldError,
    OrderLineEntry,
    OrderLineSnapshot,
    ReceivingBatch,
    UnorderedItem,
    UnorderedItemDraft,
    ValidationResult,
)

VALIDATION_FAILED_MESSAGE = "Validation failed. Please fix the errors below."
NO_CHANGES_MESSAGE = (
    "Nothing to receive. Enter a Received/Returned quantity or add an unordered item."
)

EDITABLE_FIELDS = ("received", "returned", "reason")


def line_errors(line: OrderLineEntry) -> list[FieldError]:
    """All rule violations for one order line."""
    key = str(line.part_id)
    errors: list[FieldError] = []

    if line.received < 0:
        errors.append(FieldError(key=key, field="received", message="Received cannot be negative."))
    elif line.received > line.outstanding_base:
        errors.append(
            FieldError(
                key=key,
                field="received",
                message=(
                    f"Received ({line.received}) cannot exceed "
                    f"Outstanding ({line.outstanding_base})."
                ),
            )
        )

    if line.returned < 0:
        errors.append(FieldError(key=key, field="returned", message="Returned cannot be negative."))
    elif line.returned > line.order_qty:
        errors.append(
            FieldError(
                key=key,
                field="returned",
                message=f"Returned ({line.returned}) cannot exceed Ordered ({line.order_qty}).",
            )
        )

    if line.returned > 0 and not line.reason.strip():
        errors.append(
            FieldError(key=key, field="reason", message="Reason required when returning items.")
        )

    return errors


def draft_errors(draft: UnorderedItemDraft | None) -> list[FieldError]:
    """Quantity rule for the new unordered item slot, when the slot is in use."""
    if draft is None or draft.quantity > 0:
        return []
    return [
        FieldError(
            key=UNORDERED_KEY,
            field="quantity",
            message="Quantity must be greater than zero.",
        )
    ]


def has_changes(
    lines: Iterable[OrderLineEntry],
    unordered_items: Sequence[UnorderedItem],
    force_close_reason: str | None,
) -> bool:
    return (
        any(line.has_changes for line in lines)
        or len(unordered_items) > 0
        or bool(force_close_reason and force_close_reason.strip())
    )


def validate_batch(
    lines: Sequence[OrderLineEntry],
    unordered_items: Sequence[UnorderedItem],
    force_close_reason: str | None = None,
    new_unordered: UnorderedItemDraft | None = None,
) -> ValidationResult:
    """Evaluate every rule over a candidate batch.

    Rule violations come back in the result; nothing is raised for them.
    """
    errors: list[FieldError] = []
    for line in lines:
        errors.extend(line_errors(line))
    errors.extend(draft_errors(new_unordered))

    if errors:
        return ValidationResult(ok=False, errors=tuple(errors), message=VALIDATION_FAILED_MESSAGE)

    if not has_changes(lines, unordered_items, force_close_reason):
        return ValidationResult(ok=False, no_changes=True, message=NO_CHANGES_MESSAGE)

    return ValidationResult(ok=True)


def validate_receiving_batch(batch: ReceivingBatch) -> ValidationResult:
    return validate_batch(
        batch.lines,
        batch.unordered_items,
        batch.force_close_reason,
        batch.new_unordered,
    )


def ensure_admissible(result: ValidationResult) -> None:
    """Raise the matching error when a batch may not be committed."""
    if result.ok:
        return
    if result.no_changes:
        raise NoChangesError(result.message or NO_CHANGES_MESSAGE)
    raise BatchValidationError(list(result.errors), result.message or VALIDATION_FAILED_MESSAGE)


def apply_edit(
    batch: ReceivingBatch, part_id: int, field: str, value: int | float | str
) -> tuple[ReceivingBatch, ValidationResult]:
    """Set one editable field on one line and revalidate the whole batch.

    Quantities must be whole numbers; 2.7 is rejected, not truncated.
    Returns a new batch; the input batch is left untouched.
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field {field!r} is not editable")

    if field == "reason":
        value = "" if value is None else str(value)
    elif isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{field.capitalize()} must be a whole number, got {value}")
    else:
        value = int(value)

    index = next(
        (i for i, line in enumerate(batch.lines) if line.part_id == part_id),
        None,
    )
    if index is None:
        raise ValueError(f"Part {part_id} is not on purchase order {batch.purchase_order_id}")

    lines = list(batch.lines)
    lines[index] = lines[index].model_copy(update={field: value})
    new_batch = batch.model_copy(update={"lines": tuple(lines)})
    return new_batch, validate_receiving_batch(new_batch)


def set_force_close_reason(
    batch: ReceivingBatch, reason: str
) -> tuple[ReceivingBatch, ValidationResult]:
    new_batch = batch.model_copy(update={"force_close_reason": reason or ""})
    return new_batch, validate_receiving_batch(new_batch)


def edit_unordered_draft(
    batch: ReceivingBatch, draft: UnorderedItemDraft | None
) -> tuple[ReceivingBatch, ValidationResult]:
    """Replace the new unordered item slot (None clears it)."""
    new_batch = batch.model_copy(update={"new_unordered": draft})
    return new_batch, validate_receiving_batch(new_batch)


def stage_unordered_item(
    batch: ReceivingBatch, draft: UnorderedItemDraft
) -> tuple[ReceivingBatch, list[FieldError]]:
    """Move a completed draft into the staged unordered items.

    On any error the batch is returned unchanged together with the errors.
    """
    errors: list[FieldError] = []
    if not draft.description.strip():
        errors.append(
            FieldError(key=UNORDERED_KEY, field="description", message="Description is required.")
        )
    if not draft.vendor_part_id.strip():
        errors.append(
            FieldError(
                key=UNORDERED_KEY, field="vendor_part_id", message="Vendor Part ID is required."
            )
        )
    if len(draft.description.strip()) > 100:
        errors.append(
            FieldError(
                key=UNORDERED_KEY,
                field="description",
                message="Description cannot exceed 100 characters.",
            )
        )
    if len(draft.vendor_part_id.strip()) > 25:
        errors.append(
            FieldError(
                key=UNORDERED_KEY,
                field="vendor_part_id",
                message="Vendor Part ID cannot exceed 25 characters.",
            )
        )
    errors.extend(draft_errors(draft))
    if errors:
        return batch, errors

    item = UnorderedItem(
        description=draft.description.strip(),
        vendor_part_id=draft.vendor_part_id.strip(),
        quantity=draft.quantity,
    )
    new_batch = batch.model_copy(
        update={
            "unordered_items": batch.unordered_items + (item,),
            "new_unordered": None,
        }
    )
    return new_batch, []


def remove_unordered_item(batch: ReceivingBatch, index: int) -> ReceivingBatch:
    if index < 0 or index >= len(batch.unordered_items):
        raise IndexError(f"No staged unordered item at position {index}")
    items = batch.unordered_items[:index] + batch.unordered_items[index + 1 :]
    return batch.model_copy(update={"unordered_items": items})


def reset_batch(po_id: int, snapshots: Iterable[OrderLineSnapshot]) -> ReceivingBatch:
    """Fresh editing batch: zero entries, outstanding_base from the ledger."""
    return ReceivingBatch(
        purchase_order_id=po_id,
        lines=tuple(OrderLineEntry.from_snapshot(snapshot) for snapshot in snapshots),
    )
