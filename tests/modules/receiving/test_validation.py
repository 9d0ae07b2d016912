import pytest

from src.core.exceptions import BatchValidationError, NoChangesError
from src.modules.receiving.schemas import (
    OrderLineEntry,
    OrderLineSnapshot,
    ReceivingBatch,
    UnorderedItem,
    UnorderedItemDraft,
)
from src.modules.receiving.validation import (
    NO_CHANGES_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
    apply_edit,
    edit_unordered_draft,
    ensure_admissible,
    remove_unordered_item,
    reset_batch,
    set_force_close_reason,
    stage_unordered_item,
    validate_batch,
    validate_receiving_batch,
)


def _line(part_id: int = 7, order_qty: int = 10, outstanding: int = 10, **values) -> OrderLineEntry:
    return OrderLineEntry(
        purchase_order_line_id=part_id * 100,
        part_id=part_id,
        description=f"Part {part_id}",
        order_qty=order_qty,
        outstanding_base=outstanding,
        **values,
    )


def _batch(*lines: OrderLineEntry, **values) -> ReceivingBatch:
    return ReceivingBatch(purchase_order_id=1, lines=lines, **values)


class TestLineRules:
    def test_received_cannot_exceed_outstanding(self):
        result = validate_batch([_line(order_qty=10, outstanding=4, received=5)], [])

        assert result.ok is False
        assert result.no_changes is False
        assert result.message == VALIDATION_FAILED_MESSAGE
        assert result.by_field() == {
            ("7", "received"): "Received (5) cannot exceed Outstanding (4)."
        }

    def test_received_up_to_outstanding_is_fine(self):
        result = validate_batch([_line(outstanding=4, received=4)], [])
        assert result.ok is True

    def test_negative_quantities(self):
        result = validate_batch([_line(received=-1, returned=-2)], [])

        assert result.by_field() == {
            ("7", "received"): "Received cannot be negative.",
            ("7", "returned"): "Returned cannot be negative.",
        }

    def test_returned_cannot_exceed_ordered(self):
        result = validate_batch([_line(order_qty=3, returned=4, reason="wrong size")], [])

        assert result.by_field() == {
            ("7", "returned"): "Returned (4) cannot exceed Ordered (3)."
        }

    def test_return_requires_reason(self):
        result = validate_batch([_line(returned=2, reason="   ")], [])

        assert result.by_field() == {("7", "reason"): "Reason required when returning items."}
        assert [str(error) for error in result.errors] == [
            "Part 7: Reason required when returning items."
        ]

    def test_return_with_reason_is_fine(self):
        result = validate_batch([_line(returned=2, reason="damaged")], [])
        assert result.ok is True

    def test_return_allowed_on_fully_received_line(self):
        result = validate_batch([_line(outstanding=0, returned=1, reason="damaged")], [])
        assert result.ok is True

    def test_all_errors_are_reported(self):
        result = validate_batch(
            [
                _line(part_id=1, outstanding=2, received=3),
                _line(part_id=2, returned=1),
            ],
            [],
        )

        assert len(result.errors) == 2
        assert [error.key for error in result.errors] == ["1", "2"]
        assert result.errors_for(2)[0].field == "reason"

    def test_lines_are_independent(self):
        bad = _line(part_id=1, outstanding=2, received=3)
        good = _line(part_id=2, received=1)
        alone = validate_batch([bad], [])
        together = validate_batch([bad, good], [])

        assert alone.errors == together.errors


class TestNoChanges:
    def test_empty_batch_reports_no_changes(self):
        result = validate_batch([_line()], [])

        assert result.ok is False
        assert result.no_changes is True
        assert result.errors == ()
        assert result.message == NO_CHANGES_MESSAGE

    def test_unordered_item_counts_as_change(self):
        item = UnorderedItem(description="Bolt kit", vendor_part_id="X-9", quantity=4)
        assert validate_batch([_line()], [item]).ok is True

    def test_force_close_reason_counts_as_change(self):
        assert validate_batch([_line()], [], force_close_reason="vendor discontinued").ok is True
        assert validate_batch([_line()], [], force_close_reason="  ").no_changes is True

    def test_rule_violations_take_precedence(self):
        result = validate_batch([_line(received=-1)], [])
        assert result.no_changes is False
        assert result.message == VALIDATION_FAILED_MESSAGE


class TestUnorderedDraft:
    def test_draft_with_zero_quantity_is_an_error(self):
        result = validate_batch(
            [_line(received=1)],
            [],
            new_unordered=UnorderedItemDraft(description="Bolt kit", vendor_part_id="X-9"),
        )

        assert result.by_field() == {
            ("unordered", "quantity"): "Quantity must be greater than zero."
        }
        assert str(result.errors[0]) == "Unordered Item: Quantity must be greater than zero."

    def test_cleared_draft_has_no_errors(self):
        batch = _batch(_line(received=1))
        batch, result = edit_unordered_draft(batch, UnorderedItemDraft(quantity=0))
        assert result.ok is False

        batch, result = edit_unordered_draft(batch, None)
        assert result.ok is True


class TestDeterminism:
    def test_same_input_same_result(self):
        lines = [_line(part_id=1, received=11), _line(part_id=2, returned=1)]
        first = validate_batch(lines, [])
        second = validate_batch(lines, [])

        assert first == second

    def test_validation_does_not_mutate_batch(self):
        batch = _batch(_line(received=11))
        before = batch.model_dump()
        validate_receiving_batch(batch)

        assert batch.model_dump() == before


class TestEnsureAdmissible:
    def test_no_changes_raises_no_changes_error(self):
        with pytest.raises(NoChangesError) as exc_info:
            ensure_admissible(validate_batch([_line()], []))
        assert exc_info.value.status_code == 400

    def test_violations_raise_batch_validation_error(self):
        with pytest.raises(BatchValidationError) as exc_info:
            ensure_admissible(validate_batch([_line(received=11), _line(part_id=8, returned=1)], []))

        assert exc_info.value.status_code == 422
        assert len(exc_info.value.errors) == 2

    def test_ok_passes(self):
        ensure_admissible(validate_batch([_line(received=1)], []))


class TestEditing:
    def test_apply_edit_returns_new_batch(self):
        batch = _batch(_line(part_id=1), _line(part_id=2))
        new_batch, result = apply_edit(batch, 2, "received", 3)

        assert batch.lines[1].received == 0
        assert new_batch.lines[1].received == 3
        assert result.ok is True

    def test_apply_edit_revalidates_whole_batch(self):
        batch = _batch(_line(part_id=1, returned=1), _line(part_id=2))
        _, result = apply_edit(batch, 2, "received", 3)

        assert result.by_field() == {("1", "reason"): "Reason required when returning items."}

    def test_apply_edit_then_reason_clears_error(self):
        batch = _batch(_line(part_id=1))
        batch, result = apply_edit(batch, 1, "returned", 2)
        assert ("1", "reason") in result.by_field()

        batch, result = apply_edit(batch, 1, "reason", "damaged")
        assert result.ok is True

    def test_apply_edit_unknown_field(self):
        with pytest.raises(ValueError, match="not editable"):
            apply_edit(_batch(_line()), 7, "order_qty", 3)

    def test_apply_edit_unknown_part(self):
        with pytest.raises(ValueError, match="Part 99"):
            apply_edit(_batch(_line()), 99, "received", 1)

    def test_apply_edit_rejects_fractional_quantity(self):
        batch = _batch(_line(part_id=1))

        with pytest.raises(ValueError, match="whole number"):
            apply_edit(batch, 1, "received", 2.7)

    def test_apply_edit_accepts_integral_float(self):
        new_batch, result = apply_edit(_batch(_line(part_id=1)), 1, "received", 3.0)

        assert new_batch.lines[0].received == 3
        assert result.ok is True

    def test_set_force_close_reason(self):
        batch, result = set_force_close_reason(_batch(_line()), "vendor out of business")

        assert batch.force_close_reason == "vendor out of business"
        assert result.ok is True


class TestStaging:
    def test_stage_moves_draft_into_items(self):
        batch = _batch(_line(), new_unordered=UnorderedItemDraft(description="x"))
        draft = UnorderedItemDraft(description=" Bolt kit ", vendor_part_id="X-9", quantity=4)
        new_batch, errors = stage_unordered_item(batch, draft)

        assert errors == []
        assert new_batch.unordered_items == (
            UnorderedItem(description="Bolt kit", vendor_part_id="X-9", quantity=4),
        )
        assert new_batch.new_unordered is None
        assert validate_receiving_batch(new_batch).ok is True

    def test_stage_rejects_incomplete_draft(self):
        batch = _batch(_line())
        new_batch, errors = stage_unordered_item(batch, UnorderedItemDraft(quantity=0))

        assert new_batch is batch
        assert {error.field for error in errors} == {"description", "vendor_part_id", "quantity"}

    def test_stage_rejects_long_values(self):
        draft = UnorderedItemDraft(description="d" * 101, vendor_part_id="v" * 26, quantity=1)
        _, errors = stage_unordered_item(_batch(), draft)

        assert [error.message for error in errors] == [
            "Description cannot exceed 100 characters.",
            "Vendor Part ID cannot exceed 25 characters.",
        ]

    def test_remove_unordered_item(self):
        items = (
            UnorderedItem(description="A", vendor_part_id="1", quantity=1),
            UnorderedItem(description="B", vendor_part_id="2", quantity=2),
        )
        batch = _batch(unordered_items=items)

        assert remove_unordered_item(batch, 0).unordered_items == items[1:]
        with pytest.raises(IndexError):
            remove_unordered_item(batch, 2)


class TestReset:
    def test_reset_uses_ledger_outstanding(self):
        snapshot = OrderLineSnapshot(
            purchase_order_id=1,
            purchase_order_line_id=100,
            part_id=7,
            description="Chain",
            order_qty=10,
            received_to_date=6,
            returned_to_date=1,
            last_return_reason="damaged",
        )
        batch = reset_batch(1, [snapshot])

        line = batch.lines[0]
        assert line.outstanding_base == 4
        assert (line.received, line.returned, line.reason) == (0, 0, "")
        assert batch.unordered_items == ()
        assert batch.force_close_reason == ""

    def test_outstanding_never_negative(self):
        snapshot = OrderLineSnapshot(
            purchase_order_id=1,
            purchase_order_line_id=100,
            part_id=7,
            description="Chain",
            order_qty=2,
            received_to_date=5,
        )
        assert snapshot.outstanding == 0
