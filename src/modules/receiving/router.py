"""API endpoints for Receiving."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ManagerEmployee, ReceivingEmployee
from src.core.database.session import get_db
from src.core.exceptions import NotFoundError
from src.modules.procurement.schemas import PurchaseOrderSummary
from src.modules.receiving.schemas import (
    CommitResult,
    ForceCloseRequest,
    OrderLineSnapshot,
    ReceiptEventResponse,
    ReceiveRequest,
    ReceivingSession,
    ValidationResult,
)
from src.modules.receiving.service import ReceivingService
from src.modules.receiving.validation import validate_receiving_batch
from src.shared.schemas.base import ApiResponse


router = APIRouter(prefix="/receiving", tags=["Receiving"])


@router.get(
    "/purchase-orders",
    response_model=ApiResponse[list[PurchaseOrderSummary]],
)
async def list_open_purchase_orders(
    employee: ReceivingEmployee,
    db: AsyncSession = Depends(get_db),
):
    """Open purchase orders awaiting delivery."""
    orders = await ReceivingService(db).get_open_order_summaries()
    return ApiResponse(
        success=True,
        data=orders,
        message=None if orders else "No outstanding purchase orders available.",
    )


@router.get(
    "/purchase-orders/{po_id}",
    response_model=ApiResponse[ReceivingSession],
)
async def start_receiving_session(
    po_id: int,
    employee: ReceivingEmployee,
    db: AsyncSession = Depends(get_db),
):
    """Header, ledger lines and an empty editing batch for one order."""
    session = await ReceivingService(db).start_session(po_id)
    return ApiResponse(success=True, data=session)


@router.get(
    "/purchase-orders/{po_id}/lines",
    response_model=ApiResponse[list[OrderLineSnapshot]],
)
async def get_order_lines(
    po_id: int,
    employee: ReceivingEmployee,
    fresh: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Ledger totals per order line."""
    service = ReceivingService(db)
    if await service.get_order_header(po_id) is None:
        raise NotFoundError("Purchase order", po_id)
    if fresh:
        lines = await service.get_order_lines_fresh(po_id)
    else:
        lines = await service.get_order_lines(po_id)
    return ApiResponse(success=True, data=lines)


@router.get(
    "/purchase-orders/{po_id}/receipts",
    response_model=ApiResponse[list[ReceiptEventResponse]],
)
async def get_receipt_history(
    po_id: int,
    employee: ReceivingEmployee,
    db: AsyncSession = Depends(get_db),
):
    """Receipt events posted against an order, newest first."""
    events = await ReceivingService(db).get_receipt_history(po_id)
    return ApiResponse(success=True, data=events)


@router.post(
    "/purchase-orders/{po_id}/validate",
    response_model=ApiResponse[ValidationResult],
)
async def validate_receiving_batch_endpoint(
    po_id: int,
    data: ReceiveRequest,
    employee: ReceivingEmployee,
):
    """Run the validation rules without touching the store."""
    result = validate_receiving_batch(data.to_batch(po_id))
    return ApiResponse(success=True, data=result, message=result.message or None)


@router.post(
    "/purchase-orders/{po_id}/receive",
    response_model=ApiResponse[CommitResult],
    status_code=status.HTTP_201_CREATED,
)
async def receive(
    po_id: int,
    data: ReceiveRequest,
    employee: ReceivingEmployee,
    db: AsyncSession = Depends(get_db),
):
    """Commit received, returned and unordered items."""
    result = await ReceivingService(db).commit_receipt_batch(
        po_id, data.to_batch(po_id), employee.id
    )
    return ApiResponse(
        success=True,
        data=result,
        message="Changes saved successfully.",
    )


@router.post(
    "/purchase-orders/{po_id}/force-close",
    response_model=ApiResponse[CommitResult],
)
async def force_close(
    po_id: int,
    data: ForceCloseRequest,
    employee: ManagerEmployee,
    db: AsyncSession = Depends(get_db),
):
    """Save the staged batch and close the order with a reason."""
    result = await ReceivingService(db).force_close(
        po_id, data.reason, employee.id, batch=data.to_batch(po_id)
    )
    return ApiResponse(
        success=True,
        data=result,
        message=f"Order force closed for reason: {data.reason.strip()}.",
    )
