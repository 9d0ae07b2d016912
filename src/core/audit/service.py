from enum import StrEnum
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Audit actions written by the receiving workflow."""

    RECEIVE = "receiving.commit"
    AUTO_CLOSE = "purchase_order.auto_close"
    FORCE_CLOSE = "purchase_order.force_close"


async def create_audit_log(
    session: AsyncSession,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    employee_id: str | None = None,
    entity_identifier: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    comment: str | None = None,
) -> AuditLog:
    """
    Create an audit log entry inside the caller's transaction.

    Args:
        session: Database session
        action: Action performed (e.g., receiving.commit)
        entity_type: Type of entity (e.g., PurchaseOrder, ReceiptEvent)
        entity_id: ID of the entity
        employee_id: Employee who performed the action
        entity_identifier: Human-readable identifier (e.g., receipt number)
        old_values: State before change
        new_values: State after change
        comment: Additional comment

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        employee_id=employee_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        old_values=old_values,
        new_values=new_values,
        comment=comment,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log


async def list_audit_entries(
    session: AsyncSession,
    *,
    entity_type: str | None = None,
    entity_id: int | None = None,
    action: str | None = None,
) -> list[AuditLog]:
    """List audit log entries, newest first."""
    q = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if entity_type is not None:
        q = q.where(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        q = q.where(AuditLog.entity_id == entity_id)
    if action is not None:
        q = q.where(AuditLog.action == action)

    result = await session.execute(q)
    return list(result.scalars().all())
