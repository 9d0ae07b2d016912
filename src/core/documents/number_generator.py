"""Sequential document numbers: PREFIX-YYYY-NNNNNN.

Receipt events are numbered RCV-2026-000001, RCV-2026-000002, ... with the
sequence restarting every calendar year.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.documents.models import DocumentSequence

NUMBER_WIDTH = 6


def format_document_number(prefix: str, year: int, number: int) -> str:
    return f"{prefix}-{year}-{number:0{NUMBER_WIDTH}d}"


class DocumentNumberGenerator:
    """Hands out numbers inside the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _locked_sequence(self, prefix: str, year: int) -> DocumentSequence:
        # FOR UPDATE keeps two concurrent commits from sharing a number;
        # the lock is released when the caller's transaction ends.
        stmt = (
            select(DocumentSequence)
            .where(DocumentSequence.prefix == prefix, DocumentSequence.year == year)
            .with_for_update()
        )
        sequence = (await self.session.execute(stmt)).scalar_one_or_none()
        if sequence is not None:
            return sequence

        self.session.add(DocumentSequence(prefix=prefix, year=year, last_number=0))
        await self.session.flush()
        return (await self.session.execute(stmt)).scalar_one()

    async def generate(self, prefix: str, year: int | None = None) -> str:
        """Next number for prefix in year (default: current UTC year)."""
        if year is None:
            year = datetime.now(timezone.utc).year

        sequence = await self._locked_sequence(prefix, year)
        number = sequence.advance()
        await self.session.flush()
        return format_document_number(prefix, year, number)


async def get_document_number(session: AsyncSession, prefix: str, year: int | None = None) -> str:
    """Convenience function to generate a document number."""
    return await DocumentNumberGenerator(session).generate(prefix, year)


async def next_receipt_number(session: AsyncSession, received_at: datetime) -> str:
    """Receipt number for an event received at received_at."""
    return await get_document_number(session, settings.receipt_number_prefix, received_at.year)
