"""Inventory models: parts and their stock counters."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class Part(BaseModel):
    """Stocked part.

    quantity_on_hand is physical stock in the warehouse; quantity_on_order is
    what vendors still owe us across open purchase orders. Both change only
    through receiving postings and purchase order closure.
    """

    __tablename__ = "parts"

    description: Mapped[str] = mapped_column(String(200), nullable=False)
    vendor_part_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    quantity_on_hand: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Not floored on receipt: over-receipt can drive this negative.
    quantity_on_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
