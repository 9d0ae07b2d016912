from src.core.documents.models import DocumentSequence
from src.core.documents.number_generator import (
    DocumentNumberGenerator,
    format_document_number,
    get_document_number,
    next_receipt_number,
)

__all__ = [
    "DocumentSequence",
    "DocumentNumberGenerator",
    "format_document_number",
    "get_document_number",
    "next_receipt_number",
]
