from src.shared.schemas.base import (
    BaseSchema,
    FrozenSchema,
    SuccessResponse,
    ApiResponse,
    ErrorResponse,
    ErrorDetail,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "SuccessResponse",
    "ApiResponse",
    "ErrorResponse",
    "ErrorDetail",
]
