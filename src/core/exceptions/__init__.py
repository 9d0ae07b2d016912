from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    BatchValidationError,
    NoChangesError,
    OrderClosedError,
    PersistenceError,
    AuthenticationError,
    AuthorizationError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "BatchValidationError",
    "NoChangesError",
    "OrderClosedError",
    "PersistenceError",
    "AuthenticationError",
    "AuthorizationError",
]
