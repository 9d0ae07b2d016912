from typing import Any


class AppException(Exception):
    """Base application exception."""

    code = "error"

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    code = "not_found"

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class BatchValidationError(ValidationError):
    """A receiving batch broke one or more field rules.

    Carries every violation, never only the first one.
    """

    code = "validation_failed"

    def __init__(
        self,
        errors: list[Any],
        message: str = "Validation failed. Please fix the errors below.",
    ):
        super().__init__(message=message)
        self.errors = list(errors)
        self.details = {"errors": self.errors}


class NoChangesError(AppException):
    """Nothing was entered; informational rather than blocking."""

    code = "no_changes"

    def __init__(
        self,
        message: str = "Nothing to receive. Enter a Received/Returned quantity or add an unordered item.",
    ):
        super().__init__(message=message, status_code=400)


class OrderClosedError(AppException):
    """Purchase order is closed and accepts no further postings."""

    code = "order_closed"

    def __init__(self, po_id: int):
        super().__init__(
            message=f"Purchase order {po_id} is closed",
            status_code=409,
            details={"purchase_order_id": po_id},
        )


class PersistenceError(AppException):
    """Store failure during commit or force-close; the transaction was rolled back."""

    code = "persistence_error"

    def __init__(self, action: str, exc: BaseException):
        message = f"Error while {action}: {exc}"
        cause = getattr(exc, "orig", None) or exc.__cause__
        if cause is not None and cause is not exc:
            message += f" Inner Exception: {cause}"
        super().__init__(message=message, status_code=500)


class AuthenticationError(AppException):
    """Authentication failed."""

    code = "authentication_failed"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(AppException):
    """Not authorized to perform action."""

    code = "forbidden"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, status_code=403)
