from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base Pydantic schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class FrozenSchema(BaseSchema):
    """Immutable schema; edits go through model_copy(update=...)."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        frozen=True,
    )


class ErrorDetail(BaseSchema):
    """
    Error detail for a specific field.

    field is a dotted path: "reason" for request fields, "<part id>.received"
    or "unordered.quantity" for receiving batch rules.
    """

    field: str | None = None
    message: str


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response wrapper."""

    success: bool = True
    data: T
    message: str | None = None


# Alias for cleaner API usage
ApiResponse = SuccessResponse


class ErrorResponse(BaseSchema):
    """Standard error response wrapper; code is stable for clients to branch on."""

    success: bool = False
    data: None = None
    message: str
    code: str | None = None
    errors: list[ErrorDetail] = Field(default_factory=list)

    @classmethod
    def single(cls, message: str, code: str | None = None, field: str | None = None) -> "ErrorResponse":
        return cls(message=message, code=code, errors=[ErrorDetail(field=field, message=message)])
