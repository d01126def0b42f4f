"""
Shared schema primitives used across the API.

Every response uses the envelope `{success, data?, error?}`; errors add a
machine-readable `code` and optional `details`.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None


class DeletedOut(CamelModel):
    id: str
    message: str


class UserOut(CamelModel):
    id: str
    name: str

    @classmethod
    def from_record(cls, user) -> "UserOut":
        return cls(id=user.id, name=user.name)


class ErrorDetail(BaseModel):
    """A single field-level validation error."""
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    success: bool = False
    error: str
    code: str
    details: Optional[dict[str, Any]] = Field(default=None)
