from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper: data on success, a message on failure."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    data: Optional[T] = Field(default=None, description="Payload when the call succeeded")
    is_failed: bool = Field(default=False, description="True when the call failed")
    message: Optional[str] = Field(default=None, description="Diagnostic when the call failed")

    @model_validator(mode="after")
    def _check_contract(self):
        if self.is_failed:
            if self.data is not None:
                raise ValueError("a failed envelope carries no data")
            if not self.message:
                raise ValueError("a failed envelope needs a message")
        elif self.data is None:
            raise ValueError("a successful envelope needs data")
        return self

    @classmethod
    def success(cls, data: T) -> "Envelope[T]":
        return cls(data=data, is_failed=False, message=None)

    @classmethod
    def failure(cls, message: str) -> "Envelope[T]":
        return cls(data=None, is_failed=True, message=message or "Request failed")
