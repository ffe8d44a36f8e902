# Standard library imports
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

# Third-party imports
from fastapi import HTTPException

T = TypeVar("T")


class ServiceHTTPException(HTTPException):
    """HTTPException that keeps the service error code for the response envelope."""

    def __init__(self, status_code: int, code: str, detail: str):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Tagged success/failure value returned by the service layer."""

    ok: bool
    data: T | None = None
    error: Enum | None = None

    @classmethod
    def success(cls, data: T | None = None) -> "ServiceResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: Enum) -> "ServiceResult[T]":
        return cls(ok=False, error=error)

    @property
    def error_code(self) -> str | None:
        return self.error.value[0] if self.error else None

    @property
    def error_message(self) -> str | None:
        return self.error.value[1] if self.error else None

    @property
    def status_code(self) -> int:
        return self.error.value[2] if self.error else 200

    def to_http_exception(self) -> ServiceHTTPException:
        return ServiceHTTPException(
            status_code=self.status_code,
            code=self.error_code or "error",
            detail=self.error_message or "",
        )

    def unwrap(self) -> T:
        """Return ``data`` or raise the matching ``HTTPException``."""
        if not self.ok:
            raise self.to_http_exception()
        return self.data  # type: ignore[return-value]
