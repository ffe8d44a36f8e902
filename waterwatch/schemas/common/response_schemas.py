"""
The response envelope shared by every endpoint::

    {"ok": true, "data": ...}
    {"ok": false, "error": {"code": "...", "message": "...", "details": ...}}
"""

# Standard library imports
from typing import Any, Generic, TypeVar

# Third-party imports
from pydantic import BaseModel

# Field-level messages for validation errors, or any structured extra
DetailsType = str | list[str] | dict[str, Any]
DataT = TypeVar("DataT")


class ErrorDetails(BaseModel):
    code: str
    message: str
    details: DetailsType | None = None


class BaseResponse(BaseModel, Generic[DataT]):
    ok: bool
    data: DataT | None = None
    error: ErrorDetails | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        dumped = super().model_dump(**kwargs)
        # A failure carries no data key; a success carries no error key
        dumped.pop("error" if self.ok else "data", None)
        return dumped

    @classmethod
    def success(cls, data: DataT) -> "BaseResponse[DataT]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, code: str, message: str, details: DetailsType | None = None) -> "BaseResponse[None]":
        return BaseResponse[None](ok=False, error=ErrorDetails(code=code, message=message, details=details))
