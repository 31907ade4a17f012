"""
Canonical response envelope shared by every endpoint.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Generic, List, Optional, TypeVar
import math

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every successful response."""

    success: bool = Field(True, description="Whether the request succeeded")
    data: Optional[DataT] = Field(None, description="Response payload")
    message: Optional[str] = Field(None, description="Optional human-readable message")


class Pagination(BaseModel):
    """Pagination metadata for list endpoints."""

    page: int = Field(..., ge=1, examples=[1])
    limit: int = Field(..., ge=1, examples=[20])
    total: int = Field(..., ge=0, examples=[57])
    pages: int = Field(..., ge=0, examples=[3])

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Compute the page count for a result set."""
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class PaginatedResponse(ApiResponse[List[DataT]], Generic[DataT]):
    """Envelope for paginated lists."""

    pagination: Pagination


def ok(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """
    Build a successful envelope.

    Args:
        data: Payload
        message: Optional message
        extra: Additional top-level keys such as ``pagination``

    Returns:
        Envelope dictionary
    """
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return body
