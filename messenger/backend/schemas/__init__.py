# Pydantic schemas package
from messenger.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    OkResult,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "OkResult",
    "ResponseMetadata",
]
