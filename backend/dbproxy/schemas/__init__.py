"""
Request and response schemas for API endpoints.
"""
from dbproxy.schemas.documents import (
    InsertRequest,
    UpdateRequest,
    MessageResponse,
    InsertOneResponse,
    InsertManyResponse,
    UpdateResponse,
    ErrorResponse,
)

__all__ = [
    "InsertRequest",
    "UpdateRequest",
    "MessageResponse",
    "InsertOneResponse",
    "InsertManyResponse",
    "UpdateResponse",
    "ErrorResponse",
]
