"""
Request and response schemas for the CRUD endpoints.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InsertRequest(BaseModel):
    """Insert one document or a batch of documents."""
    document: Optional[dict[str, Any]] = Field(None, description="Single document to insert")
    documents: Optional[list[dict[str, Any]]] = Field(None, description="Documents to insert in order")


class UpdateRequest(BaseModel):
    """Fields to set on an existing document."""
    update: dict[str, Any] = Field(..., description="Fields to set; others are left unchanged")


class MessageResponse(BaseModel):
    message: str


class InsertOneResponse(MessageResponse):
    """Single insert response."""
    model_config = ConfigDict(populate_by_name=True)

    inserted_id: str = Field(..., alias="insertedId", description="Generated document id")


class InsertManyResponse(MessageResponse):
    """Batch insert response."""
    model_config = ConfigDict(populate_by_name=True)

    inserted_ids: list[str] = Field(..., alias="insertedIds", description="Generated ids, in order")


class UpdateResponse(MessageResponse):
    """Update response carrying the document after the change."""
    model_config = ConfigDict(populate_by_name=True)

    modified_document: dict[str, Any] = Field(..., alias="modifiedDocument")


class ErrorResponse(BaseModel):
    error: str
