"""
CRUD router: one endpoint per operation, addressed by database and collection.
"""
import logging
from typing import Annotated, Union

from fastapi import APIRouter, Depends, status

from dbproxy.core.errors import DocumentValidationError
from dbproxy.database.accessors import CollectionAccessor, serialize_document
from dbproxy.dependencies.data_access import get_accessor
from dbproxy.schemas.documents import (
    ErrorResponse,
    InsertManyResponse,
    InsertOneResponse,
    InsertRequest,
    MessageResponse,
    UpdateRequest,
    UpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid name, id or document"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Database failure"},
}
NOT_FOUND_RESPONSES = {
    **ERROR_RESPONSES,
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "No document with this id"},
}

Accessor = Annotated[CollectionAccessor, Depends(get_accessor)]


@router.get(
    "/find/{database}/{collection}",
    summary="List all documents",
    responses=ERROR_RESPONSES,
)
async def find_documents(accessor: Accessor):
    """Return every document in the collection."""
    documents = await accessor.find_all()
    logger.info(
        f"Found {len(documents)} documents in {accessor.database_name}.{accessor.collection_name}"
    )
    return [serialize_document(document) for document in documents]


@router.post(
    "/insert/{database}/{collection}",
    response_model=Union[InsertOneResponse, InsertManyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Insert one or many documents",
    responses=ERROR_RESPONSES,
)
async def insert_documents(body: InsertRequest, accessor: Accessor):
    """
    Insert documents into the collection.

    - **document**: a single document
    - **documents**: a list of documents, validated as a batch before any is stored
    """
    if body.document is not None:
        inserted_id = await accessor.insert_one(body.document)
        return InsertOneResponse(
            message="Document inserted successfully",
            inserted_id=str(inserted_id),
        )

    if body.documents is not None:
        inserted_ids = await accessor.insert_many(body.documents)
        return InsertManyResponse(
            message=f"{len(inserted_ids)} documents inserted",
            inserted_ids=[str(inserted_id) for inserted_id in inserted_ids],
        )

    raise DocumentValidationError(
        "Request body must contain either 'document' or 'documents' as array"
    )


@router.delete(
    "/delete/{database}/{collection}/{document_id}",
    response_model=MessageResponse,
    summary="Delete a document by id",
    responses=NOT_FOUND_RESPONSES,
)
async def delete_document(document_id: str, accessor: Accessor):
    """Delete one document by its id."""
    await accessor.delete_by_id(document_id)
    return MessageResponse(message=f"Document with ID {document_id} deleted successfully.")


@router.put(
    "/update/{database}/{collection}/{document_id}",
    response_model=UpdateResponse,
    summary="Update a document by id",
    responses=NOT_FOUND_RESPONSES,
)
async def update_document(document_id: str, body: UpdateRequest, accessor: Accessor):
    """
    Set the fields given in **update** on one document.

    Fields not mentioned in **update** keep their stored values.
    """
    document = await accessor.update_by_id(document_id, body.update)
    return UpdateResponse(
        message="Document updated successfully",
        modified_document=serialize_document(document),
    )
