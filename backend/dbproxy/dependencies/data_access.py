"""
Dependencies resolving the data-access layer and collection accessors.
"""
from typing import Annotated

from fastapi import Depends, Request

from dbproxy.database.accessors import CollectionAccessor
from dbproxy.database.registry import DataAccessLayer


def get_data_access(request: Request) -> DataAccessLayer:
    """The data-access layer created during application startup."""
    return request.app.state.data_access


async def get_accessor(
    database: str,
    collection: str,
    data_access: Annotated[DataAccessLayer, Depends(get_data_access)],
) -> CollectionAccessor:
    """Resolve the accessor for the ``database``/``collection`` path parameters."""
    return await data_access.acquire(database, collection)
