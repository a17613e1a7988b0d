"""
Schema-bound collection accessors and their registry.
"""
import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ValidationError
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from dbproxy.core.errors import (
    DatabaseConnectionError,
    DocumentNotFoundError,
    DocumentValidationError,
    OperationTimeoutError,
    SchemaBindError,
    describe_errors,
)
from dbproxy.database.connections import ConnectionRegistry, DatabaseConnection
from dbproxy.database.naming import validate_collection_name, validate_database_name
from dbproxy.database.singleflight import SingleFlight
from dbproxy.models.catalog import SchemaResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

AccessorKey = tuple[str, str]


def parse_object_id(document_id: str) -> ObjectId:
    """Convert a path id to an ObjectId."""
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError) as e:
        raise DocumentValidationError(f"'{document_id}' is not a valid document id") from e


def serialize_document(value: Any) -> Any:
    """Make a stored document JSON friendly (ObjectId -> str)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    return value


class CollectionAccessor:
    """CRUD operations on one collection, validated by an optional schema."""

    def __init__(
        self,
        connection: DatabaseConnection,
        collection_name: str,
        schema: Optional[type[BaseModel]],
        operation_timeout: float,
    ):
        self.connection = connection
        self.collection_name = collection_name
        self.collection = connection.collection(collection_name)
        self.schema = schema
        self.operation_timeout = operation_timeout

    def __repr__(self) -> str:
        schema = self.schema.__name__ if self.schema else None
        return f"CollectionAccessor({self.database_name!r}, {self.collection_name!r}, schema={schema})"

    @property
    def database_name(self) -> str:
        return self.connection.name

    @property
    def key(self) -> AccessorKey:
        return (self.database_name, self.collection_name)

    async def _run(self, operation: str, awaitable: Awaitable[T], timeout: Optional[float]) -> T:
        limit = self.operation_timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(awaitable, limit)
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(
                f"{operation} on {self.database_name}.{self.collection_name} timed out after {limit}s"
            ) from e

    # ==================== Validation ====================

    def validate(self, document: Any, label: str = "document") -> dict[str, Any]:
        """Check a document against the schema and return what will be stored."""
        if not isinstance(document, dict):
            raise DocumentValidationError(f"{label} must be a JSON object")
        if self.schema is None:
            return dict(document)
        try:
            return self.schema.model_validate(document).model_dump(exclude_none=True)
        except ValidationError as e:
            raise DocumentValidationError(describe_errors(e.errors(), prefix=label)) from e

    def validate_update(self, existing: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
        """
        Validate only the fields being changed.

        Stored fields that are not part of the update are not re-checked, and
        keys the schema does not know are dropped.
        """
        if self.schema is None:
            return {key: value for key, value in update.items() if key != "_id"}

        fields = self.schema.model_fields
        current = self.schema.model_construct(
            **{key: value for key, value in existing.items() if key in fields}
        )
        changes: dict[str, Any] = {}
        errors: list[dict[str, Any]] = []
        for key, value in update.items():
            if key not in fields:
                continue
            try:
                setattr(current, key, value)
            except ValidationError as e:
                errors.extend(e.errors())
                continue
            changes[key] = getattr(current, key)
        if errors:
            raise DocumentValidationError(describe_errors(errors, prefix="update"))
        return changes

    # ==================== CRUD ====================

    async def find_all(self, timeout: Optional[float] = None) -> list[dict[str, Any]]:
        """Return every document in the collection."""
        cursor = self.collection.find({})
        return await self._run("find", cursor.to_list(length=None), timeout)

    async def count(self, timeout: Optional[float] = None) -> int:
        return await self._run("count", self.collection.count_documents({}), timeout)

    async def insert_one(self, document: dict[str, Any], timeout: Optional[float] = None) -> ObjectId:
        """Validate and insert one document, returning its id."""
        to_store = self.validate(document)
        result = await self._run("insert", self.collection.insert_one(to_store), timeout)
        return result.inserted_id

    async def insert_many(
        self, documents: list[dict[str, Any]], timeout: Optional[float] = None
    ) -> list[ObjectId]:
        """Validate every document first, then insert them all in order."""
        to_store = [
            self.validate(document, label=f"documents[{index}]")
            for index, document in enumerate(documents)
        ]
        if not to_store:
            return []
        result = await self._run("insert", self.collection.insert_many(to_store), timeout)
        return list(result.inserted_ids)

    async def delete_by_id(self, document_id: str, timeout: Optional[float] = None) -> dict[str, Any]:
        """Delete a document and return it as it was stored."""
        object_id = parse_object_id(document_id)
        deleted = await self._run(
            "delete", self.collection.find_one_and_delete({"_id": object_id}), timeout
        )
        if deleted is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found.")
        return deleted

    async def update_by_id(
        self, document_id: str, update: dict[str, Any], timeout: Optional[float] = None
    ) -> dict[str, Any]:
        """Set the fields present in ``update`` and return the updated document."""
        object_id = parse_object_id(document_id)
        if not isinstance(update, dict):
            raise DocumentValidationError("update must be a JSON object")

        existing = await self._run("find", self.collection.find_one({"_id": object_id}), timeout)
        if existing is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found.")

        changes = self.validate_update(existing, update)
        if not changes:
            return existing

        updated = await self._run(
            "update",
            self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            ),
            timeout,
        )
        if updated is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found.")
        return updated


class AccessorRegistry:
    """Maps (database, collection) pairs to one shared accessor each."""

    def __init__(
        self,
        connections: ConnectionRegistry,
        schemas: SchemaResolver,
        operation_timeout: float = 30.0,
    ):
        self.connections = connections
        self.schemas = schemas
        self.operation_timeout = operation_timeout
        self._accessors: SingleFlight[AccessorKey, CollectionAccessor] = SingleFlight("accessor")

    def keys(self) -> list[AccessorKey]:
        return self._accessors.keys()

    def get(self, database_name: str, collection_name: str) -> Optional[CollectionAccessor]:
        return self._accessors.get((database_name, collection_name))

    async def acquire(
        self,
        database_name: str,
        collection_name: str,
        timeout: Optional[float] = None,
    ) -> CollectionAccessor:
        """
        Get the accessor for a collection, binding it on first use.

        Raises:
            InvalidNameError: a name is not usable
            DatabaseConnectionError: the database connection failed
            SchemaBindError: the accessor could not be built
        """
        validate_database_name(database_name)
        validate_collection_name(collection_name)
        key = (database_name, collection_name)
        cached = self._accessors.get(key)
        if cached is not None and cached.connection is not self.connections.get(database_name):
            # its connection was invalidated; rebind on the current one
            self._accessors.pop(key)
            logger.info(f"Dropped stale accessor for {database_name}.{collection_name}")
        try:
            return await self._accessors.acquire(
                key, lambda: self._bind(database_name, collection_name), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise DatabaseConnectionError(
                f"Timed out after {timeout}s waiting for {database_name}.{collection_name}"
            ) from e

    async def _bind(self, database_name: str, collection_name: str) -> CollectionAccessor:
        connection = await self.connections.acquire(database_name)
        schema = self.schemas.resolve(collection_name)
        try:
            accessor = CollectionAccessor(
                connection, collection_name, schema, self.operation_timeout
            )
        except (PyMongoError, TypeError, ValueError) as e:
            logger.error(f"Cannot bind {database_name}.{collection_name}: {e}")
            raise SchemaBindError(
                f"Cannot bind collection '{collection_name}' in database '{database_name}': {e}"
            ) from e
        logger.info(f"Created new accessor: {accessor!r}")
        return accessor

    def invalidate(self, database_name: str, collection_name: Optional[str] = None) -> int:
        """
        Drop cached accessors for one collection, or for a whole database.

        A bind already in flight for a dropped key is not stopped and still
        publishes its accessor when it finishes.
        """
        if collection_name is not None:
            keys = [(database_name, collection_name)]
        else:
            keys = [key for key in self._accessors.keys() if key[0] == database_name]
        dropped = sum(1 for key in keys if self._accessors.pop(key) is not None)
        if dropped:
            logger.info(f"Invalidated {dropped} accessor(s) for database: {database_name}")
        return dropped

    def clear(self) -> None:
        self._accessors.clear()
