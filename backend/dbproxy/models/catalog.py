"""
Named document schemas and per-collection schema selection.
"""
from typing import Mapping, Optional

from pydantic import BaseModel

from dbproxy.core.errors import SchemaBindError
from dbproxy.models.grocery import GroceryItem

SCHEMALESS = "none"

SCHEMA_CATALOG: dict[str, Optional[type[BaseModel]]] = {
    "grocery": GroceryItem,
    SCHEMALESS: None,
}


class SchemaResolver:
    """Picks the document schema bound to a collection."""

    def __init__(self, default: str = "grocery", overrides: Optional[Mapping[str, str]] = None):
        self.default = default
        self.overrides = dict(overrides or {})

    def schema_name(self, collection_name: str) -> str:
        return self.overrides.get(collection_name, self.default)

    def resolve(self, collection_name: str) -> Optional[type[BaseModel]]:
        """Return the model class for a collection, or None when schemaless."""
        name = self.schema_name(collection_name)
        if name not in SCHEMA_CATALOG:
            raise SchemaBindError(
                f"Unknown schema '{name}' for collection '{collection_name}'; "
                f"expected one of {sorted(SCHEMA_CATALOG)}"
            )
        return SCHEMA_CATALOG[name]
