"""
Pydantic models for stored documents and schema selection.
"""
from dbproxy.models.grocery import GroceryItem, FoodGroup
from dbproxy.models.catalog import SCHEMA_CATALOG, SCHEMALESS, SchemaResolver

__all__ = [
    "GroceryItem",
    "FoodGroup",
    "SCHEMA_CATALOG",
    "SCHEMALESS",
    "SchemaResolver",
]
