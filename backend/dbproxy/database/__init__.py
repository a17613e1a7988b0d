"""
Database module - connection and accessor registries.
"""
from dbproxy.database.connections import (
    ConnectionRegistry,
    DatabaseConnection,
    build_connection_uri,
    mask_password,
)
from dbproxy.database.accessors import (
    AccessorRegistry,
    CollectionAccessor,
    parse_object_id,
    serialize_document,
)
from dbproxy.database.registry import DataAccessLayer, check_connection_settings

__all__ = [
    "ConnectionRegistry",
    "DatabaseConnection",
    "build_connection_uri",
    "mask_password",
    "AccessorRegistry",
    "CollectionAccessor",
    "parse_object_id",
    "serialize_document",
    "DataAccessLayer",
    "check_connection_settings",
]
