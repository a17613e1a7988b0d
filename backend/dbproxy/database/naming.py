"""
Database and collection name rules enforced before touching the driver.
"""
from dbproxy.core.errors import InvalidNameError

_FORBIDDEN_DATABASE_CHARS = frozenset('/\\. "$\x00')
MAX_DATABASE_NAME_BYTES = 63


def validate_database_name(name: str) -> str:
    """Return ``name`` if MongoDB accepts it as a database name."""
    if not isinstance(name, str) or not name:
        raise InvalidNameError("Database name must be a non-empty string")
    forbidden = sorted(_FORBIDDEN_DATABASE_CHARS.intersection(name))
    if forbidden:
        raise InvalidNameError(
            f"Database name '{name}' contains forbidden characters: {forbidden!r}"
        )
    if len(name.encode("utf-8")) > MAX_DATABASE_NAME_BYTES:
        raise InvalidNameError(
            f"Database name '{name}' is longer than {MAX_DATABASE_NAME_BYTES} bytes"
        )
    return name


def validate_collection_name(name: str) -> str:
    """Return ``name`` if MongoDB accepts it as a collection name."""
    if not isinstance(name, str) or not name:
        raise InvalidNameError("Collection name must be a non-empty string")
    if "$" in name or "\x00" in name:
        raise InvalidNameError(f"Collection name '{name}' contains '$' or a null byte")
    if name.startswith("system."):
        raise InvalidNameError(f"Collection name '{name}' is reserved")
    return name
