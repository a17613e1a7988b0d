"""
Error kinds raised by the data-access layer.

Each error carries the HTTP status the routers answer with, so handlers never
have to inspect the error type themselves.
"""
from typing import Any, Iterable


class ProxyError(Exception):
    """Base class for every error the proxy reports to its callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(ProxyError):
    """Connection template or credentials are missing or malformed."""


class DatabaseConnectionError(ProxyError):
    """A named database connection could not be opened."""


class SchemaBindError(ProxyError):
    """An accessor could not be built for a collection."""


class DocumentValidationError(ProxyError):
    """A document or request failed validation."""

    status_code = 400


class InvalidNameError(DocumentValidationError):
    """A database or collection name is not usable."""


class DocumentNotFoundError(ProxyError):
    """No document matches the requested id."""

    status_code = 404


class OperationTimeoutError(ProxyError):
    """A database operation did not finish in time."""


def describe_errors(errors: Iterable[dict[str, Any]], prefix: str = "") -> str:
    """Flatten pydantic error dicts into one readable line."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        if prefix:
            location = f"{prefix}.{location}" if location else prefix
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
