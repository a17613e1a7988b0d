"""
Core module - error kinds and logging setup.
"""
from dbproxy.core.errors import (
    ProxyError,
    ConfigError,
    DatabaseConnectionError,
    SchemaBindError,
    DocumentValidationError,
    InvalidNameError,
    DocumentNotFoundError,
    OperationTimeoutError,
    describe_errors,
)
from dbproxy.core.logging_setup import configure_logging

__all__ = [
    "ProxyError",
    "ConfigError",
    "DatabaseConnectionError",
    "SchemaBindError",
    "DocumentValidationError",
    "InvalidNameError",
    "DocumentNotFoundError",
    "OperationTimeoutError",
    "describe_errors",
    "configure_logging",
]
