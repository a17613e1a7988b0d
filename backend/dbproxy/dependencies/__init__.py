"""
Dependencies for dependency injection in routes.
"""
from dbproxy.dependencies.data_access import get_data_access, get_accessor

__all__ = [
    "get_data_access",
    "get_accessor",
]
