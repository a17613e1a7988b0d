"""
API Routers module.
"""
from dbproxy.routers import documents, health

__all__ = ["documents", "health"]
