"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .audit_event import InMemoryAuditEventRepository
from .user import InMemoryUserRepository

__all__ = ["InMemoryUserRepository", "InMemoryAuditEventRepository"]
