"""Shared SQLAlchemy models registry for the workspace database.

Currently holds the key-value table used by ``bank_import`` storage.
"""

from .kv import Base, KvEntry

__all__ = [
    "Base",
    "KvEntry",
]
