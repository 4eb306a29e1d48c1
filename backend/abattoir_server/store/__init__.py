"""
Store module for the abattoir ledger - durable persistence.

This module handles:
- The shared SQLite database (one file, one table per record kind)
- The process-wide ID allocator
- Generic per-kind entity stores with bounded record encoding

Invariants:
    - One ID sequence for every record kind
    - Stores never share keys or iteration order
    - Durability is a property of the store; callers never save or load
"""

from .codec import RecordCodec
from .database import Database
from .entity_store import EntityStore
from .id_allocator import IdAllocator

__all__ = [
    "Database",
    "EntityStore",
    "IdAllocator",
    "RecordCodec",
]
