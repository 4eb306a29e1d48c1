"""
Abattoir ledger test suite.

This package contains:
- unit/: Unit tests (codec, stores, allocator, payloads, config)
- integration/: Integration tests (operations, analytics, HTTP adapter on SQLite)
"""
