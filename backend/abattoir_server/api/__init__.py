"""
API module for the abattoir server.

This module provides the external interface:
- HTTP adapter (aiohttp) over the operations and analytics functions

Invariants:
    - The adapter holds no state besides the Ledger it was built with
    - Every response body is JSON

How to change safely:
    - New endpoints call existing operations; add the operation first
"""

from .http_server import create_http_app, error_status, run_http_server

__all__ = [
    "create_http_app",
    "error_status",
    "run_http_server",
]
