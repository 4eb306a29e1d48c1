"""
CLI tools for abattoir ledger administration.

This module provides command-line tools for:
- report: Print analytics for a slaughterhouse as JSON

Invariants:
    - Tools work offline (no running server required)
    - Tools never write to the ledger
"""

from .report_cli import ReportCLI

__all__ = ["ReportCLI"]
