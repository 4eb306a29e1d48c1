"""
Abattoir Server - operations ledger and analytics for slaughterhouses.

This package records slaughterhouse operations (animals, meat products,
expenses, inspections, staff, maintenance, suppliers, shipments, waste)
and derives financial, quality, maintenance and inventory metrics.

Architecture:
    ┌─────────────┐     ┌─────────────┐     ┌─────────────────┐
    │   Client    │────▶│    HTTP     │────▶│   Operations    │
    │             │     │   adapter   │     │  (validate+mint)│
    └─────────────┘     └─────────────┘     └────────┬────────┘
                                                     │
                        ┌────────────────────────────┼──────────┐
                        │            Ledger context  ▼          │
                        │  ┌────────────┐   ┌─────────────────┐ │
                        │  │ID Allocator│   │ Entity Stores x │ │
                        │  │  (counter) │   │  (one per kind) │ │
                        │  └─────┬──────┘   └────────┬────────┘ │
                        │        └────────┬──────────┘          │
                        │                 ▼                     │
                        │           ┌──────────┐                │
                        │           │  SQLite  │                │
                        │           └──────────┘                │
                        └───────────────────────────────────────┘
                                                     ▲
                                       ┌─────────────┴──────┐
                                       │ Aggregation Engine │
                                       └────────────────────┘

Invariants:
    - One ID counter is shared by every entity kind; IDs never repeat
    - Foreign keys are checked once, when a record is created
    - Validation finishes before the first mutating store call
    - Aggregates are computed on read and never persisted

How to change safely:
    - New entity kinds get their own store (own table), never a shared one
    - Never switch to per-kind ID sequences; tracking numbers depend on it
    - Record fields can be added with defaults; stored JSON lacks them

Version: see _version.py.
"""

from ._version import __version__

__all__ = ["__version__"]
