"""
VocabList Backend - Application Package
=========================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (lists, items, sharing)  │  ← Business rules, orchestration
    ├─────────────────────────────────────┤
    │   Document Store / Asset Store      │  ← Narrow persistence interfaces
    ├─────────────────────────────────────┤
    │   SQLAlchemy (documents table)      │  ← Async sessions, CAS writes
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
