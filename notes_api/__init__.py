"""
Notes API: Application Package Initializer
=============================================

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Data Access)         │  ← Queries, result variants
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Note record + Pydantic shapes
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Motor client, unique index
    └─────────────────────────────────────┘

    Errors raised below the routes are classified in exceptions.py and
    turned into JSON envelopes by the handlers registered in main.py.
"""

__version__ = "1.0.0"
