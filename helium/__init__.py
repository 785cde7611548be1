"""
Helium — Application Package Initializer
==========================================

What: A CRUD REST API over a Cosmos DB collection holding Actor, Movie and
      Genre documents.
Who:  Imported by uvicorn (helium.main:app), the `helium` console script and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, query building
    ├─────────────────────────────────────┤
    │            Models (Data)            │  ← Pydantic document models
    ├─────────────────────────────────────┤
    │   Document Store Client (database)  │  ← azure.cosmos.aio
    └─────────────────────────────────────┘

    Collaborators are built once at startup and passed explicitly through a
    ServiceContainer; nothing is looked up by name at request time.
"""

__version__ = "1.0.0"
