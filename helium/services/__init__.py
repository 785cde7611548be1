# Services package init
"""
Helium — Services Layer
=========================

What:  Business logic between routes (HTTP) and the document store client.
How:   Services receive their collaborators (store, telemetry) in __init__ and
       are assembled by ServiceContainer; routes get them through FastAPI's
       dependency injection.

Service Inventory:
    - ActorService / MovieService / GenreService: resource operations
    - queries: parameterized query builders shared by the resource services
    - TelemetryService: Prometheus metrics for events, store calls and requests
    - KeyVaultService: secret reads at startup
    - ServiceContainer: wiring and lifecycle of all of the above
"""
