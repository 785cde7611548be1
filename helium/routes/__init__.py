# Routes package init
"""
Helium — API Routes Package
=============================

Route Inventory:
    - actors.py:  GET  /api/actors             (list, optional ?q= filter)
                  GET  /api/actors/{id}        (single actor by actorId)
                  POST /api/actors             (create)
    - movies.py:  GET/POST /api/movies, GET/PUT/DELETE /api/movies/{id}
    - genres.py:  GET  /api/genres
    - system.py:  GET  /healthz, GET /metrics

Design Principle:
    Routes are THIN. They extract path/query/body values, call the service
    from the ServiceContainer and return its result. Errors propagate as
    HeliumError subclasses and are mapped to status codes in main.py.
"""
