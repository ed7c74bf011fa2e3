"""API Layer — FastAPI routes, request dependencies and error handlers.

Invariants:
    - Routes registered explicitly by the application (no auto-discovery)
    - All endpoints return JSON envelopes

Design Decisions:
    - Thin routes delegate to services.crud_dispatch
"""
