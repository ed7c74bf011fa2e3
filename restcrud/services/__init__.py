"""Services Layer — shape registry, CRUD handlers and request dispatch.

Invariants:
    - Services orchestrate storage IO around pure core functions
    - Dispatch uses an explicit (method, id) -> operation mapping

Design Decisions:
    - Handlers and dispatch split: handlers know storage, dispatch knows routing
"""
