"""Core Layer — pure CRUD mapping logic, no HTTP, no DB.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - Tag parsing, validation, query translation and permission checks are pure

Design Decisions:
    - Functional core separated from imperative shell: the dispatcher (services/)
      orchestrates storage IO around these pure functions
"""
