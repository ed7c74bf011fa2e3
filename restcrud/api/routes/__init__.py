"""Route Modules — one file per concern.

Invariants:
    - health defines a static APIRouter; crud_routes builds one router per resource
    - Routes never contain CRUD logic (delegate to services)
"""
