"""Infrastructure Layer — database engine, SQL store and logging setup.

Invariants:
    - Infrastructure implements core protocols; core never imports it
    - All SQLAlchemy exceptions are mapped to StorageError at this boundary

Design Decisions:
    - One module per concern: engine lifecycle, record store, observability
"""
