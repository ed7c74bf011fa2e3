"""Sample Schemas — pydantic record shapes served by the sample application.

Invariants:
    - Shapes are plain pydantic models; tags attached with crud_field()
"""
