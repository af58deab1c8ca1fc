"""Pydantic models for API-level responses.

Order request and view models live with the domain in
``src.domain.orders.schemas``; this package holds the shared error format.
"""
