"""Routers grouping the order catalog endpoints."""
