"""Utility modules for API-specific functionality.

- **responses**: orjson-backed JSON response class
"""
