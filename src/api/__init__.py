"""HTTP API layer of the order catalog, built on FastAPI.

Key components:
- **main**: Application factory, lifespan and service endpoints
- **routers**: Order and metrics endpoints
- **dependencies**: Wiring of sessions, services and request locale
- **middleware**: Correlation IDs, request logging and error handling
- **schemas**: The standardized error response
- **utils**: orjson-backed JSON responses
"""
