"""Order Catalog - order catalog API with validated, instrumented order creation.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and error responses
- **Core Layer**: Configuration, logging, tracing and the exception hierarchy
- **Domain Layer**: Order validation rules, derived-field projection,
  creation pipelines and the in-memory metrics store
- **Infrastructure Layer**: Async SQLAlchemy persistence
"""
