"""Infrastructure layer: persistence for the order catalog.

Provides the async SQLAlchemy engine and session lifecycle, the declarative
base shared by ORM entities, and the generic repository the order store is
built on. The domain layer depends only on the ``OrderStore`` protocol; the
concrete implementation lives here.
"""
