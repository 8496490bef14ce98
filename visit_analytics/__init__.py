"""
Visit Analytics backend.

Metrics aggregation over field-visit reports served through a FastAPI
application:

- models/: enums and Pydantic schemas
- services/: the aggregation engine, facade and stores
- sql/: parameterised PostgreSQL queries
- api/: FastAPI routers
- core/: settings, database pool and dependencies
"""

__version__ = "1.0.0"
