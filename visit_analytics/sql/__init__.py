"""
SQL Query Module for the Visit Analytics backend.

Provides parameterized SQL queries for the visit and location stores
(services/visit_store.py). Builders return `(query, args)` pairs for asyncpg.

Example usage:
    from visit_analytics.sql import get_visits_query

    sql, args = get_visits_query(date_from=date(2026, 1, 1), status_in=["approved"])
    rows = await conn.fetch(sql, *args)
"""

from visit_analytics.sql.visit_queries import (
    VISIT_COLUMNS,
    get_location_count_query,
    get_locations_query,
    get_visits_query,
)

__all__ = [
    'VISIT_COLUMNS',
    'get_location_count_query',
    'get_locations_query',
    'get_visits_query',
]
