"""
Core infrastructure package for the Visit Analytics backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg

Re-exports the configuration and pool helpers for short imports:

    from visit_analytics.core import get_settings, init_db, close_db

FastAPI dependencies live in visit_analytics.core.dependencies and are
imported from there directly; they depend on the service layer, which in
turn depends on this package.
"""

from visit_analytics.core.config import Settings, get_settings
from visit_analytics.core.database import (
    close_db,
    execute_query,
    execute_query_one,
    get_db_pool,
    init_db,
)

__all__ = [
    'Settings',
    'get_settings',
    'close_db',
    'execute_query',
    'execute_query_one',
    'get_db_pool',
    'init_db',
]
