"""
FastAPI dependency injection module for the Visit Analytics backend.

Endpoint handlers never construct stores or the facade themselves; they
receive them through these dependencies, which tests replace via
`app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_visit_store: Returns the PostgreSQL-backed visit/location store
- get_facade: Builds an AggregationFacade over the injected store
- SettingsDep / VisitStoreDep / FacadeDep: Annotated aliases for endpoints

Usage Examples:
    @router.get("/dashboard")
    async def get_dashboard(facade: FacadeDep) -> DashboardStats:
        return await facade.dashboard_stats()

    # In tests
    store = InMemoryVisitStore(visits, locations)
    app.dependency_overrides[get_visit_store] = lambda: store
"""

from typing import Annotated

from fastapi import Depends

from visit_analytics.core.config import Settings, get_settings
from visit_analytics.services.aggregation_facade import AggregationFacade
from visit_analytics.services.visit_store import PostgresVisitStore


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Store and Facade Dependencies
# =============================================================================

def get_visit_store() -> PostgresVisitStore:
    """
    Return the store used for both visits and locations.

    The store is stateless; connections come from the shared asyncpg pool
    opened in the application lifespan.
    """
    return PostgresVisitStore()


VisitStoreDep = Annotated[PostgresVisitStore, Depends(get_visit_store)]


def get_facade(settings: SettingsDep, store: VisitStoreDep) -> AggregationFacade:
    """Build the aggregation facade over the injected store."""
    return AggregationFacade(
        visit_store=store,
        location_store=store,
        comparison_window_days=settings.comparison_window_days,
    )


FacadeDep = Annotated[AggregationFacade, Depends(get_facade)]
