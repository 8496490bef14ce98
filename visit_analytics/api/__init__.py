"""
API routers for the Visit Analytics backend.

- analytics: read-only analytics queries, mounted under /analytics
"""

from visit_analytics.api.analytics import router as analytics_router

__all__ = ['analytics_router']
