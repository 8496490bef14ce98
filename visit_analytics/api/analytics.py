"""
FastAPI router module for the visit analytics endpoints.

Every endpoint is a read-only GET that delegates to AggregationFacade and
returns its Pydantic result unchanged.

Key Endpoints:
- GET /analytics/dashboard: Headline numbers with deltas vs the previous window
- GET /analytics/trends: Bucketed trend series for a lookback window
- GET /analytics/top-performers: Agents ranked by composite culture score
- GET /analytics/category-breakdown: Coverage per location tier
- GET /analytics/category-metrics: Headline averages and case totals per tier
- GET /analytics/qualitative-heatmap: Rating distribution of branch observations
- GET /analytics/qualitative-assessment: Culture-pulse averages on the 0-5 scale
- GET /analytics/locations: Per-location averages

Error Handling:
- InvalidArgument (bad range, malformed date, negative limit) -> HTTP 400
- Anything else is logged with traceback -> HTTP 500

Dates and range kinds are taken as plain strings and validated by the
engine, so a malformed value produces the engine's message rather than a
generic validation error.
"""

import logging
from typing import Awaitable, List, Optional, TypeVar

from fastapi import APIRouter, HTTPException, Query

from visit_analytics.core.dependencies import FacadeDep, SettingsDep
from visit_analytics.models.schemas import (
    CategoryBreakdownRow,
    CategoryMetrics,
    DashboardStats,
    HeatmapRow,
    LocationMetrics,
    QualitativeAssessment,
    TopPerformer,
    TrendSeries,
)
from visit_analytics.services.errors import InvalidArgument


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar('T')


async def _run_query(name: str, query: Awaitable[T]) -> T:
    """
    Await a facade query, translating failures into HTTP errors.

    Raises:
        HTTPException 400: If the query rejected its arguments.
        HTTPException 500: For any other failure.
    """
    try:
        return await query
    except HTTPException:
        raise
    except InvalidArgument as e:
        logger.warning(f"Rejected {name} request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error computing {name}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute {name}: {str(e)}"
        )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    '/dashboard',
    response_model=DashboardStats,
    summary="Get Dashboard Stats",
)
async def get_dashboard(
    facade: FacadeDep,
    reference_end: Optional[str] = Query(
        default=None,
        description="Last day of the comparison window (YYYY-MM-DD, default today)"
    ),
) -> DashboardStats:
    """
    Headline coverage, active agents and metric averages over all qualifying
    visits, with deltas of the latest comparison window against the one before.
    """
    logger.info(f"Fetching dashboard stats, reference_end={reference_end}")
    return await _run_query("dashboard stats", facade.dashboard_stats(reference_end))


@router.get(
    '/trends',
    response_model=TrendSeries,
    summary="Get Trend Series",
)
async def get_trends(
    facade: FacadeDep,
    settings: SettingsDep,
    range_kind: Optional[str] = Query(
        default=None,
        alias="range",
        description="last-7-days, last-month, last-3-months, last-6-months, last-year or last-3-years"
    ),
    reference_end: Optional[str] = Query(default=None, description="Last day of the window"),
) -> TrendSeries:
    """
    Trend series bucketed by day, week, month or quarter depending on the range.

    Args:
        range_kind: Lookback window; defaults to the configured default range.
        reference_end: Last day of the window; defaults to today.
    """
    kind = range_kind or settings.default_range_kind
    logger.info(f"Fetching trend series range={kind}, reference_end={reference_end}")
    return await _run_query("trend series", facade.monthly_trend(kind, reference_end))


@router.get(
    '/top-performers',
    response_model=List[TopPerformer],
    summary="Get Top Performers",
)
async def get_top_performers(
    facade: FacadeDep,
    settings: SettingsDep,
    limit: Optional[int] = Query(default=None, description="Maximum agents to return"),
) -> List[TopPerformer]:
    """Agents ordered by composite culture-pulse score; ties keep first-seen order."""
    effective_limit = limit if limit is not None else settings.top_performers_limit
    return await _run_query("top performers", facade.top_performers(effective_limit))


@router.get(
    '/category-breakdown',
    response_model=List[CategoryBreakdownRow],
    summary="Get Category Breakdown",
)
async def get_category_breakdown(facade: FacadeDep) -> List[CategoryBreakdownRow]:
    return await _run_query("category breakdown", facade.category_breakdown())


@router.get(
    '/category-metrics',
    response_model=List[CategoryMetrics],
    summary="Get Category Metrics",
)
async def get_category_metrics(
    facade: FacadeDep,
    date_from: Optional[str] = Query(default=None, description="First visit date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(default=None, description="Last visit date (YYYY-MM-DD)"),
) -> List[CategoryMetrics]:
    """Average staffing, attrition, engagement and non-vendor ratios plus total cases per tier."""
    return await _run_query(
        "category metrics",
        facade.category_metrics(date_from, date_to),
    )


@router.get(
    '/qualitative-heatmap',
    response_model=List[HeatmapRow],
    summary="Get Qualitative Heatmap",
)
async def get_qualitative_heatmap(
    facade: FacadeDep,
    date_from: Optional[str] = Query(default=None, description="First visit date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(default=None, description="Last visit date (YYYY-MM-DD)"),
    category: Optional[str] = Query(default=None, description="Location tier filter"),
) -> List[HeatmapRow]:
    """Count of each rating token for the four five-level branch observations."""
    return await _run_query(
        "qualitative heatmap",
        facade.qualitative_heatmap(date_from, date_to, category),
    )


@router.get(
    '/qualitative-assessment',
    response_model=QualitativeAssessment,
    summary="Get Qualitative Assessment",
)
async def get_qualitative_assessment(
    facade: FacadeDep,
    date_from: Optional[str] = Query(default=None),
    date_to: Optional[str] = Query(default=None),
) -> QualitativeAssessment:
    return await _run_query(
        "qualitative assessment",
        facade.qualitative_assessment(date_from, date_to),
    )


@router.get(
    '/locations',
    response_model=List[LocationMetrics],
    summary="Get Location Metrics",
)
async def get_location_metrics(facade: FacadeDep) -> List[LocationMetrics]:
    return await _run_query("location metrics", facade.location_metrics())
