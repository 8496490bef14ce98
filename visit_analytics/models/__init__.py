"""
Package initialization file for visit analytics models.

Re-exports the enumerations and Pydantic schemas so other modules can write:

    from visit_analytics.models import VisitRecord, RangeKind, DashboardStats
"""

# =============================================================================
# Enums
# =============================================================================

from visit_analytics.models.enums import (
    CULTURE_PULSE_FIELDS,
    QUALIFYING_STATUSES,
    RATED_FIELDS,
    Granularity,
    LocationCategory,
    QualitativeField,
    RangeKind,
    RatingToken,
    VisitStatus,
)

# =============================================================================
# Schemas
# =============================================================================

from visit_analytics.models.schemas import (
    # Input records
    Location,
    VisitFilter,
    VisitRecord,
    # Results
    CategoryBreakdownRow,
    CategoryMetrics,
    DashboardComparison,
    DashboardStats,
    HeatmapRow,
    LocationMetrics,
    QualitativeAssessment,
    TopPerformer,
    TrendPoint,
    TrendSeries,
)

__all__ = [
    'CULTURE_PULSE_FIELDS',
    'QUALIFYING_STATUSES',
    'RATED_FIELDS',
    'Granularity',
    'LocationCategory',
    'QualitativeField',
    'RangeKind',
    'RatingToken',
    'VisitStatus',
    'Location',
    'VisitFilter',
    'VisitRecord',
    'CategoryBreakdownRow',
    'CategoryMetrics',
    'DashboardComparison',
    'DashboardStats',
    'HeatmapRow',
    'LocationMetrics',
    'QualitativeAssessment',
    'TopPerformer',
    'TrendPoint',
    'TrendSeries',
]
