"""
Visit Analytics Services Module

Business logic of the metrics aggregation engine plus the stores it reads
from. Engine modules are pure and stateless; only the stores perform I/O.

Services:
- rating_scale: qualitative token -> 0-5 score
- period_partitioner: lookback window -> contiguous time buckets
- record_aggregator: null-aware grouping and averaging
- derived_metrics: coverage, participation, composite scores, breakdowns
- aggregation_facade: named analytics queries served by the API
- visit_store: store interfaces, PostgreSQL and in-memory implementations

All services are consumed by the API layer (visit_analytics/api/).
"""

# =============================================================================
# Errors
# =============================================================================

from visit_analytics.services.errors import InvalidArgument

# =============================================================================
# Rating Scale Exports
# =============================================================================

from visit_analytics.services.rating_scale import (
    is_present,
    normalize_rating,
    score_field,
    to_score,
)

# =============================================================================
# Period Partitioner Exports
# Policy table of range kinds and the bucket generators built on it
# =============================================================================

from visit_analytics.services.period_partitioner import (
    RANGE_POLICIES,
    RangePolicy,
    TimeBucket,
    granularity_for,
    parse_date,
    parse_range_kind,
    partition,
    window_start,
)

# =============================================================================
# Record Aggregator Exports
# =============================================================================

from visit_analytics.services.record_aggregator import (
    METRIC_SELECTORS,
    QUALITATIVE_SELECTORS,
    AggregateRow,
    MetricSummary,
    aggregate,
    by_agent,
    by_bucket,
    by_category,
    by_location,
    qualifying,
    summarize,
)

# =============================================================================
# Derived Metrics Exports
# =============================================================================

from visit_analytics.services.derived_metrics import (
    CompositeScore,
    category_breakdown,
    composite_scores,
    coverage_percent,
    culture_pulse_assessment,
    new_hire_coverage,
    participation_rate,
    rank_top_performers,
    rating_distribution,
    round_half_up,
    star_employee_coverage,
)

# =============================================================================
# Stores and Facade
# =============================================================================

from visit_analytics.services.visit_store import (
    InMemoryVisitStore,
    LocationStore,
    PostgresVisitStore,
    VisitRecordStore,
)

from visit_analytics.services.aggregation_facade import (
    AggregationFacade,
    compute_category_metrics,
    compute_dashboard_stats,
    compute_location_metrics,
    compute_monthly_trend,
    compute_top_performers,
)

__all__ = [
    'InvalidArgument',
    # rating_scale
    'is_present',
    'normalize_rating',
    'score_field',
    'to_score',
    # period_partitioner
    'RANGE_POLICIES',
    'RangePolicy',
    'TimeBucket',
    'granularity_for',
    'parse_date',
    'parse_range_kind',
    'partition',
    'window_start',
    # record_aggregator
    'METRIC_SELECTORS',
    'QUALITATIVE_SELECTORS',
    'AggregateRow',
    'MetricSummary',
    'aggregate',
    'by_agent',
    'by_bucket',
    'by_category',
    'by_location',
    'qualifying',
    'summarize',
    # derived_metrics
    'CompositeScore',
    'category_breakdown',
    'composite_scores',
    'coverage_percent',
    'culture_pulse_assessment',
    'new_hire_coverage',
    'participation_rate',
    'rank_top_performers',
    'rating_distribution',
    'round_half_up',
    'star_employee_coverage',
    # stores and facade
    'InMemoryVisitStore',
    'LocationStore',
    'PostgresVisitStore',
    'VisitRecordStore',
    'AggregationFacade',
    'compute_category_metrics',
    'compute_dashboard_stats',
    'compute_location_metrics',
    'compute_monthly_trend',
    'compute_top_performers',
]
