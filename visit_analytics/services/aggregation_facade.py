"""
Aggregation Facade for the Visit Analytics backend.

Entry point wiring the rating scale, period partitioner, record aggregator and
derived-metric functions into the named analytics queries served by the API.

Each query comes in two flavours:
- an async method on AggregationFacade that fetches a snapshot from the
  visit/location stores and then computes synchronously;
- a pure `compute_*` function taking the snapshot directly, used by the
  facade and by tests.

Queries:
- dashboard_stats: headline coverage, agent count, averages and deltas
  versus the previous comparison window
- monthly_trend: per-bucket coverage, participation and metric averages
- top_performers: agents ranked by composite culture-pulse score
- category_breakdown: coverage per location tier
- category_metrics: headline averages and case totals per location tier
- qualitative_heatmap: rating token distribution of the five-level fields
- qualitative_assessment: culture-pulse averages on the 0-5 scale
- location_metrics: rounded per-location averages

Usage:
    from visit_analytics.services import AggregationFacade, InMemoryVisitStore

    store = InMemoryVisitStore(visits, locations)
    facade = AggregationFacade(store, store)
    stats = await facade.dashboard_stats(date(2026, 10, 17))
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from visit_analytics.models.enums import (
    QUALIFYING_STATUSES,
    LocationCategory,
    QualitativeField,
    RangeKind,
    VisitStatus,
)
from visit_analytics.models.schemas import (
    CategoryBreakdownRow,
    CategoryMetrics,
    DashboardComparison,
    DashboardStats,
    HeatmapRow,
    Location,
    LocationMetrics,
    QualitativeAssessment,
    TopPerformer,
    TrendPoint,
    TrendSeries,
    VisitFilter,
    VisitRecord,
)
from visit_analytics.services.derived_metrics import (
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
from visit_analytics.services.errors import InvalidArgument
from visit_analytics.services.period_partitioner import (
    TimeBucket,
    granularity_for,
    parse_date,
    parse_range_kind,
    partition,
    window_start,
)
from visit_analytics.services.record_aggregator import (
    METRIC_SELECTORS,
    QUALITATIVE_SELECTORS,
    aggregate,
    by_bucket,
    by_category,
    by_location,
    distinct_values,
    qualifying,
    summarize,
)
from visit_analytics.services.visit_store import LocationStore, VisitRecordStore

logger = logging.getLogger(__name__)


# Metrics averaged on the dashboard and in trend buckets
HEADLINE_METRICS: Tuple[str, ...] = (
    "staffing_ratio",
    "attrition_ratio",
    "engagement_ratio",
    "non_vendor_ratio",
)

HEADLINE_SELECTORS = {name: METRIC_SELECTORS[name] for name in HEADLINE_METRICS}

DASHBOARD_SELECTORS = {
    **HEADLINE_SELECTORS,
    "case_count": METRIC_SELECTORS["case_count"],
}

LOCATION_METRICS: Tuple[str, ...] = HEADLINE_METRICS + ("case_count",)

DEFAULT_COMPARISON_WINDOW_DAYS = 30

DateLike = Union[str, date]


def _rounded(value: float) -> int:
    return int(round_half_up(value))


def _optional_date(value: Optional[DateLike]) -> Optional[date]:
    return parse_date(value) if value is not None else None


def _date_range(date_from: Optional[DateLike], date_to: Optional[DateLike]) -> Tuple[Optional[date], Optional[date]]:
    start = _optional_date(date_from)
    end = _optional_date(date_to)
    if start is not None and end is not None and start > end:
        raise InvalidArgument(f"date_from {start} is after date_to {end}")
    return start, end


# =============================================================================
# Dashboard
# =============================================================================


def _headline(records: Sequence[VisitRecord], total_locations: int) -> Dict[str, int]:
    """Coverage and rounded headline averages for one set of qualifying records."""
    visited = len(distinct_values(records, by_location))
    row = summarize(records, HEADLINE_SELECTORS)
    headline = {"coverage_percent": coverage_percent(visited, total_locations)}
    for name in HEADLINE_METRICS:
        headline[name] = _rounded(row.value(name))
    return headline


def compute_dashboard_stats(
    records: Iterable[VisitRecord],
    total_locations: int,
    reference_end: DateLike,
    comparison_window_days: int = DEFAULT_COMPARISON_WINDOW_DAYS,
) -> DashboardStats:
    """
    Headline dashboard numbers over every qualifying visit.

    Active agents are the distinct agents with at least one approved visit.
    `vs_previous` compares the `comparison_window_days` ending on
    `reference_end` with the same number of days before them; each delta is
    current minus previous.

    Raises:
        InvalidArgument: For a malformed reference date, a negative location
            total, or a non-positive comparison window.
    """
    end = parse_date(reference_end)
    if comparison_window_days <= 0:
        raise InvalidArgument(
            f"comparison_window_days must be positive, got {comparison_window_days}"
        )

    visits = qualifying(records)
    visited = len(distinct_values(visits, by_location))
    row = summarize(visits, DASHBOARD_SELECTORS)
    active_agents = len({
        visit.agent_id for visit in visits if visit.status is VisitStatus.APPROVED
    })

    current_start = end - timedelta(days=comparison_window_days - 1)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=comparison_window_days - 1)
    current = _headline(
        [v for v in visits if current_start <= v.visit_date <= end], total_locations
    )
    previous = _headline(
        [v for v in visits if previous_start <= v.visit_date <= previous_end], total_locations
    )

    return DashboardStats(
        total_locations=total_locations,
        visited_locations=visited,
        coverage_percent=coverage_percent(visited, total_locations),
        active_agents=active_agents,
        staffing_ratio=_rounded(row.value("staffing_ratio")),
        attrition_ratio=_rounded(row.value("attrition_ratio")),
        engagement_ratio=_rounded(row.value("engagement_ratio")),
        non_vendor_ratio=_rounded(row.value("non_vendor_ratio")),
        total_cases=int(row.summary("case_count").total),
        participation_rate=participation_rate(visits),
        new_hire_coverage=new_hire_coverage(visits),
        star_employee_coverage=star_employee_coverage(visits),
        observations={name: row.observations(name) for name in HEADLINE_METRICS},
        vs_previous=DashboardComparison(
            **{name: current[name] - previous[name] for name in current}
        ),
    )


# =============================================================================
# Trend
# =============================================================================


def compute_monthly_trend(
    records: Iterable[VisitRecord],
    total_locations: int,
    range_kind: Union[str, RangeKind],
    reference_end: DateLike,
) -> TrendSeries:
    """
    Trend series over the buckets of `range_kind` ending on `reference_end`.

    Every bucket yields a point even when it holds no visits. Visits outside
    the window are ignored. Coverage per bucket is distinct locations visited
    in that bucket over all known locations.

    Raises:
        InvalidArgument: For an unknown range kind or malformed date.
    """
    kind = parse_range_kind(range_kind)
    buckets = partition(kind, reference_end)
    bucket_of = by_bucket(buckets)

    visits_by_bucket: Dict[TimeBucket, List[VisitRecord]] = {bucket: [] for bucket in buckets}
    for visit in qualifying(records):
        bucket = bucket_of(visit)
        if bucket is not None:
            visits_by_bucket[bucket].append(visit)

    in_window = [visit for bucket in buckets for visit in visits_by_bucket[bucket]]

    points = []
    for row in aggregate(in_window, bucket_of, HEADLINE_SELECTORS, key_order=buckets):
        bucket: TimeBucket = row.key
        bucket_visits = visits_by_bucket[bucket]
        visited = len(distinct_values(bucket_visits, by_location))
        points.append(TrendPoint(
            label=bucket.label,
            start=bucket.start,
            end=bucket.end,
            visit_count=row.record_count,
            coverage_percent=coverage_percent(visited, total_locations),
            participation_rate=participation_rate(bucket_visits),
            staffing_ratio=_rounded(row.value("staffing_ratio")),
            attrition_ratio=_rounded(row.value("attrition_ratio")),
            engagement_ratio=_rounded(row.value("engagement_ratio")),
            non_vendor_ratio=_rounded(row.value("non_vendor_ratio")),
            observations={name: row.observations(name) for name in HEADLINE_METRICS},
        ))

    return TrendSeries(
        range_kind=kind,
        granularity=granularity_for(kind),
        start=buckets[0].start,
        end=buckets[-1].end,
        points=points,
    )


# =============================================================================
# Rankings and Breakdowns
# =============================================================================


def compute_top_performers(
    records: Iterable[VisitRecord],
    limit: Optional[int] = None,
) -> List[TopPerformer]:
    """Agents ordered by composite culture-pulse score, best first."""
    ranked = rank_top_performers(composite_scores(list(records)), limit)
    return [
        TopPerformer(
            agent_id=score.agent_id,
            name=score.name,
            code=score.code,
            visit_count=score.visit_count,
            overall_score=score.overall_score,
        )
        for score in ranked
    ]


def compute_category_metrics(records: Iterable[VisitRecord]) -> List[CategoryMetrics]:
    """
    Rounded headline averages and total cases per location tier.

    Visits are grouped by the tier recorded on the visit. Every tier gets a
    row, highest first, even when it has no visits.
    """
    rows = aggregate(records, by_category, DASHBOARD_SELECTORS, key_order=list(LocationCategory))
    results = []
    for row in rows:
        category: LocationCategory = row.key
        results.append(CategoryMetrics(
            category=category,
            name=category.display_name,
            visit_count=row.record_count,
            staffing_ratio=_rounded(row.value("staffing_ratio")),
            attrition_ratio=_rounded(row.value("attrition_ratio")),
            engagement_ratio=_rounded(row.value("engagement_ratio")),
            non_vendor_ratio=_rounded(row.value("non_vendor_ratio")),
            total_cases=int(row.summary("case_count").total),
            observations={name: row.observations(name) for name in HEADLINE_METRICS},
        ))
    return results


def compute_location_metrics(
    records: Iterable[VisitRecord],
    locations: Iterable[Location],
) -> List[LocationMetrics]:
    """
    Rounded averages per visited location, in first-visited order.

    Display name, place and tier come from the location store; a location
    it does not know keeps 'N/A' labels and the tier recorded on its first
    visit.
    """
    known = {location.id: location for location in locations}
    visits = qualifying(records)
    recorded_category: Dict[str, LocationCategory] = {}
    for visit in visits:
        recorded_category.setdefault(visit.location_id, visit.category)

    selectors = {name: METRIC_SELECTORS[name] for name in LOCATION_METRICS}
    selectors.update(QUALITATIVE_SELECTORS)

    results = []
    for row in aggregate(visits, by_location, selectors):
        location = known.get(row.key)
        category = location.category if location is not None and location.category else None
        results.append(LocationMetrics(
            location_id=row.key,
            name=location.name if location is not None else "N/A",
            location=location.location if location is not None else "N/A",
            category=category or recorded_category.get(row.key),
            visit_count=row.record_count,
            metrics={name: _rounded(row.value(name)) for name in LOCATION_METRICS},
            qualitative={
                field.value: _rounded(row.value(field.value)) for field in QualitativeField
            },
        ))
    return results


# =============================================================================
# Facade
# =============================================================================


class AggregationFacade:
    """
    Named analytics queries over a visit store and a location store.

    The facade holds no state between calls: every method fetches a fresh
    snapshot and computes on it, so concurrent calls are independent.
    """

    def __init__(
        self,
        visit_store: VisitRecordStore,
        location_store: LocationStore,
        comparison_window_days: int = DEFAULT_COMPARISON_WINDOW_DAYS,
    ):
        self.visit_store = visit_store
        self.location_store = location_store
        self.comparison_window_days = comparison_window_days

    async def _fetch(self, **filters) -> List[VisitRecord]:
        visit_filter = VisitFilter(status_in=QUALIFYING_STATUSES, **filters)
        return await self.visit_store.fetch_visits(visit_filter)

    async def dashboard_stats(self, reference_end: Optional[DateLike] = None) -> DashboardStats:
        end = parse_date(reference_end) if reference_end is not None else date.today()
        records = await self._fetch()
        total = await self.location_store.count_total()
        logger.info(f"Dashboard stats over {len(records)} visits, {total} locations")
        return compute_dashboard_stats(records, total, end, self.comparison_window_days)

    async def monthly_trend(
        self,
        range_kind: Union[str, RangeKind],
        reference_end: Optional[DateLike] = None,
    ) -> TrendSeries:
        kind = parse_range_kind(range_kind)
        end = parse_date(reference_end) if reference_end is not None else date.today()
        records = await self._fetch(date_from=window_start(kind, end), date_to=end)
        total = await self.location_store.count_total()
        logger.info(f"Trend {kind.value} ending {end} over {len(records)} visits")
        return compute_monthly_trend(records, total, kind, end)

    async def top_performers(self, limit: Optional[int] = None) -> List[TopPerformer]:
        if limit is not None and limit < 0:
            raise InvalidArgument(f"limit must be non-negative, got {limit}")
        records = await self._fetch()
        return compute_top_performers(records, limit)

    async def category_breakdown(self) -> List[CategoryBreakdownRow]:
        records = await self._fetch()
        locations = await self.location_store.list_locations()
        return category_breakdown(records, locations)

    async def category_metrics(
        self,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
    ) -> List[CategoryMetrics]:
        start, end = _date_range(date_from, date_to)
        records = await self._fetch(date_from=start, date_to=end)
        logger.info(f"Category metrics over {len(records)} visits")
        return compute_category_metrics(records)

    async def qualitative_heatmap(
        self,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        category: Optional[Union[str, LocationCategory]] = None,
    ) -> List[HeatmapRow]:
        start, end = _date_range(date_from, date_to)
        tier = category if isinstance(category, LocationCategory) else None
        if category is not None and tier is None:
            try:
                tier = LocationCategory(category.strip().lower())
            except ValueError as e:
                raise InvalidArgument(f"Unknown location category {category!r}") from e
        records = await self._fetch(date_from=start, date_to=end, category=tier)
        return rating_distribution(records)

    async def qualitative_assessment(
        self,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
    ) -> QualitativeAssessment:
        start, end = _date_range(date_from, date_to)
        records = await self._fetch(date_from=start, date_to=end)
        return culture_pulse_assessment(records)

    async def location_metrics(self) -> List[LocationMetrics]:
        records = await self._fetch()
        locations = await self.location_store.list_locations()
        return compute_location_metrics(records, locations)
