"""
Null-aware grouping and averaging of visit records.

The aggregator makes a single pass over the qualifying records (status
submitted or approved), computes each record's group key, and for every
requested metric adds non-null values into a running (sum, count) pair keyed
by (group, metric). No per-record state is kept beyond those accumulators.

After the pass each metric becomes a MetricSummary:
- value: sum / count, or 0.0 when count == 0
- observations: count of non-null values behind the mean
- total: the raw sum (used by ratio metrics and case totals)

Exposing `observations` next to `value` is what lets callers tell "no data"
from a genuine zero average.

Grouping helpers:
- by_bucket(buckets): the TimeBucket containing visit_date, None (record
  skipped) when the visit falls outside every bucket. Buckets, not labels,
  are the keys: month labels repeat across years.
- by_category: the location tier
- by_agent: the submitting agent id
- by_location: the visited location id

Usage:
    from visit_analytics.services.record_aggregator import (
        aggregate, by_category, METRIC_SELECTORS,
    )

    rows = aggregate(records, by_category, METRIC_SELECTORS)
    for row in rows:
        print(row.key, row.value("staffing_ratio"), row.observations("staffing_ratio"))
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from visit_analytics.models.enums import QUALIFYING_STATUSES, QualitativeField
from visit_analytics.models.schemas import VisitRecord
from visit_analytics.services.period_partitioner import TimeBucket
from visit_analytics.services.rating_scale import is_present, score_field


GroupKeyFn = Callable[[VisitRecord], Optional[Hashable]]
MetricSelector = Callable[[VisitRecord], Optional[float]]


# =============================================================================
# Value Objects
# =============================================================================


@dataclass(frozen=True)
class MetricSummary:
    """
    Mean of the non-null observations of one metric within one group.

    Attributes:
        value: Mean of observations, 0.0 when there are none.
        observations: Number of non-null values seen.
        total: Sum of the observed values.
    """
    value: float = 0.0
    observations: int = 0
    total: float = 0.0


EMPTY_SUMMARY = MetricSummary()


@dataclass(frozen=True)
class AggregateRow:
    """
    Output of one group: its key, how many qualifying records fell into it,
    and a summary per requested metric.
    """
    key: Hashable
    record_count: int = 0
    metrics: Mapping[str, MetricSummary] = field(default_factory=dict)

    def summary(self, metric: str) -> MetricSummary:
        return self.metrics.get(metric, EMPTY_SUMMARY)

    def value(self, metric: str) -> float:
        return self.summary(metric).value

    def observations(self, metric: str) -> int:
        return self.summary(metric).observations


# =============================================================================
# Metric Selectors
# =============================================================================


def attribute_selector(name: str) -> MetricSelector:
    """Selector reading a numeric attribute of VisitRecord."""
    def select(record: VisitRecord) -> Optional[float]:
        return getattr(record, name)
    select.__name__ = name
    return select


def qualitative_selector(qualitative_field: QualitativeField) -> MetricSelector:
    """
    Selector scoring a qualitative answer on the 0-5 scale.

    Missing answers return None so they are not counted as observations;
    only present answers go through the rating scale.
    """
    def select(record: VisitRecord) -> Optional[float]:
        token = record.qualitative(qualitative_field)
        if not is_present(token):
            return None
        return score_field(qualitative_field, token)
    select.__name__ = qualitative_field.value
    return select


NUMERIC_METRICS: Tuple[str, ...] = (
    "staffing_ratio",
    "attrition_ratio",
    "engagement_ratio",
    "non_vendor_ratio",
    "case_count",
    "invited_count",
    "participant_count",
    "covered_new_hires",
    "total_new_hires",
    "covered_star_employees",
    "total_star_employees",
)

METRIC_SELECTORS: Dict[str, MetricSelector] = {
    name: attribute_selector(name) for name in NUMERIC_METRICS
}

QUALITATIVE_SELECTORS: Dict[str, MetricSelector] = {
    qualitative_field.value: qualitative_selector(qualitative_field)
    for qualitative_field in QualitativeField
}


# =============================================================================
# Group Key Functions
# =============================================================================


def by_bucket(buckets: Sequence[TimeBucket]) -> GroupKeyFn:
    """
    Key function assigning each record to the bucket containing its visit date.

    Records outside every bucket map to None and are left out of the
    bucketed aggregate.
    """
    ordered = list(buckets)

    def key(record: VisitRecord) -> Optional[TimeBucket]:
        for bucket in ordered:
            if bucket.contains(record.visit_date):
                return bucket
        return None
    return key


def by_category(record: VisitRecord) -> Hashable:
    return record.category


def by_agent(record: VisitRecord) -> Hashable:
    return record.agent_id


def by_location(record: VisitRecord) -> Hashable:
    return record.location_id


# =============================================================================
# Aggregation
# =============================================================================


def is_qualifying(record: VisitRecord) -> bool:
    return record.status in QUALIFYING_STATUSES


def qualifying(records: Iterable[VisitRecord]) -> List[VisitRecord]:
    """Drop drafts, rejections and records without a status."""
    return [record for record in records if is_qualifying(record)]


def _finalize(sums: Dict[str, float], counts: Dict[str, int], metric_names: Iterable[str]) -> Dict[str, MetricSummary]:
    metrics = {}
    for name in metric_names:
        count = counts.get(name, 0)
        total = sums.get(name, 0.0)
        metrics[name] = MetricSummary(
            value=total / count if count > 0 else 0.0,
            observations=count,
            total=total,
        )
    return metrics


def aggregate(
    records: Iterable[VisitRecord],
    group_key_fn: GroupKeyFn,
    metric_selectors: Mapping[str, MetricSelector],
    key_order: Optional[Sequence[Hashable]] = None,
) -> List[AggregateRow]:
    """
    Group qualifying records and average each requested metric per group.

    Args:
        records: Visit records in any order; non-qualifying statuses are skipped.
        group_key_fn: Maps a record to its group key; None drops the record.
        metric_selectors: metric name -> selector returning a number or None.
        key_order: Optional explicit row order. Every key listed gets a row,
            even with no records (all metrics 0 with 0 observations); keys
            seen in the data but not listed are appended in first-seen order.

    Returns:
        One AggregateRow per group key.

    Example:
        >>> rows = aggregate(records, by_agent, {"staffing_ratio": METRIC_SELECTORS["staffing_ratio"]})
        >>> rows[0].value("staffing_ratio")
        87.5
    """
    order: List[Hashable] = list(key_order) if key_order is not None else []
    seen = set(order)
    record_counts: Dict[Hashable, int] = {key: 0 for key in order}
    sums: Dict[Hashable, Dict[str, float]] = {key: {} for key in order}
    counts: Dict[Hashable, Dict[str, int]] = {key: {} for key in order}

    for record in records:
        if not is_qualifying(record):
            continue
        key = group_key_fn(record)
        if key is None:
            continue
        if key not in seen:
            seen.add(key)
            order.append(key)
            record_counts[key] = 0
            sums[key] = {}
            counts[key] = {}

        record_counts[key] += 1
        group_sums = sums[key]
        group_counts = counts[key]
        for name, selector in metric_selectors.items():
            observed = selector(record)
            if observed is None:
                continue
            group_sums[name] = group_sums.get(name, 0.0) + float(observed)
            group_counts[name] = group_counts.get(name, 0) + 1

    return [
        AggregateRow(
            key=key,
            record_count=record_counts[key],
            metrics=_finalize(sums[key], counts[key], metric_selectors.keys()),
        )
        for key in order
    ]


def summarize(
    records: Iterable[VisitRecord],
    metric_selectors: Mapping[str, MetricSelector],
) -> AggregateRow:
    """Aggregate all qualifying records into a single row keyed 'all'."""
    rows = aggregate(records, lambda record: "all", metric_selectors, key_order=["all"])
    return rows[0]


def distinct_values(records: Iterable[VisitRecord], key_fn: Callable[[VisitRecord], Any]) -> List[Any]:
    """Distinct non-null key values of qualifying records, in first-seen order."""
    values: List[Any] = []
    seen = set()
    for record in records:
        if not is_qualifying(record):
            continue
        value = key_fn(record)
        if value is None or value in seen:
            continue
        seen.add(value)
        values.append(value)
    return values
