"""
Derived statistics computed on top of grouped visit records.

Functions:
- coverage_percent: distinct visited locations / known locations
- participation_rate: participants / invited, over visits reporting both
- new_hire_coverage / star_employee_coverage: the same ratio for
  new-hire and star-employee coverage counts
- composite_scores: per-agent mean of the six culture-pulse averages
- rank_top_performers: stable descending sort by composite score
- category_breakdown: coverage and visit intensity per location tier
- rating_distribution: token counts per five-level field (heatmap)
- culture_pulse_assessment: culture-pulse averages across all visits

Rounding follows the dashboard convention of rounding halves up
(round_half_up), not Python's banker's rounding.

Zero denominators are "no data", never an error: every ratio returns 0.
Negative totals are structurally impossible and raise InvalidArgument.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from visit_analytics.models.enums import (
    CULTURE_PULSE_FIELDS,
    RATED_FIELDS,
    LocationCategory,
    QualitativeField,
    RatingToken,
)
from visit_analytics.models.schemas import (
    CategoryBreakdownRow,
    HeatmapRow,
    Location,
    QualitativeAssessment,
    VisitRecord,
)
from visit_analytics.services.errors import InvalidArgument
from visit_analytics.services.rating_scale import is_present, normalize_rating
from visit_analytics.services.record_aggregator import (
    QUALITATIVE_SELECTORS,
    aggregate,
    by_agent,
    qualifying,
    summarize,
)


CULTURE_PULSE_SELECTORS = {
    qualitative_field.value: QUALITATIVE_SELECTORS[qualitative_field.value]
    for qualitative_field in CULTURE_PULSE_FIELDS
}

FIELD_LABELS: Dict[QualitativeField, str] = {
    QualitativeField.LEADERS_ALIGNED: "Leaders Aligned With Code",
    QualitativeField.EMPLOYEES_SAFE: "Employees Feel Safe",
    QualitativeField.EMPLOYEES_MOTIVATED: "Employees Feel Motivated",
    QualitativeField.NO_ABUSIVE_LANGUAGE: "No Abusive Language",
    QualitativeField.COMFORT_ESCALATION: "Comfortable Escalating",
    QualitativeField.INCLUSIVE_CULTURE: "Inclusive Culture",
    QualitativeField.BRANCH_CULTURE: "Branch Culture",
    QualitativeField.LINE_MANAGER_BEHAVIOR: "Line Manager Behavior",
    QualitativeField.BRANCH_HYGIENE: "Branch Hygiene",
    QualitativeField.OVERALL_DISCIPLINE: "Overall Discipline",
}


# =============================================================================
# Rounding and Ratios
# =============================================================================


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves away from negative infinity (2.5 -> 3, -2.5 -> -2).

    >>> round_half_up(72.5)
    73.0
    >>> round_half_up(3.14159, 2)
    3.14
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(numerator: float, denominator: float) -> int:
    """Whole-number percentage, 0 when the denominator is 0."""
    if denominator == 0:
        return 0
    return int(round_half_up(numerator / denominator * 100))


def coverage_percent(visited: int, total: int) -> int:
    """
    Share of known locations visited, as a whole percentage.

    Args:
        visited: Distinct locations with at least one qualifying visit.
        total: Known locations in scope.

    Returns:
        round(visited / total * 100), or 0 when total is 0.

    Raises:
        InvalidArgument: If either count is negative.
    """
    if visited < 0 or total < 0:
        raise InvalidArgument(
            f"Coverage counts must be non-negative (visited={visited}, total={total})"
        )
    return percent(visited, total)


def _paired_ratio(records: Iterable[VisitRecord], numerator: str, denominator: str) -> int:
    numerator_sum = 0.0
    denominator_sum = 0.0
    for record in qualifying(records):
        top = getattr(record, numerator)
        bottom = getattr(record, denominator)
        if top is None or bottom is None:
            continue
        numerator_sum += top
        denominator_sum += bottom
    return percent(numerator_sum, denominator_sum)


def participation_rate(records: Iterable[VisitRecord]) -> int:
    """Participants over invited employees, for visits reporting both."""
    return _paired_ratio(records, "participant_count", "invited_count")


def new_hire_coverage(records: Iterable[VisitRecord]) -> int:
    """Covered new hires over total new hires, for visits reporting both."""
    return _paired_ratio(records, "covered_new_hires", "total_new_hires")


def star_employee_coverage(records: Iterable[VisitRecord]) -> int:
    return _paired_ratio(records, "covered_star_employees", "total_star_employees")


# =============================================================================
# Composite Score and Ranking
# =============================================================================


@dataclass(frozen=True)
class CompositeScore:
    """
    Per-agent ranking score.

    Attributes:
        agent_id: Agent identifier.
        name: Display name, 'N/A' when unknown.
        code: Employee code, 'N/A' when unknown.
        visit_count: Qualifying visits submitted by the agent.
        field_averages: Culture-pulse field -> mean score over present answers.
        overall_score: Mean of the six field averages, two decimals.
    """
    agent_id: str
    name: str
    code: str
    visit_count: int
    overall_score: float
    field_averages: Mapping[str, float] = field(default_factory=dict)


def composite_scores(records: Sequence[VisitRecord]) -> List[CompositeScore]:
    """
    Composite culture-pulse score for every agent with at least one answer.

    Each field average is the mean score over the agent's present answers
    for that field; a field the agent never answered contributes 0 to the
    six-way mean. Agents with no culture-pulse answers at all are left out
    rather than scored 0.

    Returns:
        Scores in first-encountered agent order.
    """
    records = qualifying(records)
    names: Dict[str, str] = {}
    codes: Dict[str, str] = {}
    for record in records:
        if record.agent_name and record.agent_id not in names:
            names[record.agent_id] = record.agent_name
        if record.agent_code and record.agent_id not in codes:
            codes[record.agent_id] = record.agent_code

    scores = []
    for row in aggregate(records, by_agent, CULTURE_PULSE_SELECTORS):
        answered = sum(row.observations(name) for name in CULTURE_PULSE_SELECTORS)
        if answered == 0:
            continue
        averages = {name: row.value(name) for name in CULTURE_PULSE_SELECTORS}
        overall = sum(averages.values()) / len(CULTURE_PULSE_FIELDS)
        scores.append(CompositeScore(
            agent_id=row.key,
            name=names.get(row.key, "N/A"),
            code=codes.get(row.key, "N/A"),
            visit_count=row.record_count,
            overall_score=round_half_up(overall, 2),
            field_averages=averages,
        ))
    return scores


def rank_top_performers(
    scores: Iterable[CompositeScore],
    limit: Optional[int] = None,
) -> List[CompositeScore]:
    """
    Order agents by composite score, best first.

    The sort is stable and uses no secondary key: agents with equal scores
    keep the order in which they were first encountered, regardless of
    visit count.

    Raises:
        InvalidArgument: If limit is negative.
    """
    if limit is not None and limit < 0:
        raise InvalidArgument(f"limit must be non-negative, got {limit}")
    ranked = sorted(scores, key=lambda score: -score.overall_score)
    return ranked if limit is None else ranked[:limit]


# =============================================================================
# Category Breakdown
# =============================================================================


def category_breakdown(
    records: Iterable[VisitRecord],
    locations: Iterable[Location],
) -> List[CategoryBreakdownRow]:
    """
    Coverage and visit intensity for each of the five location tiers.

    A visit is attributed to its location's tier from the location store;
    visits to locations the store does not know fall back to the tier
    recorded on the visit. Only known locations count as visited, so
    coverage never exceeds 100%.

    Returns:
        Five rows, platinum first, always present even with no data.
    """
    location_categories: Dict[str, LocationCategory] = {}
    totals: Dict[LocationCategory, int] = {category: 0 for category in LocationCategory}
    for location in locations:
        if location.category is None:
            continue
        location_categories[location.id] = location.category
        totals[location.category] += 1

    visits: Dict[LocationCategory, int] = {category: 0 for category in LocationCategory}
    visited: Dict[LocationCategory, set] = {category: set() for category in LocationCategory}
    for record in qualifying(records):
        category = location_categories.get(record.location_id, record.category)
        visits[category] += 1
        if record.location_id in location_categories:
            visited[category].add(record.location_id)

    rows = []
    for category in LocationCategory:
        total = totals[category]
        rows.append(CategoryBreakdownRow(
            category=category,
            name=category.display_name,
            branches_in_category=total,
            visited_branches=len(visited[category]),
            coverage_percent=coverage_percent(len(visited[category]), total),
            visit_count=visits[category],
            average_visits_per_branch=(
                round_half_up(visits[category] / total, 1) if total > 0 else 0.0
            ),
        ))
    return rows


# =============================================================================
# Qualitative Summaries
# =============================================================================


def rating_distribution(
    records: Iterable[VisitRecord],
    fields: Sequence[QualitativeField] = RATED_FIELDS,
) -> List[HeatmapRow]:
    """
    Count each rating token per five-level field.

    Missing and unrecognized tokens are not counted; `total` is the number
    of recognized answers for the field.
    """
    counts: Dict[QualitativeField, Dict[RatingToken, int]] = {
        qualitative_field: {token: 0 for token in RatingToken} for qualitative_field in fields
    }
    for record in qualifying(records):
        for qualitative_field in fields:
            token = normalize_rating(record.qualitative(qualitative_field))
            if token is not None:
                counts[qualitative_field][token] += 1

    rows = []
    for qualitative_field in fields:
        field_counts = counts[qualitative_field]
        rows.append(HeatmapRow(
            field=qualitative_field,
            label=FIELD_LABELS[qualitative_field],
            very_poor=field_counts[RatingToken.VERY_POOR],
            poor=field_counts[RatingToken.POOR],
            neutral=field_counts[RatingToken.NEUTRAL],
            good=field_counts[RatingToken.GOOD],
            excellent=field_counts[RatingToken.EXCELLENT],
            total=sum(field_counts.values()),
        ))
    return rows


def culture_pulse_assessment(records: Iterable[VisitRecord]) -> QualitativeAssessment:
    """
    Average yes/no culture-pulse answers on the 0-5 scale.

    `count` is the number of qualifying visits that answered at least one
    culture-pulse question; `overall` is the mean of the six field averages.
    """
    answered = [
        record for record in qualifying(records)
        if any(is_present(record.qualitative(f)) for f in CULTURE_PULSE_FIELDS)
    ]
    if not answered:
        return QualitativeAssessment()

    row = summarize(answered, CULTURE_PULSE_SELECTORS)
    averages = {name: round_half_up(row.value(name), 2) for name in CULTURE_PULSE_SELECTORS}
    overall = sum(row.value(name) for name in CULTURE_PULSE_SELECTORS) / len(CULTURE_PULSE_FIELDS)
    return QualitativeAssessment(
        **averages,
        overall=round_half_up(overall, 2),
        count=len(answered),
    )
