"""
Enumeration definitions for the Visit Analytics backend.

All enums inherit from both `str` and `Enum` so they serialize cleanly through
Pydantic models and FastAPI responses, and compare equal to the raw string
values stored in the `branch_visits` / `branches` tables.

Contents:
- VisitStatus: approval workflow states of a visit record
- LocationCategory: the five location tiers, highest to lowest
- RatingToken: five-level qualitative rating tokens
- QualitativeField: the qualitative questions captured on a visit
- RangeKind: supported trend lookback windows
- Granularity: time bucket units produced by the period partitioner
"""

from enum import Enum
from typing import Tuple


class VisitStatus(str, Enum):
    """
    Approval workflow state of a visit record.

    Values: 'draft' | 'submitted' | 'approved' | 'rejected'

    Only submitted and approved visits contribute to statistics; drafts and
    rejections are always filtered out before aggregation.
    """
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses that count towards every aggregate
QUALIFYING_STATUSES: Tuple[VisitStatus, ...] = (
    VisitStatus.SUBMITTED,
    VisitStatus.APPROVED,
)


class LocationCategory(str, Enum):
    """
    Location tier, declared highest to lowest.

    Values: 'platinum' | 'diamond' | 'gold' | 'silver' | 'bronze'

    Declaration order is the display order of the category breakdown.
    """
    PLATINUM = "platinum"
    DIAMOND = "diamond"
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"

    @property
    def display_name(self) -> str:
        """Capitalized label, e.g. 'Platinum'."""
        return self.value.capitalize()


class RatingToken(str, Enum):
    """
    Five-level qualitative rating, lowest to highest.

    Numeric mapping lives in services/rating_scale.py:
    very_poor=1, poor=2, neutral=3, good=4, excellent=5.
    """
    VERY_POOR = "very_poor"
    POOR = "poor"
    NEUTRAL = "neutral"
    GOOD = "good"
    EXCELLENT = "excellent"


class QualitativeField(str, Enum):
    """
    Qualitative questions recorded on a visit.

    Two families:
    - Culture pulse (yes/no): the six questions feeding the composite score
      and the qualitative assessment summary.
    - Rated (five-level): the four branch observations shown on the
      qualitative heatmap.

    The enum value is the attribute name on VisitRecord.
    """
    LEADERS_ALIGNED = "leaders_aligned"
    EMPLOYEES_SAFE = "employees_safe"
    EMPLOYEES_MOTIVATED = "employees_motivated"
    NO_ABUSIVE_LANGUAGE = "no_abusive_language"
    COMFORT_ESCALATION = "comfort_escalation"
    INCLUSIVE_CULTURE = "inclusive_culture"
    BRANCH_CULTURE = "branch_culture"
    LINE_MANAGER_BEHAVIOR = "line_manager_behavior"
    BRANCH_HYGIENE = "branch_hygiene"
    OVERALL_DISCIPLINE = "overall_discipline"

    @property
    def is_boolean(self) -> bool:
        """True for yes/no questions, False for five-level ratings."""
        return self in CULTURE_PULSE_FIELDS


CULTURE_PULSE_FIELDS: Tuple[QualitativeField, ...] = (
    QualitativeField.LEADERS_ALIGNED,
    QualitativeField.EMPLOYEES_SAFE,
    QualitativeField.EMPLOYEES_MOTIVATED,
    QualitativeField.NO_ABUSIVE_LANGUAGE,
    QualitativeField.COMFORT_ESCALATION,
    QualitativeField.INCLUSIVE_CULTURE,
)

RATED_FIELDS: Tuple[QualitativeField, ...] = (
    QualitativeField.BRANCH_CULTURE,
    QualitativeField.LINE_MANAGER_BEHAVIOR,
    QualitativeField.BRANCH_HYGIENE,
    QualitativeField.OVERALL_DISCIPLINE,
)


class RangeKind(str, Enum):
    """
    Lookback windows accepted by the trend query.

    The granularity and lookback of each kind are defined once, in the
    policy table of services/period_partitioner.py.
    """
    LAST_7_DAYS = "last-7-days"
    LAST_MONTH = "last-month"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    LAST_YEAR = "last-year"
    LAST_3_YEARS = "last-3-years"


class Granularity(str, Enum):
    """Time bucket unit."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
