"""
Pydantic models for the Visit Analytics backend.

This module holds two groups of models:

1. Input records read from the visit store (VisitRecord, Location, VisitFilter).
   These are frozen snapshots: the aggregation engine never mutates them.
2. Result structures returned by the aggregation facade and served unchanged
   by the API layer (DashboardStats, TrendSeries, TopPerformer,
   CategoryBreakdownRow, HeatmapRow, QualitativeAssessment, LocationMetrics).

Every result model is fully populated even when no data exists, so the
presentation layer can always render "0%" instead of handling a missing shape.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from visit_analytics.models.enums import (
    Granularity,
    LocationCategory,
    QualitativeField,
    RangeKind,
    VisitStatus,
)


# =============================================================================
# Input Records
# =============================================================================


class VisitRecord(BaseModel):
    """
    One field-visit report as submitted by an agent.

    Numeric metrics and qualitative answers are all optional; a None value
    means "not observed" and is skipped by every average. Qualitative answers
    are kept as raw tokens ('yes', 'no', 'good', ...) and converted by
    services/rating_scale.py at aggregation time.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "v-001",
                "agent_id": "agent-17",
                "agent_name": "Asha Rao",
                "agent_code": "E1042",
                "location_id": "br-220",
                "visit_date": "2026-03-14",
                "category": "gold",
                "status": "approved",
                "staffing_ratio": 92.0,
                "attrition_ratio": 11.5,
                "invited_count": 40,
                "participant_count": 31,
                "leaders_aligned": "yes",
                "branch_hygiene": "good",
            }
        }
    )

    id: str = Field(..., min_length=1, description="Visit identifier")
    agent_id: str = Field(..., min_length=1, description="Submitting field agent")
    agent_name: Optional[str] = Field(default=None, description="Agent display name")
    agent_code: Optional[str] = Field(default=None, description="Agent employee code")
    location_id: str = Field(..., min_length=1, description="Visited location")
    visit_date: DateType = Field(..., description="Calendar date of the visit")
    category: LocationCategory = Field(..., description="Location tier at visit time")
    status: Optional[VisitStatus] = Field(
        default=None,
        description="Workflow status; None is treated like a draft"
    )

    # Operational metrics
    staffing_ratio: Optional[float] = Field(default=None, description="Manning percentage")
    attrition_ratio: Optional[float] = Field(default=None, description="Attrition percentage")
    engagement_ratio: Optional[float] = Field(default=None, description="ER percentage")
    non_vendor_ratio: Optional[float] = Field(default=None, description="Non-vendor percentage")
    case_count: Optional[int] = Field(default=None, ge=0, description="Open case count")

    # Participation and coverage counts
    invited_count: Optional[int] = Field(default=None, ge=0)
    participant_count: Optional[int] = Field(default=None, ge=0)
    covered_new_hires: Optional[int] = Field(default=None, ge=0)
    total_new_hires: Optional[int] = Field(default=None, ge=0)
    covered_star_employees: Optional[int] = Field(default=None, ge=0)
    total_star_employees: Optional[int] = Field(default=None, ge=0)

    # Culture pulse (yes/no)
    leaders_aligned: Optional[str] = None
    employees_safe: Optional[str] = None
    employees_motivated: Optional[str] = None
    no_abusive_language: Optional[str] = None
    comfort_escalation: Optional[str] = None
    inclusive_culture: Optional[str] = None

    # Branch observations (five-level)
    branch_culture: Optional[str] = None
    line_manager_behavior: Optional[str] = None
    branch_hygiene: Optional[str] = None
    overall_discipline: Optional[str] = None

    @field_validator("category", "status", mode="before")
    @classmethod
    def _lowercase_enum(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def qualitative(self, field: QualitativeField) -> Optional[str]:
        """Raw token recorded for a qualitative field."""
        return getattr(self, field.value)


class Location(BaseModel):
    """A visitable location (branch) known to the location store."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="N/A")
    location: str = Field(default="N/A", description="City or region")
    category: Optional[LocationCategory] = None

    @field_validator("category", mode="before")
    @classmethod
    def _lowercase_category(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class VisitFilter(BaseModel):
    """
    Filter passed to VisitRecordStore.fetch_visits.

    All fields are optional; an empty filter fetches every visit. Status
    filtering here is only a fetch optimisation: the engine re-applies the
    qualifying-status filter on whatever comes back.
    """
    date_from: Optional[DateType] = None
    date_to: Optional[DateType] = None
    category: Optional[LocationCategory] = None
    agent_id: Optional[str] = None
    status_in: Optional[Tuple[VisitStatus, ...]] = None


# =============================================================================
# Result Structures
# =============================================================================


class DashboardComparison(BaseModel):
    """Change of headline numbers versus the preceding comparison window."""
    coverage_percent: int = 0
    staffing_ratio: int = 0
    attrition_ratio: int = 0
    engagement_ratio: int = 0
    non_vendor_ratio: int = 0


class DashboardStats(BaseModel):
    """
    Headline numbers for the analytics dashboard.

    Averages are rounded to whole percentages; each one comes with the number
    of visits that actually reported the metric.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_locations": 120,
                "visited_locations": 87,
                "coverage_percent": 73,
                "active_agents": 14,
                "staffing_ratio": 91,
                "attrition_ratio": 12,
                "engagement_ratio": 64,
                "non_vendor_ratio": 78,
                "total_cases": 28,
                "participation_rate": 71,
                "new_hire_coverage": 85,
                "star_employee_coverage": 60,
                "observations": {"staffing_ratio": 240},
                "vs_previous": {"coverage_percent": 5},
            }
        }
    )

    total_locations: int = Field(default=0, ge=0)
    visited_locations: int = Field(default=0, ge=0)
    coverage_percent: int = Field(default=0, ge=0)
    active_agents: int = Field(default=0, ge=0, description="Distinct agents with approved visits")
    staffing_ratio: int = 0
    attrition_ratio: int = 0
    engagement_ratio: int = 0
    non_vendor_ratio: int = 0
    total_cases: int = Field(default=0, ge=0)
    participation_rate: int = Field(default=0, ge=0)
    new_hire_coverage: int = Field(default=0, ge=0)
    star_employee_coverage: int = Field(default=0, ge=0)
    observations: Dict[str, int] = Field(default_factory=dict)
    vs_previous: DashboardComparison = Field(default_factory=DashboardComparison)


class TrendPoint(BaseModel):
    """One time bucket of the trend series."""
    label: str
    start: DateType
    end: DateType
    visit_count: int = Field(default=0, ge=0)
    coverage_percent: int = Field(default=0, ge=0)
    participation_rate: int = Field(default=0, ge=0)
    staffing_ratio: int = 0
    attrition_ratio: int = 0
    engagement_ratio: int = 0
    non_vendor_ratio: int = 0
    observations: Dict[str, int] = Field(
        default_factory=dict,
        description="Non-null observations behind each averaged metric"
    )


class TrendSeries(BaseModel):
    """Trend series for a lookback window."""
    range_kind: RangeKind
    granularity: Granularity
    start: DateType
    end: DateType
    points: List[TrendPoint] = Field(default_factory=list)


class TopPerformer(BaseModel):
    """Agent ranked by composite culture-pulse score."""
    agent_id: str
    name: str = "N/A"
    code: str = "N/A"
    visit_count: int = Field(default=0, ge=0)
    overall_score: float = Field(default=0.0, ge=0.0, le=5.0)


class CategoryBreakdownRow(BaseModel):
    """Coverage and visit intensity for one location tier."""
    category: LocationCategory
    name: str
    branches_in_category: int = Field(default=0, ge=0)
    visited_branches: int = Field(default=0, ge=0)
    coverage_percent: int = Field(default=0, ge=0)
    visit_count: int = Field(default=0, ge=0)
    average_visits_per_branch: float = Field(default=0.0, ge=0.0)


class CategoryMetrics(BaseModel):
    """
    Headline averages and case total for one location tier.

    Averages are rounded to whole percentages over the visits that reported
    the metric; a tier with no visits reports zeros.
    """
    category: LocationCategory
    name: str
    visit_count: int = Field(default=0, ge=0)
    staffing_ratio: int = 0
    attrition_ratio: int = 0
    engagement_ratio: int = 0
    non_vendor_ratio: int = 0
    total_cases: int = Field(default=0, ge=0)
    observations: Dict[str, int] = Field(default_factory=dict)


class HeatmapRow(BaseModel):
    """Distribution of rating tokens for one five-level field."""
    field: QualitativeField
    label: str
    very_poor: int = 0
    poor: int = 0
    neutral: int = 0
    good: int = 0
    excellent: int = 0
    total: int = 0


class QualitativeAssessment(BaseModel):
    """Culture-pulse averages on the 0-5 scale (yes=5, no=0)."""
    leaders_aligned: float = 0.0
    employees_safe: float = 0.0
    employees_motivated: float = 0.0
    no_abusive_language: float = 0.0
    comfort_escalation: float = 0.0
    inclusive_culture: float = 0.0
    overall: float = 0.0
    count: int = Field(default=0, ge=0)


class LocationMetrics(BaseModel):
    """Rounded per-location averages across all qualifying visits."""
    location_id: str
    name: str = "N/A"
    location: str = "N/A"
    category: Optional[LocationCategory] = None
    visit_count: int = Field(default=0, ge=0)
    metrics: Dict[str, int] = Field(default_factory=dict)
    qualitative: Dict[str, int] = Field(default_factory=dict)
