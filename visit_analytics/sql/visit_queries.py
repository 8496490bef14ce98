"""
Visit Queries Module for the Visit Analytics backend.

Provides parameterized PostgreSQL queries over the `branch_visits`,
`branches` and `profiles` tables. Column names of the storage schema are
aliased to the attribute names of VisitRecord / Location so rows can be fed
straight into the Pydantic models.

Every builder returns a `(query, args)` pair using asyncpg's positional
`$n` placeholders; filter values are never interpolated into the SQL text.

This module follows the Repository Pattern for clean separation between
business logic and data access.
"""

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple


# =============================================================================
# COLUMN MAPPING
# =============================================================================

# storage column -> VisitRecord attribute
VISIT_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("v.id::text", "id"),
    ("v.user_id::text", "agent_id"),
    ("p.full_name", "agent_name"),
    ("p.e_code", "agent_code"),
    ("v.branch_id::text", "location_id"),
    ("v.visit_date", "visit_date"),
    ("v.branch_category::text", "category"),
    ("v.status::text", "status"),
    ("v.manning_percentage", "staffing_ratio"),
    ("v.attrition_percentage", "attrition_ratio"),
    ("v.er_percentage", "engagement_ratio"),
    ("v.non_vendor_percentage", "non_vendor_ratio"),
    ("v.cwt_cases", "case_count"),
    ("v.total_employees_invited", "invited_count"),
    ("v.total_participants", "participant_count"),
    ("v.new_employees_covered", "covered_new_hires"),
    ("v.new_employees_total", "total_new_hires"),
    ("v.star_employees_covered", "covered_star_employees"),
    ("v.star_employees_total", "total_star_employees"),
    ("v.leaders_aligned_with_code", "leaders_aligned"),
    ("v.employees_feel_safe", "employees_safe"),
    ("v.employees_feel_motivated", "employees_motivated"),
    ("v.leaders_abusive_language", "no_abusive_language"),
    ("v.employees_comfort_escalation", "comfort_escalation"),
    ("v.inclusive_culture", "inclusive_culture"),
    ("v.culture_branch", "branch_culture"),
    ("v.line_manager_behavior", "line_manager_behavior"),
    ("v.branch_hygiene", "branch_hygiene"),
    ("v.overall_discipline", "overall_discipline"),
)


def _select_list() -> str:
    return ",\n        ".join(f"{column} AS {alias}" for column, alias in VISIT_COLUMNS)


# =============================================================================
# VISIT QUERY
# =============================================================================


def get_visits_query(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    category: Optional[str] = None,
    agent_id: Optional[str] = None,
    status_in: Optional[Sequence[str]] = None,
) -> Tuple[str, List[Any]]:
    """
    Generate the query fetching visit records with optional filters.

    Args:
        date_from: Earliest visit_date to include (inclusive).
        date_to: Latest visit_date to include (inclusive).
        category: Location tier stored on the visit ('gold', ...).
        agent_id: Submitting agent (branch_visits.user_id).
        status_in: Status values to include; None fetches every status.

    Returns:
        Tuple of (SQL string, positional argument list).

    Note:
        - Joins profiles for agent display name and employee code
        - Results ordered by visit_date ASC, then created_at, so that
          first-seen grouping order is chronological
    """
    conditions: List[str] = []
    args: List[Any] = []

    if date_from is not None:
        args.append(date_from)
        conditions.append(f"v.visit_date >= ${len(args)}")
    if date_to is not None:
        args.append(date_to)
        conditions.append(f"v.visit_date <= ${len(args)}")
    if category is not None:
        args.append(category)
        conditions.append(f"v.branch_category::text = ${len(args)}")
    if agent_id is not None:
        args.append(agent_id)
        conditions.append(f"v.user_id::text = ${len(args)}")
    if status_in is not None:
        args.append(list(status_in))
        conditions.append(f"v.status::text = ANY(${len(args)}::text[])")

    where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

    query = f"""
    SELECT
        {_select_list()}
    FROM branch_visits v
    LEFT JOIN profiles p ON p.id = v.user_id
    {where_clause}
    ORDER BY v.visit_date ASC, v.created_at ASC
    """
    return query, args


# =============================================================================
# LOCATION QUERIES
# =============================================================================


def get_locations_query() -> Tuple[str, List[Any]]:
    """Generate the query listing every known location with its tier."""
    query = """
    SELECT
        b.id::text AS id,
        COALESCE(b.name, 'N/A') AS name,
        COALESCE(b.location, 'N/A') AS location,
        b.category::text AS category
    FROM branches b
    ORDER BY b.name ASC
    """
    return query, []


def get_location_count_query(category: Optional[str] = None) -> Tuple[str, List[Any]]:
    """
    Generate the query counting known locations, optionally for one tier.

    Returns:
        Tuple of (SQL string, positional argument list); the single result
        column is named `total`.
    """
    if category is None:
        return "SELECT COUNT(*) AS total FROM branches", []
    return (
        "SELECT COUNT(*) AS total FROM branches WHERE category::text = $1",
        [category],
    )
