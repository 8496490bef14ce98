"""
Visit and location stores.

The aggregation engine never issues queries itself; it is handed a store
that implements two small interfaces:

- VisitRecordStore.fetch_visits(VisitFilter) -> List[VisitRecord]
- LocationStore.count_total(category=None) -> int
  LocationStore.list_locations() -> List[Location]

Two implementations are provided:

- PostgresVisitStore: reads `branch_visits` / `branches` through the shared
  asyncpg pool using the builders in visit_analytics.sql.
- InMemoryVisitStore: holds lists in memory and applies the filter in Python.
  Used by tests and for local runs without a database.

Stores return whatever statuses the filter allows; the engine re-applies the
qualifying-status filter itself.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

import numpy as np
from pydantic import ValidationError

from visit_analytics.core.database import execute_query, execute_query_one
from visit_analytics.models.enums import LocationCategory
from visit_analytics.models.schemas import Location, VisitFilter, VisitRecord
from visit_analytics.sql import (
    get_location_count_query,
    get_locations_query,
    get_visits_query,
)

logger = logging.getLogger(__name__)


FLOAT_COLUMNS = (
    "staffing_ratio",
    "attrition_ratio",
    "engagement_ratio",
    "non_vendor_ratio",
)

INT_COLUMNS = (
    "case_count",
    "invited_count",
    "participant_count",
    "covered_new_hires",
    "total_new_hires",
    "covered_star_employees",
    "total_star_employees",
)


# =============================================================================
# Store Interfaces
# =============================================================================


class VisitRecordStore(Protocol):
    async def fetch_visits(self, visit_filter: VisitFilter) -> List[VisitRecord]:
        ...


class LocationStore(Protocol):
    async def count_total(self, category: Optional[LocationCategory] = None) -> int:
        ...

    async def list_locations(self) -> List[Location]:
        ...


# =============================================================================
# Row Conversion Helpers
# =============================================================================


def _safe_float(value: Any) -> Optional[float]:
    """
    Convert a database value to float, returning None for null, NaN or inf.

    Numeric columns come back as Decimal or float; percentages computed
    upstream can be NaN when their denominator was zero.
    """
    if value is None:
        return None
    try:
        float_val = float(value)
        if np.isnan(float_val) or np.isinf(float_val):
            return None
        return float_val
    except (ValueError, TypeError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    float_val = _safe_float(value)
    if float_val is None:
        return None
    return int(float_val)


def _row_to_visit(row: Any) -> VisitRecord:
    """
    Convert an asyncpg Record into a VisitRecord.

    Raises:
        pydantic.ValidationError: If required columns are null or invalid.
    """
    data: Dict[str, Any] = dict(row)
    for column in FLOAT_COLUMNS:
        data[column] = _safe_float(data.get(column))
    for column in INT_COLUMNS:
        data[column] = _safe_int(data.get(column))
    return VisitRecord(**data)


# =============================================================================
# PostgreSQL Store
# =============================================================================


class PostgresVisitStore:
    """
    asyncpg-backed store over `branch_visits`, `branches` and `profiles`.

    Queries go through execute_query / execute_query_one, which borrow a
    connection from the shared pool for one query. Rows that cannot be
    turned into a VisitRecord (for example a visit whose branch category is
    null) are logged and left out.
    """

    async def fetch_visits(self, visit_filter: VisitFilter) -> List[VisitRecord]:
        query, args = get_visits_query(
            date_from=visit_filter.date_from,
            date_to=visit_filter.date_to,
            category=visit_filter.category.value if visit_filter.category else None,
            agent_id=visit_filter.agent_id,
            status_in=(
                [status.value for status in visit_filter.status_in]
                if visit_filter.status_in is not None else None
            ),
        )

        rows = await execute_query(query, *args)

        visits = []
        skipped = 0
        for row in rows:
            try:
                visits.append(_row_to_visit(row))
            except ValidationError as e:
                skipped += 1
                logger.warning(f"Skipping malformed visit row {row.get('id')}: {e.error_count()} errors")

        logger.info(f"Fetched {len(visits)} visits ({skipped} skipped)")
        return visits

    async def count_total(self, category: Optional[LocationCategory] = None) -> int:
        query, args = get_location_count_query(category.value if category else None)

        row = await execute_query_one(query, *args)

        return int(row["total"]) if row is not None else 0

    async def list_locations(self) -> List[Location]:
        query, args = get_locations_query()

        rows = await execute_query(query, *args)

        locations = [Location(**dict(row)) for row in rows]
        logger.info(f"Fetched {len(locations)} locations")
        return locations


# =============================================================================
# In-Memory Store
# =============================================================================


class InMemoryVisitStore:
    """Store over fixed lists of visits and locations."""

    def __init__(
        self,
        visits: Optional[Iterable[VisitRecord]] = None,
        locations: Optional[Iterable[Location]] = None,
    ):
        self.visits: List[VisitRecord] = list(visits or [])
        self.locations: List[Location] = list(locations or [])

    @staticmethod
    def _matches(visit: VisitRecord, visit_filter: VisitFilter) -> bool:
        if visit_filter.date_from is not None and visit.visit_date < visit_filter.date_from:
            return False
        if visit_filter.date_to is not None and visit.visit_date > visit_filter.date_to:
            return False
        if visit_filter.category is not None and visit.category != visit_filter.category:
            return False
        if visit_filter.agent_id is not None and visit.agent_id != visit_filter.agent_id:
            return False
        if visit_filter.status_in is not None and visit.status not in visit_filter.status_in:
            return False
        return True

    async def fetch_visits(self, visit_filter: VisitFilter) -> List[VisitRecord]:
        return [visit for visit in self.visits if self._matches(visit, visit_filter)]

    async def count_total(self, category: Optional[LocationCategory] = None) -> int:
        if category is None:
            return len(self.locations)
        return sum(1 for location in self.locations if location.category == category)

    async def list_locations(self) -> List[Location]:
        return list(self.locations)
