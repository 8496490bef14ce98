"""
Tests for the named analytics queries.

Facade methods run against the in-memory store built from the conftest
sample data; fetch filters are checked with mocked stores. Reference end
is 2026-10-17 throughout.

Sample qualifying visits:
- v1 agent-a, br-1 (gold), 2026-09-20, approved
- v2 agent-b, br-3 (platinum), 2026-10-05, submitted
- v3 agent-a, br-1 (gold), 2026-10-10, approved
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from visit_analytics.models import (
    QUALIFYING_STATUSES,
    Granularity,
    LocationCategory,
    QualitativeField,
    RangeKind,
    VisitFilter,
)
from visit_analytics.services.aggregation_facade import (
    AggregationFacade,
    compute_category_metrics,
    compute_dashboard_stats,
    compute_location_metrics,
    compute_monthly_trend,
    compute_top_performers,
)
from visit_analytics.services.errors import InvalidArgument


REFERENCE_END = date(2026, 10, 17)


@pytest.fixture
def recording_store() -> AsyncMock:
    store = AsyncMock()
    store.fetch_visits = AsyncMock(return_value=[])
    store.count_total = AsyncMock(return_value=0)
    store.list_locations = AsyncMock(return_value=[])
    return store


class TestDashboardStats:
    @pytest.mark.asyncio
    async def test_headline_numbers(self, facade):
        stats = await facade.dashboard_stats(REFERENCE_END)

        assert stats.total_locations == 6
        assert stats.visited_locations == 2
        assert stats.coverage_percent == 33
        assert stats.active_agents == 1
        assert stats.staffing_ratio == 80
        assert stats.attrition_ratio == 15
        assert stats.engagement_ratio == 60
        assert stats.non_vendor_ratio == 80
        assert stats.total_cases == 3
        assert stats.participation_rate == 67
        assert stats.new_hire_coverage == 80
        assert stats.observations == {
            'staffing_ratio': 3,
            'attrition_ratio': 2,
            'engagement_ratio': 1,
            'non_vendor_ratio': 1,
        }

    @pytest.mark.asyncio
    async def test_vs_previous_window(self, facade):
        stats = await facade.dashboard_stats(REFERENCE_END)
        # Every sample visit is in the last 30 days; the 30 before are empty
        assert stats.vs_previous.coverage_percent == 33
        assert stats.vs_previous.staffing_ratio == 80
        assert stats.vs_previous.attrition_ratio == 15

    def test_deltas_against_previous_window(self, make_visit):
        records = [
            make_visit(location_id='br-1', visit_date=date(2026, 9, 1), staffing_ratio=70),
            make_visit(location_id='br-1', visit_date=date(2026, 10, 1), staffing_ratio=90),
            make_visit(location_id='br-2', visit_date=date(2026, 10, 2), staffing_ratio=90),
        ]
        stats = compute_dashboard_stats(records, 4, REFERENCE_END)
        assert stats.vs_previous.coverage_percent == 50 - 25
        assert stats.vs_previous.staffing_ratio == 20

    def test_non_vendor_delta_reported(self, make_visit):
        records = [
            make_visit(visit_date=date(2026, 9, 10), non_vendor_ratio=40),
            make_visit(visit_date=date(2026, 10, 10), non_vendor_ratio=90),
        ]
        stats = compute_dashboard_stats(records, 1, REFERENCE_END)
        assert stats.vs_previous.non_vendor_ratio == 50

    def test_star_employee_coverage(self, make_visit):
        records = [
            make_visit(covered_star_employees=1, total_star_employees=2),
            make_visit(covered_star_employees=3, total_star_employees=4),
            make_visit(covered_star_employees=5),
        ]
        stats = compute_dashboard_stats(records, 1, REFERENCE_END)
        assert stats.star_employee_coverage == 67

    def test_empty_store_full_shape(self):
        stats = compute_dashboard_stats([], 0, REFERENCE_END)
        assert stats.coverage_percent == 0
        assert stats.staffing_ratio == 0
        assert stats.observations['staffing_ratio'] == 0
        assert stats.vs_previous.coverage_percent == 0

    def test_negative_location_total_raises(self):
        with pytest.raises(InvalidArgument):
            compute_dashboard_stats([], -1, REFERENCE_END)

    def test_non_positive_window_raises(self):
        with pytest.raises(InvalidArgument):
            compute_dashboard_stats([], 1, REFERENCE_END, comparison_window_days=0)

    @pytest.mark.asyncio
    async def test_fetches_qualifying_statuses(self, recording_store):
        facade = AggregationFacade(recording_store, recording_store)
        await facade.dashboard_stats(REFERENCE_END)
        recording_store.fetch_visits.assert_awaited_once_with(
            VisitFilter(status_in=QUALIFYING_STATUSES)
        )


class TestMonthlyTrend:
    @pytest.mark.asyncio
    async def test_weekly_points(self, facade):
        series = await facade.monthly_trend('last-month', REFERENCE_END)

        assert series.range_kind is RangeKind.LAST_MONTH
        assert series.granularity is Granularity.WEEK
        assert series.start == date(2026, 9, 17)
        assert series.end == REFERENCE_END
        assert [p.label for p in series.points] == ['Week 1', 'Week 2', 'Week 3', 'Week 4', 'Week 5']

        week1, week2, week3 = series.points[:3]
        assert week1.visit_count == 1
        assert week1.coverage_percent == 17
        assert week1.participation_rate == 75
        assert week1.staffing_ratio == 90
        assert week2.visit_count == 0
        assert week2.staffing_ratio == 0
        assert week2.observations['staffing_ratio'] == 0
        assert week3.staffing_ratio == 70
        assert week3.participation_rate == 50

    @pytest.mark.parity
    def test_jan_mar_jun_scenario(self, make_visit):
        records = [
            make_visit(visit_date=date(2026, 1, 15), staffing_ratio=80),
            make_visit(visit_date=date(2026, 3, 10), staffing_ratio=90),
            make_visit(visit_date=date(2026, 6, 5), staffing_ratio=None),
        ]
        series = compute_monthly_trend(records, 10, 'last-6-months', date(2026, 6, 30))
        points = {p.label: p for p in series.points}

        assert points['Jan'].staffing_ratio == 80
        assert points['Mar'].staffing_ratio == 90
        assert points['Jun'].staffing_ratio == 0
        assert points['Jun'].observations['staffing_ratio'] == 0
        assert points['Jun'].visit_count == 1

    def test_legacy_range_name(self, make_visit):
        series = compute_monthly_trend([], 0, 'lastSevenDays', REFERENCE_END)
        assert series.range_kind is RangeKind.LAST_7_DAYS
        assert len(series.points) == 7

    @pytest.mark.asyncio
    async def test_fetch_limited_to_window(self, recording_store):
        facade = AggregationFacade(recording_store, recording_store)
        await facade.monthly_trend('last-3-months', REFERENCE_END)
        recording_store.fetch_visits.assert_awaited_once_with(VisitFilter(
            date_from=date(2026, 7, 1),
            date_to=REFERENCE_END,
            status_in=QUALIFYING_STATUSES,
        ))

    @pytest.mark.asyncio
    async def test_unknown_range_raises(self, facade):
        with pytest.raises(InvalidArgument):
            await facade.monthly_trend('last-decade', REFERENCE_END)


class TestTopPerformers:
    @pytest.mark.asyncio
    async def test_ranking(self, facade):
        performers = await facade.top_performers()

        assert [p.agent_id for p in performers] == ['agent-a', 'agent-b']
        top = performers[0]
        assert top.name == 'Asha Rao'
        assert top.code == 'E100'
        assert top.visit_count == 2
        assert top.overall_score == 4.17
        assert performers[1].overall_score == 0.83

    @pytest.mark.asyncio
    async def test_limit(self, facade):
        assert len(await facade.top_performers(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_negative_limit_raises_before_fetch(self, recording_store):
        facade = AggregationFacade(recording_store, recording_store)
        with pytest.raises(InvalidArgument):
            await facade.top_performers(limit=-3)
        recording_store.fetch_visits.assert_not_awaited()

    def test_no_records(self):
        assert compute_top_performers([]) == []


class TestCategoryBreakdown:
    @pytest.mark.asyncio
    async def test_uses_location_store(self, facade):
        rows = await facade.category_breakdown()
        assert len(rows) == 5
        gold = rows[2]
        assert gold.category is LocationCategory.GOLD
        assert gold.coverage_percent == 50


class TestCategoryMetrics:
    @pytest.mark.asyncio
    async def test_every_tier_reported(self, facade):
        rows = await facade.category_metrics()
        assert [row.category for row in rows] == list(LocationCategory)

        by_tier = {row.category: row for row in rows}
        gold = by_tier[LocationCategory.GOLD]
        assert gold.name == 'Gold'
        assert gold.visit_count == 2
        assert gold.staffing_ratio == 85
        assert gold.attrition_ratio == 10
        assert gold.engagement_ratio == 60
        assert gold.total_cases == 2
        assert gold.observations['attrition_ratio'] == 1

        platinum = by_tier[LocationCategory.PLATINUM]
        assert platinum.staffing_ratio == 70
        assert platinum.engagement_ratio == 0
        assert platinum.observations['engagement_ratio'] == 0

        # draft and rejected silver visits never count
        silver = by_tier[LocationCategory.SILVER]
        assert silver.visit_count == 0
        assert silver.staffing_ratio == 0

    @pytest.mark.asyncio
    async def test_date_filter(self, facade):
        rows = await facade.category_metrics(date_from='2026-10-01')
        gold = {row.category: row for row in rows}[LocationCategory.GOLD]
        assert gold.visit_count == 1
        assert gold.staffing_ratio == 80
        assert gold.total_cases == 0

    @pytest.mark.asyncio
    async def test_fetch_filter(self, recording_store):
        facade = AggregationFacade(recording_store, recording_store)
        await facade.category_metrics('2026-10-01', '2026-10-17')
        recording_store.fetch_visits.assert_awaited_once_with(VisitFilter(
            date_from=date(2026, 10, 1),
            date_to=REFERENCE_END,
            status_in=QUALIFYING_STATUSES,
        ))

    @pytest.mark.asyncio
    async def test_reversed_dates_raise(self, facade):
        with pytest.raises(InvalidArgument):
            await facade.category_metrics('2026-10-10', '2026-10-01')

    def test_empty_records(self):
        rows = compute_category_metrics([])
        assert len(rows) == 5
        assert all(row.visit_count == 0 and row.total_cases == 0 for row in rows)


class TestQualitativeQueries:
    @pytest.mark.asyncio
    async def test_heatmap_date_filter(self, facade):
        rows = await facade.qualitative_heatmap(date_from='2026-10-01')
        culture = {row.field: row for row in rows}[QualitativeField.BRANCH_CULTURE]
        assert culture.poor == 1
        assert culture.good == 1
        assert culture.total == 2

    @pytest.mark.asyncio
    async def test_heatmap_category_filter(self, facade):
        rows = await facade.qualitative_heatmap(category='Gold')
        culture = rows[0]
        assert culture.good == 2
        assert culture.poor == 0

    @pytest.mark.asyncio
    async def test_heatmap_rejects_bad_arguments(self, facade):
        with pytest.raises(InvalidArgument):
            await facade.qualitative_heatmap(date_from='2026-10-10', date_to='2026-10-01')
        with pytest.raises(InvalidArgument):
            await facade.qualitative_heatmap(category='copper')
        with pytest.raises(InvalidArgument):
            await facade.qualitative_heatmap(date_from='10/01/2026')

    @pytest.mark.asyncio
    async def test_assessment(self, facade):
        result = await facade.qualitative_assessment(date_from=date(2026, 10, 1))
        assert result.count == 1
        assert result.leaders_aligned == 0.0
        assert result.employees_safe == 5.0

    @pytest.mark.asyncio
    async def test_assessment_all_time(self, facade):
        result = await facade.qualitative_assessment()
        assert result.count == 2


class TestLocationMetrics:
    @pytest.mark.asyncio
    async def test_per_location_averages(self, facade):
        results = await facade.location_metrics()

        assert [r.location_id for r in results] == ['br-1', 'br-3']
        mg_road = results[0]
        assert mg_road.name == 'MG Road'
        assert mg_road.location == 'Bengaluru'
        assert mg_road.category is LocationCategory.GOLD
        assert mg_road.visit_count == 2
        assert mg_road.metrics['staffing_ratio'] == 85
        assert mg_road.metrics['case_count'] == 2
        assert mg_road.qualitative['branch_culture'] == 4
        assert mg_road.qualitative['leaders_aligned'] == 5
        assert mg_road.qualitative['inclusive_culture'] == 0

    def test_unknown_location_keeps_recorded_tier(self, make_visit):
        [result] = compute_location_metrics([make_visit(location_id='br-x', category='silver')], [])
        assert result.name == 'N/A'
        assert result.category is LocationCategory.SILVER
