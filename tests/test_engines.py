"""Tests for the aggregation and filter engines."""

import pytest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from backend.engines.aggregation import (
    achievement_rate, dashboard_summary, distinct_manufacturers, latest_record, monthly_metrics,
    overall_achievement, performance_band, project_metrics, top_by_latest_sales,
    top_sales_chart_rows, total_sales, total_target,
)
from backend.engines.filtering import filter_projects, matches_search, matches_status
from backend.schemas import MonthlyRecord, ProjectStatus, STATUS_ALL, status_label
from backend.storage import seed_collection

from conftest import project_by_id


@pytest.fixture
def projects():
    return seed_collection()


def _record(actual, target, month="2023-10"):
    return MonthlyRecord(month=month, actual_sales=actual, target_sales=target, hospital_coverage=1)


class TestAchievement:
    def test_rate(self):
        assert abs(achievement_rate(_record(130000, 120000)) - 108.3333) < 1e-3

    def test_zero_target(self):
        assert achievement_rate(_record(5000, 0)) == 0

    def test_no_record(self):
        assert achievement_rate(None) == 0

    @pytest.mark.parametrize("rate,band", [
        (150, "on_target"),
        (100, "on_target"),
        (99.9, "near_target"),
        (80, "near_target"),
        (79.99, "below_target"),
        (0, "below_target"),
    ])
    def test_performance_band(self, rate, band):
        assert performance_band(rate) == band


class TestProjectMetrics:
    def test_latest_record_is_last_month(self, projects):
        assert latest_record(project_by_id(projects, "p1")).month == "2023-10"
        assert latest_record(project_by_id(projects, "p4")) is None

    def test_p1_card(self, projects):
        m = project_metrics(project_by_id(projects, "p1"))
        assert m.latest_month == "2023-10"
        assert m.actual_sales == 130000
        assert m.target_sales == 120000
        assert m.achievement_rate_rounded == 108
        assert m.progress_pct == 100
        assert m.band == "on_target"
        assert m.status_label == "进行中"

    def test_p2_exactly_on_target(self, projects):
        m = project_metrics(project_by_id(projects, "p2"))
        assert m.achievement_rate == 100
        assert m.band == "on_target"

    def test_progress_below_target_not_clamped(self):
        p = seed_collection()[3].model_copy(update={"monthly_data": [_record(45000, 60000)]})
        m = project_metrics(p)
        assert m.progress_pct == 75
        assert m.band == "below_target"

    def test_empty_project(self, projects):
        m = project_metrics(project_by_id(projects, "p4"))
        assert m.latest_month is None
        assert m.achievement_rate == 0
        assert m.progress_pct == 0
        assert m.band is None

    def test_pending_label(self, projects):
        assert project_metrics(project_by_id(projects, "p5")).status_label == "待定"


class TestMonthlyMetrics:
    def test_history_rows(self, projects):
        rows = monthly_metrics(project_by_id(projects, "p2"))
        assert [r.month for r in rows] == ["2023-08", "2023-09", "2023-10"]
        assert abs(rows[0].achievement_rate - 83.333) < 1e-3
        assert rows[0].band == "near_target"
        assert rows[-1].band == "on_target"
        assert rows[-1].hospital_coverage == project_by_id(projects, "p2").monthly_data[-1].hospital_coverage

    def test_zero_target_month(self, projects):
        p = projects[3].model_copy(update={"monthly_data": [_record(5000, 0)]})
        row = monthly_metrics(p)[0]
        assert row.achievement_rate == 0
        assert row.band == "below_target"

    def test_empty_project(self, projects):
        assert monthly_metrics(project_by_id(projects, "p4")) == []


class TestCollectionAggregates:
    def test_totals_on_seed(self, projects):
        assert total_sales(projects) == 660000
        assert total_target(projects) == 610000
        assert abs(overall_achievement(projects) - 108.197) < 1e-3

    def test_empty_collection(self):
        assert total_sales([]) == 0
        assert total_target([]) == 0
        assert overall_achievement([]) == 0

    def test_no_targets(self, projects):
        empty = [p for p in projects if not p.monthly_data]
        assert overall_achievement(empty) == 0

    def test_distinct_manufacturers(self, projects):
        assert distinct_manufacturers(projects) == 9
        twin = projects[0].model_copy(update={"id": "p10"})
        assert distinct_manufacturers(projects + [twin]) == 9

    def test_manufacturer_count_is_case_sensitive(self, projects):
        other = projects[0].model_copy(update={"id": "p10", "manufacturer": "辉瑞制药 (PFIZER)"})
        assert distinct_manufacturers(projects + [other]) == 10

    def test_summary(self, projects):
        s = dashboard_summary(projects)
        assert s.project_count == 9
        assert s.active_projects == 8
        assert s.total_sales == 660000
        assert s.manufacturer_count == 9

    def test_unknown_status_not_counted_active(self, projects):
        projects[0] = projects[0].model_copy(update={"status": "OnHold"})
        assert dashboard_summary(projects).active_projects == 7

    def test_only_latest_month_counts(self, projects):
        p1 = project_by_id(projects, "p1")
        later = p1.monthly_data + [_record(140000, 125000, month="2023-11")]
        projects[0] = p1.model_copy(update={"monthly_data": later})
        assert total_sales(projects) == 670000
        assert total_target(projects) == 615000


class TestTopN:
    def test_top_one(self, projects):
        assert [p.id for p in top_by_latest_sales(projects, 1)] == ["p3"]

    def test_top_five_keeps_collection_order_on_ties(self, projects):
        assert [p.id for p in top_by_latest_sales(projects, 5)] == ["p3", "p1", "p2", "p4", "p5"]

    def test_n_larger_than_collection(self, projects):
        assert len(top_by_latest_sales(projects, 50)) == 9

    @pytest.mark.parametrize("n", [0, -1])
    def test_non_positive_n(self, projects, n):
        assert top_by_latest_sales(projects, n) == []

    def test_chart_rows(self, projects):
        rows = top_sales_chart_rows(projects)
        assert len(rows) == 5
        assert rows[0].project_id == "p3"
        assert rows[0].sales == 460000
        assert rows[0].target == 420000
        assert rows[1].label == "心血管-立普妥专..."
        assert rows[3].sales == 0

    def test_short_label_untouched(self, projects):
        projects[2] = projects[2].model_copy(update={"name": "肿瘤项目"})
        assert top_sales_chart_rows(projects, 1)[0].label == "肿瘤项目"

    def test_recorded_month_moves_ranking(self, projects):
        p1 = project_by_id(projects, "p1")
        later = p1.monthly_data + [_record(140000, 125000, month="2023-11")]
        projects[0] = p1.model_copy(update={"monthly_data": later})
        assert [p.id for p in top_by_latest_sales(projects, 1)] == ["p3"]
        assert top_sales_chart_rows(projects, 2)[1].sales == 140000


class TestFiltering:
    def test_empty_search_and_all(self, projects):
        result = filter_projects(projects, "", STATUS_ALL)
        assert [p.id for p in result] == [p.id for p in projects]

    def test_defaults_match_everything(self, projects):
        assert len(filter_projects(projects)) == 9

    def test_search_manufacturer(self, projects):
        assert [p.id for p in filter_projects(projects, "辉瑞")] == ["p1"]

    def test_search_is_case_insensitive(self, projects):
        assert [p.id for p in filter_projects(projects, "pfizer")] == ["p1"]
        assert [p.id for p in filter_projects(projects, "ROCHE")] == ["p3"]

    def test_search_products(self, projects):
        assert [p.id for p in filter_projects(projects, "骨水泥")] == ["p9"]

    def test_search_name(self, projects):
        assert [p.id for p in filter_projects(projects, "OTC")] == ["p5"]

    def test_status_filter(self, projects):
        assert [p.id for p in filter_projects(projects, status_filter="Pending")] == ["p5"]
        assert [p.id for p in filter_projects(projects, status_filter=ProjectStatus.PENDING)] == ["p5"]

    def test_status_filter_none_means_all(self, projects):
        assert len(filter_projects(projects, status_filter=None)) == 9

    def test_both_predicates_must_hold(self, projects):
        assert filter_projects(projects, "辉瑞", "Pending") == []
        assert [p.id for p in filter_projects(projects, "辉瑞", "Active")] == ["p1"]

    def test_no_completed_projects_in_seed(self, projects):
        assert filter_projects(projects, status_filter="Completed") == []

    def test_empty_products_never_match(self, projects):
        bare = projects[0].model_copy(update={"products": ""})
        assert matches_search(bare, "络活喜") is False
        assert matches_search(bare, "") is True

    def test_matches_status_exact(self, projects):
        assert matches_status(projects[0], "active") is False
        assert matches_status(projects[0], "Active") is True

    def test_filter_does_not_mutate_input(self, projects):
        before = [p.id for p in projects]
        filter_projects(projects, "辉瑞")
        assert [p.id for p in projects] == before


class TestStatusLabels:
    def test_known_statuses(self):
        assert status_label("Active") == "进行中"
        assert status_label("Pending") == "待定"
        assert status_label("Completed") == "已完成"

    def test_unknown_status_shown_verbatim(self):
        assert status_label("OnHold") == "OnHold"
