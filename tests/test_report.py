"""Tests for the AI monthly report and the LLM provider layer."""

import threading
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from backend.errors import ReportInProgress
from backend.reporting.llm_provider import LLMProvider, LLMResponse, MockProvider, get_provider
from backend.reporting.report import (
    EMPTY_REPORT_MESSAGE, FALLBACK_MESSAGE, NO_DATA_MESSAGE, ReportService,
    build_report_prompt, generate_project_report,
)
from backend.schemas import MonthlyRecord
from backend.storage import seed_collection

from conftest import project_by_id


class RecordingProvider(LLMProvider):
    """Returns a fixed response and remembers what it was asked."""

    def __init__(self, response: LLMResponse):
        self.response = response
        self.calls = []

    def get_name(self) -> str:
        return "recording"

    def chat(self, messages, system_prompt=""):
        self.calls.append((messages, system_prompt))
        return self.response


class BlockingProvider(MockProvider):
    """Mock provider whose first call waits until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def chat(self, messages, system_prompt=""):
        if not self.started.is_set():
            self.started.set()
            self.release.wait(timeout=5)
        return super().chat(messages, system_prompt)


@pytest.fixture
def projects():
    return seed_collection()


def _with_months(project, months):
    history = [
        MonthlyRecord(month=m, actual_sales=1000 * (i + 1), target_sales=1000,
                      hospital_coverage=i, activities=f"activity {m}")
        for i, m in enumerate(months)
    ]
    return project.model_copy(update={"monthly_data": history})


class TestPrompt:
    def test_prompt_identifies_project(self, projects):
        prompt = build_report_prompt(project_by_id(projects, "p1"))
        assert '"心血管-立普妥专项推广"' in prompt
        assert "辉瑞制药 (Pfizer)" in prompt
        assert "Markdown" in prompt

    def test_prompt_lists_month_figures(self, projects):
        prompt = build_report_prompt(project_by_id(projects, "p1"))
        assert "Month: 2023-10, Actual Sales: 130000, Target: 120000" in prompt

    def test_prompt_uses_last_three_months_only(self, projects):
        project = _with_months(projects[0], ["2023-06", "2023-07", "2023-08", "2023-09", "2023-10"])
        prompt = build_report_prompt(project)
        assert "2023-06" not in prompt
        assert "2023-07" not in prompt
        for month in ("2023-08", "2023-09", "2023-10"):
            assert f"Month: {month}" in prompt

    def test_fractional_amounts_kept(self, projects):
        project = projects[0].model_copy(update={"monthly_data": [
            MonthlyRecord(month="2023-10", actual_sales=1234.5, target_sales=2000, hospital_coverage=3),
        ]})
        assert "Actual Sales: 1234.50" in build_report_prompt(project)


class TestGenerateReport:
    def test_no_data_never_calls_provider(self, projects):
        def factory():
            raise AssertionError("provider should not be created")

        result = generate_project_report(project_by_id(projects, "p4"), factory)
        assert result.report == NO_DATA_MESSAGE
        assert result.provider == "none"

    def test_success_returns_provider_text(self, projects):
        provider = RecordingProvider(LLMResponse(content="## 报告\n\n良好"))
        result = generate_project_report(project_by_id(projects, "p1"), lambda: provider)
        assert result.report == "## 报告\n\n良好"
        assert result.provider == "recording"
        messages, system_prompt = provider.calls[0]
        assert messages[0]["role"] == "user"
        assert "2023-10" in messages[0]["content"]
        assert system_prompt

    def test_missing_credential_falls_back(self, projects):
        def factory():
            raise ValueError("ANTHROPIC_API_KEY not set")

        result = generate_project_report(project_by_id(projects, "p1"), factory)
        assert result.report == FALLBACK_MESSAGE
        assert result.provider == "unavailable"

    def test_provider_error_falls_back(self, projects, caplog):
        provider = RecordingProvider(LLMResponse(content="401 Unauthorized", stop_reason="error"))
        result = generate_project_report(project_by_id(projects, "p1"), lambda: provider)
        assert result.report == FALLBACK_MESSAGE
        assert "401 Unauthorized" in caplog.text

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_empty_answer(self, projects, content):
        provider = RecordingProvider(LLMResponse(content=content))
        result = generate_project_report(project_by_id(projects, "p2"), lambda: provider)
        assert result.report == EMPTY_REPORT_MESSAGE

    def test_mock_provider_end_to_end(self, projects):
        result = generate_project_report(project_by_id(projects, "p3"), MockProvider)
        assert result.report.startswith("### 肿瘤-生物制剂DTP项目")
        assert "2023-09 至 2023-10" in result.report
        assert result.provider == MockProvider().get_name()


class TestProviderFactory:
    def test_mock(self):
        assert isinstance(get_provider("mock"), MockProvider)

    def test_anthropic_without_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError):
            get_provider("anthropic")

    def test_auto_without_key_uses_mock(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert isinstance(get_provider("auto"), MockProvider)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_provider("gpt-local")


class TestReportService:
    def test_generate(self, projects):
        service = ReportService(MockProvider)
        result = service.generate(project_by_id(projects, "p1"))
        assert result.project_id == "p1"
        assert not service.is_running("p1")

    def test_one_report_per_project_at_a_time(self, projects):
        provider = BlockingProvider()
        service = ReportService(lambda: provider)
        p1 = project_by_id(projects, "p1")
        results = []

        worker = threading.Thread(target=lambda: results.append(service.generate(p1)))
        worker.start()
        try:
            assert provider.started.wait(timeout=5)
            assert service.is_running("p1")
            with pytest.raises(ReportInProgress):
                service.generate(p1)
        finally:
            provider.release.set()
            worker.join(timeout=5)

        assert len(results) == 1
        assert not service.is_running("p1")
        # Guard is cleared once the first report finishes
        assert service.generate(p1).project_id == "p1"

    def test_other_projects_not_blocked(self, projects):
        provider = BlockingProvider()
        service = ReportService(lambda: provider)
        worker = threading.Thread(target=service.generate, args=(project_by_id(projects, "p1"),))
        worker.start()
        try:
            assert provider.started.wait(timeout=5)
            assert service.generate(project_by_id(projects, "p2")).project_id == "p2"
        finally:
            provider.release.set()
            worker.join(timeout=5)

    def test_guard_cleared_after_failure(self, projects):
        def factory():
            raise RuntimeError("boom")

        service = ReportService(factory)
        with pytest.raises(RuntimeError):
            service.generate(project_by_id(projects, "p1"))
        assert not service.is_running("p1")
