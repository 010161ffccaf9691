"""
tests/test_manual_input_orchestrator.py

Unit tests for ManualInputOrchestrator using in-memory fakes; no database.
"""

from __future__ import annotations

import pytest

from app.config import ManualInputSettings
from app.domain.manual_input import ChannelRow, MetricRow
from app.services.manual_input_orchestrator import (
    ManualInputLimitError,
    ManualInputOrchestrator,
    ManualInputPersistenceError,
    ManualInputSubmission,
    ManualInputValidationError,
)
from db.repositories.errors import SnapshotNotFoundError
from tests.fakes import FakeManualInputRepository, FakeSession


@pytest.fixture()
def orchestrator() -> ManualInputOrchestrator:
    return ManualInputOrchestrator(
        settings=ManualInputSettings(max_rows=10, max_channel_rows=2, log_validation_issues=True)
    )


def _submission(*rows: MetricRow, channel_rows: tuple[ChannelRow, ...] = ()) -> ManualInputSubmission:
    return ManualInputSubmission(
        period_type="30days",
        granularity="month",
        rows=rows,
        channel_rows=channel_rows,
    )


_VALID_ROW = MetricRow(
    period_index=0,
    sessions=1000,
    leads=100,
    deals=20,
    sales=10,
    revenue=5000.0,
    ad_spend=1000.0,
    clicks=500,
)


class TestSubmit:
    def test_valid_submission_is_stored_and_committed(
        self, orchestrator: ManualInputOrchestrator
    ) -> None:
        repository = FakeManualInputRepository()
        db = FakeSession()
        result = orchestrator.submit("acme", _submission(_VALID_ROW), repository=repository, db=db)

        assert result.owner_id == "acme"
        assert result.row_count == 1
        assert result.snapshot.metrics.roas == pytest.approx(5.0)
        assert db.commits == 1
        assert repository.saved["acme"].snapshot["data_quality_score"] == 100

    def test_blocking_issues_persist_nothing(self, orchestrator: ManualInputOrchestrator) -> None:
        repository = FakeManualInputRepository()
        db = FakeSession()
        bad = MetricRow(period_index=0, sessions=100, leads=150, sales=2)

        with pytest.raises(ManualInputValidationError) as ctx:
            orchestrator.submit("acme", _submission(bad), repository=repository, db=db)

        fields = [issue.field for issue in ctx.value.issues]
        assert fields == ["row-0-leads", "row-0-revenue"]
        assert ctx.value.to_dict()["issues"][0]["field"] == "row-0-leads"
        assert repository.save_calls == 0
        assert db.commits == 0

    def test_warning_rules_do_not_apply_at_acceptance(
        self, orchestrator: ManualInputOrchestrator
    ) -> None:
        repository = FakeManualInputRepository()
        row = MetricRow(period_index=0, ad_spend=500.0, clicks=0)
        result = orchestrator.submit("acme", _submission(row), repository=repository, db=FakeSession())
        assert result.issues == ()
        assert result.snapshot.metrics.cpc is None

    def test_new_submission_replaces_previous(self, orchestrator: ManualInputOrchestrator) -> None:
        repository = FakeManualInputRepository()
        orchestrator.submit("acme", _submission(_VALID_ROW), repository=repository, db=FakeSession())
        orchestrator.submit(
            "acme",
            _submission(MetricRow(period_index=0, sessions=5)),
            repository=repository,
            db=FakeSession(),
        )
        stored = repository.saved["acme"]
        assert stored.rows == (MetricRow(period_index=0, sessions=5),)
        assert stored.snapshot["totals"]["sessions"] == 5

    def test_persistence_failure_rolls_back(self, orchestrator: ManualInputOrchestrator) -> None:
        db = FakeSession()
        with pytest.raises(ManualInputPersistenceError):
            orchestrator.submit(
                "acme",
                _submission(_VALID_ROW),
                repository=FakeManualInputRepository(fail_on_save=True),
                db=db,
            )
        assert db.rollbacks == 1
        assert db.commits == 0

    def test_row_limit(self, orchestrator: ManualInputOrchestrator) -> None:
        rows = tuple(MetricRow(period_index=i) for i in range(11))
        repository = FakeManualInputRepository()
        with pytest.raises(ManualInputLimitError, match="Too many period rows"):
            orchestrator.submit("acme", _submission(*rows), repository=repository, db=FakeSession())
        assert repository.save_calls == 0

    def test_channel_row_limit(self, orchestrator: ManualInputOrchestrator) -> None:
        channel_rows = tuple(
            ChannelRow(period_index=i, channel_name="Instagram") for i in range(3)
        )
        with pytest.raises(ManualInputLimitError, match="Too many channel rows"):
            orchestrator.preview(_submission(_VALID_ROW, channel_rows=channel_rows))


class TestPreview:
    def test_preview_includes_warnings(self, orchestrator: ManualInputOrchestrator) -> None:
        result = orchestrator.preview(_submission(MetricRow(period_index=0, ad_spend=10.0)))
        assert [issue.field for issue in result.warnings] == ["row-0-clicks"]
        assert result.snapshot is not None

    def test_preview_reports_errors_without_snapshot(
        self, orchestrator: ManualInputOrchestrator
    ) -> None:
        result = orchestrator.preview(_submission(MetricRow(period_index=0, deals=3, sales=4, revenue=1.0)))
        assert [issue.field for issue in result.errors] == ["row-0-sales"]
        assert result.snapshot is None


class TestLoad:
    def test_load_missing_owner(self, orchestrator: ManualInputOrchestrator) -> None:
        with pytest.raises(SnapshotNotFoundError):
            orchestrator.load("nobody", repository=FakeManualInputRepository())

    def test_load_after_submit(self, orchestrator: ManualInputOrchestrator) -> None:
        repository = FakeManualInputRepository()
        orchestrator.submit("acme", _submission(_VALID_ROW), repository=repository, db=FakeSession())
        stored = orchestrator.load("acme", repository=repository)
        assert stored.rows == (_VALID_ROW,)
        assert stored.period_type == "30days"
