"""
tests/test_manual_input_router.py

HTTP tests for the manual input endpoints.  Database dependencies are
overridden with in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_manual_input_orchestrator,
    get_manual_input_repository,
    get_settings,
)
from app.config import ManualInputSettings
from app.main import create_app
from app.services.manual_input_orchestrator import ManualInputOrchestrator
from db.session import get_db
from tests.fakes import FakeManualInputRepository, FakeSession

OWNER = {"X-Owner-Id": "acme"}


@pytest.fixture()
def repository() -> FakeManualInputRepository:
    return FakeManualInputRepository()


@pytest.fixture()
def client(repository: FakeManualInputRepository) -> Iterator[TestClient]:
    settings = ManualInputSettings(max_rows=5, max_channel_rows=5)
    application = create_app(check_environment=False)

    def _db() -> Iterator[FakeSession]:
        yield FakeSession()

    application.dependency_overrides[get_db] = _db
    application.dependency_overrides[get_manual_input_repository] = lambda: repository
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_manual_input_orchestrator] = (
        lambda: ManualInputOrchestrator(settings=settings)
    )
    with TestClient(application) as test_client:
        yield test_client


def _body(**overrides) -> dict:
    body = {
        "period_type": "30days",
        "granularity": "month",
        "currency": "kzt",
        "rows": [
            {
                "period_index": 0,
                "period_date": "2026-03-01",
                "sessions": 1000,
                "leads": 100,
                "deals": 20,
                "sales": 10,
                "repeat_sales": 2,
                "revenue": 5000,
                "ad_spend": 1000,
                "clicks": 500,
                "impressions": 50000,
            }
        ],
        "channel_rows": [
            {"period_index": 0, "channel_name": "Instagram", "sessions": 300},
            {"period_index": 0, "channel_name": "Google Ads", "sessions": 100},
        ],
    }
    body.update(overrides)
    return body


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestPeriodGrid:
    def test_grid(self, client: TestClient) -> None:
        response = client.get(
            "/manual-input/periods",
            params={"period_type": "30days", "granularity": "week", "anchor": "2026-03-02"},
        )
        assert response.status_code == 200
        periods = response.json()["periods"]
        assert len(periods) == 4
        assert periods[-1]["period_label"] == "2.3 - 8.3"
        assert periods[-1]["sessions"] is None

    def test_grid_rejects_unknown_period_type(self, client: TestClient) -> None:
        response = client.get(
            "/manual-input/periods", params={"period_type": "1year", "granularity": "week"}
        )
        assert response.status_code == 422


class TestSubmit:
    def test_submit_stores_snapshot(
        self, client: TestClient, repository: FakeManualInputRepository
    ) -> None:
        response = client.post("/manual-input", json=_body(), headers=OWNER)
        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "ok"
        assert payload["currency_symbol"] == "₸"
        snapshot = payload["snapshot"]
        assert snapshot["currency"] == "KZT"
        assert snapshot["metrics"]["ltv"] == pytest.approx(600.0)
        assert snapshot["metrics"]["cpu"] is None
        assert snapshot["gate_status"] == "SANDBOX"
        shares = {c["channel_name"]: c["share_of_traffic"] for c in snapshot["channels"]}
        assert shares == {"Instagram": pytest.approx(75.0), "Google Ads": pytest.approx(25.0)}
        assert {c["channel_type"] for c in snapshot["channels"]} == {"social", "search"}
        assert "acme" in repository.saved

    def test_period_label_is_derived_from_date(
        self, client: TestClient, repository: FakeManualInputRepository
    ) -> None:
        client.post("/manual-input", json=_body(), headers=OWNER)
        assert repository.saved["acme"].rows[0].period_label == "March 2026"

    def test_missing_owner_header(self, client: TestClient) -> None:
        response = client.post("/manual-input", json=_body())
        assert response.status_code == 401

    def test_validation_errors_are_returned_together(
        self, client: TestClient, repository: FakeManualInputRepository
    ) -> None:
        rows = [
            {"period_index": 0, "sessions": 100, "leads": 150},
            {"period_index": 1, "sales": 5, "revenue": 0},
        ]
        response = client.post("/manual-input", json=_body(rows=rows), headers=OWNER)
        assert response.status_code == 400
        issues = response.json()["detail"]["issues"]
        assert [issue["field"] for issue in issues] == ["row-0-leads", "row-1-revenue"]
        assert repository.saved == {}

    def test_count_beyond_column_range_is_rejected(
        self, client: TestClient, repository: FakeManualInputRepository
    ) -> None:
        rows = [{"period_index": 0, "sessions": 3_000_000_000}]
        response = client.post("/manual-input", json=_body(rows=rows, channel_rows=[]), headers=OWNER)
        assert response.status_code == 400
        issues = response.json()["detail"]["issues"]
        assert [issue["field"] for issue in issues] == ["row-0-sessions"]
        assert repository.saved == {}

    def test_formatted_money_metrics(self, client: TestClient) -> None:
        payload = client.post("/manual-input", json=_body(), headers=OWNER).json()
        formatted = payload["formatted_metrics"]
        assert formatted["cac"] == "₸100.00"
        assert formatted["ltv"] == "₸600.00"
        assert formatted["cpu"] == "—"
        assert "roi" not in formatted

    def test_too_many_rows(self, client: TestClient) -> None:
        rows = [{"period_index": i} for i in range(6)]
        response = client.post("/manual-input", json=_body(rows=rows), headers=OWNER)
        assert response.status_code == 413

    def test_non_numeric_value_is_rejected(self, client: TestClient) -> None:
        rows = [{"period_index": 0, "sessions": "many"}]
        response = client.post("/manual-input", json=_body(rows=rows), headers=OWNER)
        assert response.status_code == 422

    def test_unknown_field_is_rejected(self, client: TestClient) -> None:
        rows = [{"period_index": 0, "bounce_rate": 4}]
        response = client.post("/manual-input", json=_body(rows=rows), headers=OWNER)
        assert response.status_code == 422

    def test_persistence_failure(self, client: TestClient, repository: FakeManualInputRepository) -> None:
        repository.fail_on_save = True
        response = client.post("/manual-input", json=_body(), headers=OWNER)
        assert response.status_code == 500


class TestValidate:
    def test_preview_includes_warnings(self, client: TestClient) -> None:
        rows = [{"period_index": 0, "ad_spend": 500, "clicks": 0}]
        response = client.post("/manual-input/validate", json=_body(rows=rows))
        assert response.status_code == 200
        payload = response.json()
        assert payload["valid"] is True
        assert payload["issues"] == [
            {
                "field": "row-0-clicks",
                "message": "Period 1: Ad spend present but no click data",
                "severity": "warning",
            }
        ]
        assert payload["snapshot"]["metrics"]["cpc"] is None

    def test_preview_with_errors(self, client: TestClient) -> None:
        rows = [{"period_index": 0, "sessions": 100, "leads": 150}]
        payload = client.post("/manual-input/validate", json=_body(rows=rows)).json()
        assert payload["valid"] is False
        assert payload["snapshot"] is None
        assert payload["formatted_metrics"] == {}

    def test_preview_rejects_revenue_summing_to_infinity(self, client: TestClient) -> None:
        rows = [
            {"period_index": 0, "sales": 1, "revenue": 1e308},
            {"period_index": 1, "sales": 1, "revenue": 1e308},
        ]
        payload = client.post("/manual-input/validate", json=_body(rows=rows)).json()
        assert payload["valid"] is False
        assert [issue["field"] for issue in payload["issues"]] == ["row-0-revenue", "row-1-revenue"]
        assert payload["snapshot"] is None


class TestLoad:
    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/manual-input", headers=OWNER)
        assert response.status_code == 404

    def test_round_trip(self, client: TestClient) -> None:
        client.post("/manual-input", json=_body(), headers=OWNER)
        response = client.get("/manual-input", headers=OWNER)
        assert response.status_code == 200
        payload = response.json()
        assert payload["owner_id"] == "acme"
        assert payload["rows"][0]["sessions"] == 1000
        assert payload["rows"][0]["users"] is None
        assert payload["snapshot"]["data_quality_score"] == 100
        assert payload["currency_symbol"] == "₸"
