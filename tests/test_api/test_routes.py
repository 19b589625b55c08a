from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

from riskintel.api.app import create_app
from riskintel.config.settings import Settings
from riskintel.domain.errors import ScoringUnavailableError
from riskintel.orchestration.service import AssessmentService


@pytest.fixture  # type: ignore[misc]
def app(service: AssessmentService, settings: Settings) -> FastAPI:
    return create_app(service=service, settings=settings)


@pytest.fixture  # type: ignore[misc]
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoints:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_health_check(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "simulation"
        assert "version" in data

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_readiness(self, client: AsyncClient) -> None:
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_service_missing(self, settings: Settings) -> None:
        transport = ASGITransport(app=create_app(settings=settings))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            assert (await ac.get("/ready")).json()["status"] == "starting"
            response = await ac.post("/api/v1/assessments/subj-low")
        assert response.status_code == 503


class TestAssessmentEndpoints:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_assess_subject(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/assessments/subj-critical")
        assert response.status_code == 200
        data = response.json()
        assert data["aggregate_level"] == "critical"
        assert set(data["dimensions"]) == {"identity", "industry", "network", "security"}
        assert data["documents_analyzed"] == 2
        assert data["documents_failed"] == 0
        assert data["fully_persisted"] is True
        assert "sanctions_match" in {f["type"] for f in data["factors"]}

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_unknown_subject(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/assessments/nobody")
        assert response.status_code == 404

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_invalid_ai_response(
        self,
        client: AsyncClient,
        scripted_orchestrator: Any,
        scripted_provider: Any,
    ) -> None:
        scripted_provider.overrides["subj-low"] = {"identityRisk": {"score": "high"}}
        response = await client.post("/api/v1/assessments/subj-low")
        assert response.status_code == 422

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_ai_unavailable(
        self,
        client: AsyncClient,
        scripted_orchestrator: Any,
        scripted_provider: Any,
    ) -> None:
        scripted_provider.overrides["subj-low"] = ScoringUnavailableError("timed out")
        response = await client.post("/api/v1/assessments/subj-low")
        assert response.status_code == 503

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_risk_summary(self, client: AsyncClient) -> None:
        await client.post("/api/v1/assessments/subj-medium")

        response = await client.get("/api/v1/subjects/subj-medium/risk-summary")

        assert response.status_code == 200
        data = response.json()
        assert data["subject"]["email"] == "maria.garcia@example.com"
        assert data["profile"]["aggregate_level"] == "medium"
        assert data["document_count"] == 2

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_risk_summary_unknown(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/subjects/nobody/risk-summary")
        assert response.status_code == 404


class TestAdminEndpoints:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_high_risk_listing(self, client: AsyncClient) -> None:
        for subject_id in ("subj-low", "subj-high", "subj-critical"):
            await client.post(f"/api/v1/assessments/{subject_id}")

        response = await client.get("/api/v1/admin/high-risk")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [s["subject_id"] for s in data["subjects"]] == ["subj-critical", "subj-high"]

        response = await client.get("/api/v1/admin/high-risk", params={"level": ["low"]})
        assert [s["subject_id"] for s in response.json()["subjects"]] == ["subj-low"]

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_high_risk_bad_score(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/admin/high-risk", params={"min_score": 101})
        assert response.status_code == 422

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_sweep(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/admin/sweep", json={"limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["processed"] == 2
        assert data["successful"] == 2
        assert data["success_rate"] == 100.0

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_sweep_default_limit(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/admin/sweep")
        assert response.status_code == 200
        assert response.json()["processed"] == 4

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_sweep_limit_validated(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/admin/sweep", json={"limit": 0})
        assert response.status_code == 422
