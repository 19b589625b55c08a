from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from riskintel.config.settings import IntelligenceConfig
from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import FactorType, PersonIntelligence, Subject
from riskintel.providers import mock_data
from riskintel.providers.web import (
    LiveBreachChecker,
    LivePersonSearch,
    LiveSanctionsChecker,
    MockBreachChecker,
    MockPersonSearch,
    MockSanctionsChecker,
    SanctionsChecker,
    WebIntelligenceSearch,
    analyze_risk_indicators,
)
from riskintel.ratelimit.limiter import RateLimiter


@pytest.fixture  # type: ignore[misc]
def subject() -> Subject:
    return Subject(
        subject_id="s1",
        first_name="Vladimir",
        last_name="Petrov",
        email="vladimir.petrov@example.com",
        company="Eastern Ventures LLC",
    )


@pytest.fixture  # type: ignore[misc]
def intel_config() -> IntelligenceConfig:
    return IntelligenceConfig(
        person_search_url="https://people.test/search",
        sanctions_url="https://sanctions.test/match/default",
        sanctions_api_key="secret",
        breach_url="https://breach.test/api/v3/breachedaccount",
        breach_api_key="hibp-key",
        provider_timeout_seconds=5.0,
    )


def _client(handler: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestRiskIndicators:
    def test_critical_scenario(self) -> None:
        raw = mock_data.PERSON_INTELLIGENCE["critical"]
        indicators = analyze_risk_indicators(PersonIntelligence.model_validate(raw))

        by_type = {ind.type: ind for ind in indicators}
        assert by_type[FactorType.COMPANY_DISSOLVED].severity is RiskLevel.HIGH
        assert by_type[FactorType.COMPANY_RISK_FACTORS].severity is RiskLevel.MEDIUM
        assert by_type[FactorType.NEGATIVE_NEWS_MENTIONS].description == "2 negative news mentions found"
        assert by_type[FactorType.ACTIVE_LEGAL_CASES].description == "2 active legal cases found"
        assert by_type[FactorType.COMPANY_DISSOLVED].origin == "company_registry"

    def test_closed_regulatory_inquiry(self) -> None:
        raw = mock_data.PERSON_INTELLIGENCE["medium"]
        indicators = analyze_risk_indicators(PersonIntelligence.model_validate(raw))
        assert [ind.type for ind in indicators] == [FactorType.REGULATORY_INQUIRY]
        assert indicators[0].severity is RiskLevel.MEDIUM

    def test_clean_profile(self) -> None:
        raw = mock_data.PERSON_INTELLIGENCE["low"]
        assert analyze_risk_indicators(PersonIntelligence.model_validate(raw)) == []


class TestMockAdapters:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_person_search_computes_indicators(self, limiter: RateLimiter, subject: Subject) -> None:
        person, ok = await MockPersonSearch(limiter).fetch(subject)
        assert ok
        assert person.company_info is not None
        assert person.company_info.status == "dissolved"
        assert len(person.risk_indicators) == 4

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_sanctions_match(self, limiter: RateLimiter, subject: Subject) -> None:
        hits, ok = await MockSanctionsChecker(limiter).fetch(subject)
        assert ok
        assert [hit.confidence for hit in hits if hit.match] == [95, 90]

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_unknown_email_uses_medium_scenario(self, limiter: RateLimiter) -> None:
        unknown = Subject(subject_id="s2", first_name="A", last_name="B", email="nobody@example.com")
        records, ok = await MockBreachChecker(limiter).fetch(unknown)
        assert ok
        assert records[0].breaches == ["LinkedIn 2021"]


class TestLiveBreachChecker:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_not_found_is_valid_empty_finding(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["hibp-api-key"] == "hibp-key"
            assert "vladimir.petrov" in str(request.url)
            return httpx.Response(404)

        async with _client(handler) as http:
            records, ok = await LiveBreachChecker(limiter, http, intel_config).fetch(subject)

        assert ok
        assert records[0].breaches == []
        assert records[0].note == "No breaches found"

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_breaches_parsed(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"Name": "Adobe"}, {"Name": "LinkedIn"}])

        async with _client(handler) as http:
            records, ok = await LiveBreachChecker(limiter, http, intel_config).fetch(subject)

        assert ok
        assert records[0].breaches == ["Adobe", "LinkedIn"]

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_server_error_degrades(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with _client(handler) as http:
            records, ok = await LiveBreachChecker(limiter, http, intel_config).fetch(subject)

        assert not ok
        assert records == []


class TestLiveSanctionsChecker:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_match_above_threshold(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["queries"]["subject"]["properties"]["name"] == ["Vladimir Petrov"]
            assert request.headers["Authorization"] == "ApiKey secret"
            results = [
                {"caption": "PETROV, Vladimir", "score": 0.93, "match": True, "datasets": ["us_ofac_sdn"]},
                {"caption": "Someone Else", "score": 0.41, "match": False, "datasets": ["eu_fsf"]},
            ]
            return httpx.Response(200, json={"responses": {"subject": {"results": results}}})

        async with _client(handler) as http:
            hits, ok = await LiveSanctionsChecker(limiter, http, intel_config).fetch(subject)

        assert ok
        assert len(hits) == 1
        assert hits[0].match
        assert hits[0].confidence == 93.0
        assert hits[0].list_name == "us_ofac_sdn"

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_no_results(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"responses": {"subject": {"results": []}}})

        async with _client(handler) as http:
            hits, ok = await LiveSanctionsChecker(limiter, http, intel_config).fetch(subject)

        assert ok
        assert len(hits) == 1
        assert not hits[0].match

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_malformed_payload_degrades(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        async with _client(handler) as http:
            hits, ok = await LiveSanctionsChecker(limiter, http, intel_config).fetch(subject)

        assert not ok
        assert hits == []

    @pytest.mark.asyncio  # type: ignore[misc]
    @pytest.mark.parametrize("results", [["oops"], [None], [42, {"score": 0.9}]])  # type: ignore[misc]
    async def test_non_object_results_degrade(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
        results: list[Any],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"responses": {"subject": {"results": results}}})

        async with _client(handler) as http:
            hits, ok = await LiveSanctionsChecker(limiter, http, intel_config).fetch(subject)

        assert not ok
        assert hits == []


class TestLivePersonSearch:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_parses_and_recomputes_indicators(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["name"] == "Vladimir Petrov"
            assert request.url.params["company"] == "Eastern Ventures LLC"
            payload = dict(mock_data.PERSON_INTELLIGENCE["high"])
            payload["riskIndicators"] = [{"type": "anything", "source": "remote"}]
            return httpx.Response(200, json=payload)

        async with _client(handler) as http:
            person, ok = await LivePersonSearch(limiter, http, intel_config).fetch(subject)

        assert ok
        assert {ind.type for ind in person.risk_indicators} == {
            FactorType.COMPANY_RISK_FACTORS,
            FactorType.NEGATIVE_NEWS_MENTIONS,
            FactorType.ACTIVE_LEGAL_CASES,
        }

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_empty_result_is_ok(
        self,
        limiter: RateLimiter,
        subject: Subject,
        intel_config: IntelligenceConfig,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        async with _client(handler) as http:
            search = LivePersonSearch(limiter, http, intel_config)
            person, ok = await search.fetch(subject)

        assert ok
        assert search.is_empty(person)


class _SlowSanctions(SanctionsChecker):
    async def _fetch(self, subject: Subject) -> list[Any]:
        await asyncio.sleep(1.0)
        return []


class _BrokenBreaches(MockBreachChecker):
    async def _fetch(self, subject: Subject) -> list[Any]:
        raise httpx.ConnectError("connection refused")


class _ExplodingPersonSearch(MockPersonSearch):
    async def fetch(self, subject: Subject) -> tuple[Any, bool]:
        raise RuntimeError("adapter bug")


class TestWebIntelligenceSearch:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_full_snapshot(self, limiter: RateLimiter, subject: Subject) -> None:
        search = WebIntelligenceSearch(
            MockPersonSearch(limiter),
            MockSanctionsChecker(limiter),
            MockBreachChecker(limiter),
        )
        web = await search.gather(subject)

        assert web.sources == ["web_search", "sanctions_check", "breach_check"]
        assert web.risk_score == 100
        assert web.risk_level is RiskLevel.CRITICAL
        assert web.confidence == 80

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_degraded_sources_are_excluded(self, limiter: RateLimiter, subject: Subject) -> None:
        search = WebIntelligenceSearch(
            MockPersonSearch(limiter),
            _SlowSanctions(limiter, timeout=0.01),
            _BrokenBreaches(limiter),
        )
        web = await search.gather(subject)

        assert web.sources == ["web_search"]
        assert web.sanctions == []
        assert web.data_breaches == []
        assert web.confidence == 30
        # dissolved(15) + risk factors(10) + negative news(10) + active legal(15)
        assert web.risk_score == 50

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_composition_timeout_degrades_to_empty(self, limiter: RateLimiter, subject: Subject) -> None:
        search = WebIntelligenceSearch(
            MockPersonSearch(limiter),
            _SlowSanctions(limiter, timeout=5.0),
            MockBreachChecker(limiter),
            timeout=0.01,
        )
        web = await search.gather(subject)

        assert web.risk_score == 0
        assert web.risk_level is RiskLevel.LOW
        assert web.confidence == 0
        assert web.sources == []

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_unexpected_adapter_error_degrades(self, limiter: RateLimiter, subject: Subject) -> None:
        search = WebIntelligenceSearch(
            _ExplodingPersonSearch(limiter),
            MockSanctionsChecker(limiter),
            MockBreachChecker(limiter),
        )
        web = await search.gather(subject)

        assert web.sources == []
        assert web.risk_score == 0
        assert web.confidence == 0
