from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog

from riskintel.domain.errors import ProviderError
from riskintel.domain.levels import RiskLevel, level_for_score
from riskintel.domain.models import (
    BreachRecord,
    FactorType,
    PersonIntelligence,
    RiskIndicator,
    SanctionsHit,
    WebIntelligence,
)
from riskintel.providers import mock_data
from riskintel.providers.base import ProviderAdapter
from riskintel.scoring.web import web_confidence, web_risk_score

if TYPE_CHECKING:
    from riskintel.config.settings import IntelligenceConfig
    from riskintel.domain.models import Subject
    from riskintel.ratelimit.limiter import RateLimiter

logger = structlog.get_logger(__name__)

WEB_INTELLIGENCE = "web_intelligence"


def analyze_risk_indicators(person: PersonIntelligence) -> list[RiskIndicator]:
    """Derive risk indicators from raw person intelligence."""
    indicators: list[RiskIndicator] = []

    company = person.company_info
    if company is not None:
        if company.status.lower() == "dissolved":
            indicators.append(
                RiskIndicator(
                    type=FactorType.COMPANY_DISSOLVED,
                    severity=RiskLevel.HIGH,
                    description=f"Company {company.name} has been dissolved",
                    origin="company_registry",
                )
            )
        if company.risk_factors:
            indicators.append(
                RiskIndicator(
                    type=FactorType.COMPANY_RISK_FACTORS,
                    severity=RiskLevel.MEDIUM,
                    description=", ".join(company.risk_factors),
                    origin="company_registry",
                )
            )

    negative = [m for m in person.news_mentions if m.sentiment.lower() == "negative"]
    if negative:
        indicators.append(
            RiskIndicator(
                type=FactorType.NEGATIVE_NEWS_MENTIONS,
                severity=RiskLevel.MEDIUM,
                description=f"{len(negative)} negative news mentions found",
                origin="news_search",
            )
        )

    active = [r for r in person.legal_records if r.status.lower() == "active"]
    if active:
        indicators.append(
            RiskIndicator(
                type=FactorType.ACTIVE_LEGAL_CASES,
                severity=RiskLevel.HIGH,
                description=f"{len(active)} active legal cases found",
                origin="legal_records",
            )
        )

    for record in person.legal_records:
        if record.type == FactorType.REGULATORY_INQUIRY.value and record.status.lower() != "active":
            indicators.append(
                RiskIndicator(
                    type=FactorType.REGULATORY_INQUIRY,
                    severity=RiskLevel.MEDIUM,
                    description=f"Previous regulatory inquiry: {record.title}",
                    origin="legal_records",
                )
            )

    return indicators


def _with_indicators(raw: dict[str, Any]) -> PersonIntelligence:
    raw = dict(raw)
    # Indicators are always recomputed locally.
    raw.pop("riskIndicators", None)
    person = PersonIntelligence.model_validate(raw)
    return person.model_copy(update={"risk_indicators": analyze_risk_indicators(person)})


class PersonSearch(ProviderAdapter[PersonIntelligence]):
    name = "web_search"

    def default(self) -> PersonIntelligence:
        return PersonIntelligence()

    def is_empty(self, value: PersonIntelligence) -> bool:
        return value.company_info is None and not value.news_mentions and not value.legal_records


class LivePersonSearch(PersonSearch):
    def __init__(
        self,
        limiter: RateLimiter,
        http: httpx.AsyncClient,
        config: IntelligenceConfig,
    ) -> None:
        super().__init__(limiter, timeout=config.provider_timeout_seconds)
        self.http = http
        self.config = config

    async def _fetch(self, subject: Subject) -> PersonIntelligence:
        params = {"name": subject.full_name}
        if subject.company:
            params["company"] = subject.company
        if subject.address is not None and subject.address.city:
            params["location"] = subject.address.city

        headers = {"User-Agent": self.config.user_agent, "Accept": "application/json"}
        if self.config.person_search_api_key:
            headers["Authorization"] = f"Bearer {self.config.person_search_api_key}"

        response = await self.http.get(self.config.person_search_url, params=params, headers=headers)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response payload")
        return _with_indicators(data)


class MockPersonSearch(PersonSearch):
    async def _fetch(self, subject: Subject) -> PersonIntelligence:
        return _with_indicators(mock_data.person_intelligence_for(subject.email))


class SanctionsChecker(ProviderAdapter[list[SanctionsHit]]):
    name = "sanctions_check"

    def default(self) -> list[SanctionsHit]:
        return []

    def is_empty(self, value: list[SanctionsHit]) -> bool:
        return not any(hit.match for hit in value)


class LiveSanctionsChecker(SanctionsChecker):
    """OpenSanctions ``/match`` API client."""

    def __init__(
        self,
        limiter: RateLimiter,
        http: httpx.AsyncClient,
        config: IntelligenceConfig,
    ) -> None:
        super().__init__(limiter, timeout=config.provider_timeout_seconds)
        self.http = http
        self.config = config

    def _query(self, subject: Subject) -> dict[str, Any]:
        properties: dict[str, list[str]] = {"name": [subject.full_name]}
        if subject.date_of_birth is not None:
            properties["birthDate"] = [subject.date_of_birth.isoformat()]
        if subject.nationality:
            properties["nationality"] = [subject.nationality]
        return {"queries": {"subject": {"schema": "Person", "properties": properties}}}

    async def _fetch(self, subject: Subject) -> list[SanctionsHit]:
        headers = {"User-Agent": self.config.user_agent}
        if self.config.sanctions_api_key:
            headers["Authorization"] = f"ApiKey {self.config.sanctions_api_key}"

        response = await self.http.post(
            self.config.sanctions_url,
            json=self._query(subject),
            headers=headers,
        )
        response.raise_for_status()
        results = response.json()["responses"]["subject"]["results"]

        hits = []
        for result in results:
            if not isinstance(result, dict):
                raise ProviderError(self.name, f"unexpected match result: {result!r}")
            score = float(result.get("score", 0.0))
            if score < self.config.sanctions_match_threshold:
                continue
            datasets = result.get("datasets") or ["opensanctions"]
            hits.append(
                SanctionsHit(
                    list_name=", ".join(datasets),
                    match=bool(result.get("match", True)),
                    confidence=round(score * 100, 1),
                    entity=result.get("caption"),
                    note="Potential match found",
                )
            )

        if not hits:
            return [SanctionsHit(list_name="opensanctions", match=False, confidence=0, note="No matches found")]
        return hits


class MockSanctionsChecker(SanctionsChecker):
    async def _fetch(self, subject: Subject) -> list[SanctionsHit]:
        return [SanctionsHit.model_validate(hit) for hit in mock_data.sanctions_for(subject.email)]


class BreachChecker(ProviderAdapter[list[BreachRecord]]):
    name = "breach_check"

    def default(self) -> list[BreachRecord]:
        return []

    def is_empty(self, value: list[BreachRecord]) -> bool:
        return not any(record.breaches for record in value)


class LiveBreachChecker(BreachChecker):
    """Have I Been Pwned ``breachedaccount`` client."""

    def __init__(
        self,
        limiter: RateLimiter,
        http: httpx.AsyncClient,
        config: IntelligenceConfig,
    ) -> None:
        super().__init__(limiter, timeout=config.provider_timeout_seconds)
        self.http = http
        self.config = config

    async def _fetch(self, subject: Subject) -> list[BreachRecord]:
        headers = {"User-Agent": self.config.user_agent}
        if self.config.breach_api_key:
            headers["hibp-api-key"] = self.config.breach_api_key

        url = f"{self.config.breach_url.rstrip('/')}/{quote(subject.email, safe='')}"
        response = await self.http.get(url, params={"truncateResponse": "true"}, headers=headers)
        if response.status_code == 404:
            return [BreachRecord(source="haveibeenpwned", breaches=[], note="No breaches found")]
        response.raise_for_status()

        names = [entry["Name"] for entry in response.json()]
        return [
            BreachRecord(
                source="haveibeenpwned",
                breaches=names,
                note=f"{len(names)} breaches found" if names else "No breaches found",
            )
        ]


class MockBreachChecker(BreachChecker):
    async def _fetch(self, subject: Subject) -> list[BreachRecord]:
        return [BreachRecord.model_validate(record) for record in mock_data.breaches_for(subject.email)]


class WebIntelligenceSearch:
    """Runs person, sanctions and breach lookups together into one snapshot."""

    def __init__(
        self,
        person_search: PersonSearch,
        sanctions_checker: SanctionsChecker,
        breach_checker: BreachChecker,
        timeout: float = 120.0,
    ) -> None:
        self.person_search = person_search
        self.sanctions_checker = sanctions_checker
        self.breach_checker = breach_checker
        self.timeout = timeout

    async def gather(self, subject: Subject) -> WebIntelligence:
        try:
            web = await asyncio.wait_for(self._compose(subject), timeout=self.timeout)
        except asyncio.TimeoutError:
            reason = f"timed out after {self.timeout:.1f}s"
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}"
        else:
            logger.info(
                "web_intelligence_complete",
                subject_id=subject.subject_id,
                risk_score=web.risk_score,
                confidence=web.confidence,
                sources=web.sources,
            )
            return web

        logger.warning(
            "provider_degraded",
            provider=WEB_INTELLIGENCE,
            subject_id=subject.subject_id,
            reason=reason,
        )
        return WebIntelligence.degraded()

    async def _compose(self, subject: Subject) -> WebIntelligence:
        (person, person_ok), (hits, sanctions_ok), (records, breach_ok) = await asyncio.gather(
            self.person_search.fetch(subject),
            self.sanctions_checker.fetch(subject),
            self.breach_checker.fetch(subject),
        )

        sources = [
            adapter.name
            for adapter, ok in (
                (self.person_search, person_ok),
                (self.sanctions_checker, sanctions_ok),
                (self.breach_checker, breach_ok),
            )
            if ok
        ]
        web = WebIntelligence(
            person_info=person if person_ok else None,
            sanctions=hits,
            data_breaches=records,
            sources=sources,
        )
        score = web_risk_score(web)
        return web.model_copy(
            update={
                "risk_score": score,
                "risk_level": level_for_score(score),
                "confidence": web_confidence(web),
            }
        )
