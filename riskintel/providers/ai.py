from __future__ import annotations

import abc
import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from riskintel.domain.errors import ScoringUnavailableError, ScoringValidationError
from riskintel.providers import mock_data
from riskintel.prompts import RISK_ASSESSMENT_PROMPT

if TYPE_CHECKING:
    from riskintel.config.settings import AIProviderConfig
    from riskintel.domain.models import Subject
    from riskintel.ratelimit.limiter import RateLimiter

logger = structlog.get_logger(__name__)

AI_PROVIDER_KEY = "ai_risk_assessment"


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


class ChatCompletionClient:
    """Thin client for a DeepSeek-compatible ``/chat/completions`` endpoint."""

    def __init__(self, config: AIProviderConfig, http: httpx.AsyncClient) -> None:
        self.config = config
        self.http = http

    async def complete_json(self, system_prompt: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one system+user exchange and parse the reply as a JSON object.

        Transport failures surface as ``httpx.HTTPError``; a reply that is not
        a JSON object raises ``ValueError``.
        """
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        body = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": json.dumps(payload, indent=2, default=str)},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "response_format": {"type": "json_object"},
        }
        response = await self.http.post(
            f"{self.config.base_url.rstrip('/')}/chat/completions",
            json=body,
            headers=headers,
        )
        response.raise_for_status()

        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            msg = "No content received from chat completion"
            raise ValueError(msg) from exc
        if not content:
            msg = "No content received from chat completion"
            raise ValueError(msg)

        parsed = json.loads(_strip_code_fence(content))
        if not isinstance(parsed, dict):
            msg = f"Expected a JSON object, got {type(parsed).__name__}"
            raise ValueError(msg)
        return parsed


class RiskAssessmentProvider(abc.ABC):
    """Source of the raw five-dimension risk assessment JSON."""

    @abc.abstractmethod
    async def assess(self, subject: Subject, request: dict[str, Any]) -> dict[str, Any]:
        """Return the provider's raw response.

        Raises ``ScoringUnavailableError`` when the provider cannot be reached
        and ``ScoringValidationError`` when its reply is not parseable.
        """
        ...


class LiveRiskAssessmentProvider(RiskAssessmentProvider):
    def __init__(
        self,
        client: ChatCompletionClient,
        limiter: RateLimiter,
        timeout: float | None = None,
    ) -> None:
        self.client = client
        self.limiter = limiter
        self.timeout = timeout if timeout is not None else client.config.timeout_seconds

    async def assess(self, subject: Subject, request: dict[str, Any]) -> dict[str, Any]:
        await self.limiter.acquire(AI_PROVIDER_KEY)
        try:
            return await asyncio.wait_for(
                self.client.complete_json(RISK_ASSESSMENT_PROMPT, request),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            msg = f"AI provider timed out after {self.timeout:.1f}s"
            logger.error("ai_provider_unavailable", subject_id=subject.subject_id, reason=msg)
            raise ScoringUnavailableError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"AI provider request failed: {exc}"
            logger.error("ai_provider_unavailable", subject_id=subject.subject_id, reason=str(exc))
            raise ScoringUnavailableError(msg) from exc
        except ValueError as exc:
            msg = f"Invalid JSON response from AI provider: {exc}"
            logger.error("ai_response_unparseable", subject_id=subject.subject_id, reason=str(exc))
            raise ScoringValidationError(msg) from exc


class MockRiskAssessmentProvider(RiskAssessmentProvider):
    """Scenario data keyed by the subject's email address."""

    async def assess(self, subject: Subject, request: dict[str, Any]) -> dict[str, Any]:
        logger.debug(
            "mock_risk_assessment",
            subject_id=subject.subject_id,
            scenario=mock_data.scenario_for_email(subject.email),
        )
        return mock_data.risk_assessment_for(subject.email)
