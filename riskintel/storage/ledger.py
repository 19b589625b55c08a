from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

import httpx
import structlog

from riskintel.domain.errors import MirrorError

if TYPE_CHECKING:
    from riskintel.config.settings import LedgerConfig

logger = structlog.get_logger(__name__)


class HttpLedgerMirror:
    """Posts aggregate scores to a ledger oracle endpoint."""

    def __init__(self, config: LedgerConfig, http: httpx.AsyncClient) -> None:
        if not config.oracle_url:
            msg = "LedgerConfig.oracle_url is required for HttpLedgerMirror"
            raise ValueError(msg)
        self.config = config
        self.http = http

    async def mirror_score(self, external_id: str, score: int) -> None:
        headers = {}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        try:
            response = await self.http.post(
                str(self.config.oracle_url),
                json={"address": external_id, "riskScore": score},
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            msg = f"Ledger mirror failed for {external_id}: {exc}"
            raise MirrorError(msg) from exc
        logger.info("ledger_score_mirrored", external_id=external_id, score=score)


class LoggingLedgerMirror:
    """Records mirror intent when no oracle endpoint is configured."""

    def __init__(self, max_records: int = 1000) -> None:
        self.mirrored: deque[tuple[str, int]] = deque(maxlen=max_records)

    async def mirror_score(self, external_id: str, score: int) -> None:
        self.mirrored.append((external_id, score))
        logger.info("ledger_mirror_skipped", external_id=external_id, score=score, reason="no oracle configured")
