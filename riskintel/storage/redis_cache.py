from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis  # type: ignore[import-untyped]

    from riskintel.config.settings import RedisConfig

logger = structlog.get_logger(__name__)


class RedisSummaryCache:
    """Caches rendered risk summaries per subject."""

    def __init__(self, config: RedisConfig, client: AsyncRedis | None = None) -> None:
        self.config = config
        self._client = client

    async def connect(self) -> None:
        from redis.asyncio import Redis

        self._client = Redis(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            decode_responses=True,
        )
        await self._client.ping()
        logger.info("redis_connected", host=self.config.host, port=self.config.port)

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> AsyncRedis:
        if self._client is None:
            msg = "Redis not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._client

    @staticmethod
    def _key(subject_id: str) -> str:
        return f"risk_summary:{subject_id}"

    async def cache_risk_summary(
        self,
        subject_id: str,
        summary: dict[str, Any],
        ttl: int = 3600,
    ) -> None:
        await self.client.setex(self._key(subject_id), ttl, json.dumps(summary, default=str))

    async def get_risk_summary(self, subject_id: str) -> dict[str, Any] | None:
        data = await self.client.get(self._key(subject_id))
        if data is None:
            return None
        return json.loads(data)  # type: ignore[no-any-return]

    async def invalidate_subject(self, subject_id: str) -> None:
        await self.client.delete(self._key(subject_id))

    async def get_cache_stats(self) -> dict[str, Any]:
        info = await self.client.info("memory")
        return {
            "used_memory": info.get("used_memory_human", "unknown"),
            "keys": await self.client.dbsize(),
        }
