from __future__ import annotations

from typing import Any

import pytest

from riskintel.config.settings import OperationMode, RateLimitConfig, RedisConfig, Settings
from riskintel.orchestration import runtime as runtime_module
from riskintel.orchestration.runtime import build_runtime
from riskintel.providers.factory import ProviderSuite
from riskintel.storage.redis_cache import RedisSummaryCache


class _RecordingStore:
    instances: list[_RecordingStore] = []

    def __init__(self, config: Any) -> None:
        self.initialized = False
        self.closed = False
        _RecordingStore.instances.append(self)

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True


class TestBuildRuntime:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_simulation_runtime_assesses_demo_subjects(self) -> None:
        settings = Settings(mode=OperationMode.SIMULATION, rate_limit=RateLimitConfig(min_interval_seconds=0.0))
        runtime = await build_runtime(settings)
        try:
            result = await runtime.service.assess_one("subj-medium")
        finally:
            await runtime.aclose()

        assert result.assessment.aggregate_score == 34
        assert result.fully_persisted

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_failed_wiring_releases_resources(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _RecordingStore.instances.clear()
        suites: list[ProviderSuite] = []
        real_build = runtime_module.build_provider_suite

        def _capture(*args: Any, **kwargs: Any) -> ProviderSuite:
            suite = real_build(*args, **kwargs)
            suites.append(suite)
            return suite

        async def _refuse(self: RedisSummaryCache) -> None:
            raise ConnectionError("redis unreachable")

        monkeypatch.setattr(runtime_module, "PostgresStore", _RecordingStore)
        monkeypatch.setattr(runtime_module, "build_provider_suite", _capture)
        monkeypatch.setattr(RedisSummaryCache, "connect", _refuse)

        settings = Settings(mode=OperationMode.PRODUCTION, redis=RedisConfig(enabled=True))
        with pytest.raises(ConnectionError):
            await build_runtime(settings)

        (store,) = _RecordingStore.instances
        assert store.initialized
        assert store.closed
        (suite,) = suites
        assert suite.http is None
