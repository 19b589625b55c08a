from __future__ import annotations

from enum import Enum

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OperationMode(str, Enum):
    SIMULATION = "simulation"
    PRODUCTION = "production"


class RateLimitConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_RATE_")

    max_requests_per_window: int = Field(default=30, ge=1)
    window_seconds: float = Field(default=60.0, gt=0.0)
    min_interval_seconds: float = Field(default=2.0, ge=0.0)
    # provider key -> requests per window
    provider_overrides: dict[str, int] = Field(default_factory=dict)

    @field_validator("min_interval_seconds")
    @classmethod
    def interval_within_window(cls, v: float, info: ValidationInfo) -> float:
        window = info.data.get("window_seconds", 60.0)
        if v > window:
            msg = "min_interval_seconds must be <= window_seconds"
            raise ValueError(msg)
        return v


class AIProviderConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_AI_")

    api_key: str | None = Field(default=None)
    base_url: str = Field(default="https://api.deepseek.com/v1")
    model: str = Field(default="deepseek-chat")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=100, le=16_000)
    timeout_seconds: float = Field(default=60.0, gt=0.0)


class IntelligenceConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_INTEL_")

    person_search_url: str = Field(default="http://localhost:8081/person-search")
    person_search_api_key: str | None = Field(default=None)
    sanctions_url: str = Field(default="https://api.opensanctions.org/match/default")
    sanctions_api_key: str | None = Field(default=None)
    sanctions_match_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    breach_url: str = Field(default="https://haveibeenpwned.com/api/v3/breachedaccount")
    breach_api_key: str | None = Field(default=None)
    provider_timeout_seconds: float = Field(default=15.0, gt=0.0)
    user_agent: str = Field(default="KYC-Platform-Bot/1.0 (Compliance Research)")


class OrchestrationConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_ORCH_")

    sweep_batch_size: int = Field(default=10, ge=1, le=100)
    sweep_concurrency: int = Field(default=3, ge=1, le=20)
    pending_max_risk_score: int = Field(default=50, ge=0, le=100)
    document_timeout_seconds: float = Field(default=90.0, gt=0.0)
    web_intelligence_timeout_seconds: float = Field(default=120.0, gt=0.0)


class LedgerConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_LEDGER_")

    oracle_url: str | None = Field(default=None)
    api_key: str | None = Field(default=None)
    timeout_seconds: float = Field(default=10.0, gt=0.0)


class PostgresConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_PG_")

    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="riskintel")
    password: str = Field(default="password")
    database: str = Field(default="riskintel")

    @property
    def dsn(self) -> str:
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


class RedisConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RI_REDIS_")

    enabled: bool = Field(default=False)
    host: str = Field(default="localhost")
    port: int = Field(default=6379)
    db: int = Field(default=0)
    password: str | None = Field(default=None)

    @property
    def url(self) -> str:
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    mode: OperationMode = Field(default=OperationMode.SIMULATION)
    log_level: str = Field(default="INFO")
    summary_cache_ttl: int = Field(default=3600, ge=0)

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    ai: AIProviderConfig = Field(default_factory=AIProviderConfig)
    intelligence: IntelligenceConfig = Field(default_factory=IntelligenceConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)

    @property
    def uses_live_providers(self) -> bool:
        return self.mode is OperationMode.PRODUCTION
