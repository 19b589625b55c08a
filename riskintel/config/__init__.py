from riskintel.config.logging import configure_logging
from riskintel.config.settings import (
    AIProviderConfig,
    IntelligenceConfig,
    LedgerConfig,
    OperationMode,
    OrchestrationConfig,
    PostgresConfig,
    RateLimitConfig,
    RedisConfig,
    Settings,
)

__all__ = [
    "AIProviderConfig",
    "IntelligenceConfig",
    "LedgerConfig",
    "OperationMode",
    "OrchestrationConfig",
    "PostgresConfig",
    "RateLimitConfig",
    "RedisConfig",
    "Settings",
    "configure_logging",
]
