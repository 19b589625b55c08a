from __future__ import annotations


class RiskIntelError(Exception):
    """Base class for engine errors."""


class SubjectNotFoundError(RiskIntelError):
    def __init__(self, subject_id: str) -> None:
        super().__init__(f"Subject {subject_id} not found")
        self.subject_id = subject_id


class ScoringError(RiskIntelError):
    """Scoring stage failed; the run is aborted before persistence."""


class ScoringValidationError(ScoringError):
    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class ScoringUnavailableError(ScoringError):
    pass


class ProviderError(RiskIntelError):
    """Raised inside an adapter; never escapes it."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class PersistenceError(RiskIntelError):
    def __init__(self, sink: str, message: str) -> None:
        super().__init__(f"{sink}: {message}")
        self.sink = sink


class MirrorError(RiskIntelError):
    pass
