from riskintel.domain.errors import (
    MirrorError,
    PersistenceError,
    ProviderError,
    RiskIntelError,
    ScoringError,
    ScoringUnavailableError,
    ScoringValidationError,
    SubjectNotFoundError,
)
from riskintel.domain.levels import RiskLevel, clamp_score, level_for_score
from riskintel.domain.models import (
    Address,
    AssessmentEvent,
    AssessmentResult,
    AuditSeverity,
    BreachRecord,
    CompanyInfo,
    DimensionalRiskScore,
    Document,
    DocumentAnalysis,
    DocumentAnalysisEntry,
    DocumentType,
    FactorType,
    HighRiskEntry,
    HighRiskListing,
    IntelligenceBundle,
    KYCStatus,
    LegalRecord,
    NewsMention,
    PersonIntelligence,
    RiskAssessment,
    RiskFactor,
    RiskIndicator,
    RiskProfile,
    RiskSummary,
    SanctionsHit,
    SinkOutcome,
    Subject,
    SubjectOutcome,
    SubjectOverview,
    SweepSummary,
    VerificationStatus,
    WebIntelligence,
)

__all__ = [
    "Address",
    "AssessmentEvent",
    "AssessmentResult",
    "AuditSeverity",
    "BreachRecord",
    "CompanyInfo",
    "DimensionalRiskScore",
    "Document",
    "DocumentAnalysis",
    "DocumentAnalysisEntry",
    "DocumentType",
    "FactorType",
    "HighRiskEntry",
    "HighRiskListing",
    "IntelligenceBundle",
    "KYCStatus",
    "LegalRecord",
    "MirrorError",
    "NewsMention",
    "PersistenceError",
    "PersonIntelligence",
    "ProviderError",
    "RiskAssessment",
    "RiskFactor",
    "RiskIndicator",
    "RiskIntelError",
    "RiskLevel",
    "RiskProfile",
    "RiskSummary",
    "SanctionsHit",
    "ScoringError",
    "ScoringUnavailableError",
    "ScoringValidationError",
    "SinkOutcome",
    "Subject",
    "SubjectNotFoundError",
    "SubjectOutcome",
    "SubjectOverview",
    "SweepSummary",
    "VerificationStatus",
    "WebIntelligence",
    "clamp_score",
    "level_for_score",
]
