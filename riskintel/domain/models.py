from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from riskintel.domain.levels import RiskLevel, clamp_score, level_for_score


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FactorType(str, Enum):
    IDENTITY_RISK = "identity_risk"
    INDUSTRY_RISK = "industry_risk"
    NETWORK_RISK = "network_risk"
    SECURITY_RISK = "security_risk"
    DOCUMENT_FRAUD = "document_fraud"
    REGULATORY_INQUIRY = "regulatory_inquiry"
    COMPANY_DISSOLVED = "company_dissolved"
    COMPANY_RISK_FACTORS = "company_risk_factors"
    NEGATIVE_NEWS_MENTIONS = "negative_news_mentions"
    ACTIVE_LEGAL_CASES = "active_legal_cases"
    SANCTIONS_MATCH = "sanctions_match"
    DATA_BREACH = "data_breach"


class KYCStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(str, Enum):
    PASSPORT = "passport"
    DRIVERS_LICENSE = "drivers_license"
    NATIONAL_ID = "national_id"
    UTILITY_BILL = "utility_bill"
    BANK_STATEMENT = "bank_statement"
    OTHER = "other"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    REQUIRES_REVIEW = "requires_review"


class AuditSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Address(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None


class Subject(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    date_of_birth: date | None = None
    nationality: str | None = None
    address: Address | None = None
    company: str | None = None
    wallet_address: str | None = None
    kyc_status: KYCStatus = KYCStatus.NOT_STARTED
    risk_score: int = Field(default=0, ge=0, le=100)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def attributes(self) -> dict[str, Any]:
        """Identity attributes shared with external providers."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "nationality": self.nationality,
            "address": self.address.model_dump() if self.address else None,
            "company": self.company,
        }


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    document_id: str
    subject_id: str
    document_type: DocumentType
    storage_ref: str
    file_name: str = ""
    ocr_data: dict[str, Any] = Field(default_factory=dict)
    verification_status: VerificationStatus = VerificationStatus.PENDING


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentCheck(_CamelModel):
    score: int = 0
    indicators: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    matches: list[str] = Field(default_factory=list)
    discrepancies: list[str] = Field(default_factory=list)
    risk_level: RiskLevel | None = None


class OCRCheck(_CamelModel):
    score: int = 0
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.0


class DocumentVerdict(_CamelModel):
    verification_status: VerificationStatus
    confidence: float = 0.0
    recommendations: list[str] = Field(default_factory=list)


class DocumentAnalysis(_CamelModel):
    authenticity: DocumentCheck
    data_consistency: DocumentCheck
    fraud_indicators: DocumentCheck
    ocr_accuracy: OCRCheck
    overall_assessment: DocumentVerdict


class DocumentAnalysisEntry(BaseModel):
    document_id: str
    document_type: DocumentType
    analysis: DocumentAnalysis | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.analysis is not None and self.error is None


class RiskIndicator(BaseModel):
    type: FactorType
    severity: RiskLevel
    description: str
    origin: str


class CompanyInfo(_CamelModel):
    name: str
    registration_number: str | None = None
    status: str = "unknown"
    incorporation_date: str | None = None
    directors: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    industry: str | None = None


class NewsMention(_CamelModel):
    title: str
    source: str = ""
    date: str | None = None
    url: str | None = None
    sentiment: str = "neutral"
    relevance: str = "medium"


class LegalRecord(_CamelModel):
    type: str
    title: str
    date: str | None = None
    status: str = "closed"
    relevance: str = "low"


class PersonIntelligence(_CamelModel):
    company_info: CompanyInfo | None = None
    news_mentions: list[NewsMention] = Field(default_factory=list)
    legal_records: list[LegalRecord] = Field(default_factory=list)
    risk_indicators: list[RiskIndicator] = Field(default_factory=list)


class SanctionsHit(BaseModel):
    list_name: str
    match: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    entity: str | None = None
    note: str | None = None


class BreachRecord(BaseModel):
    source: str
    breaches: list[str] = Field(default_factory=list)
    note: str | None = None


class WebIntelligence(BaseModel):
    person_info: PersonIntelligence | None = None
    sanctions: list[SanctionsHit] = Field(default_factory=list)
    data_breaches: list[BreachRecord] = Field(default_factory=list)
    risk_score: int = Field(default=0, ge=0, le=100)
    risk_level: RiskLevel = RiskLevel.LOW
    confidence: int = Field(default=0, ge=0, le=100)
    sources: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def degraded(cls) -> WebIntelligence:
        return cls()

    @property
    def sanctions_matched(self) -> bool:
        return any(hit.match for hit in self.sanctions)

    @property
    def breach_confirmed(self) -> bool:
        return any(record.breaches for record in self.data_breaches)


class IntelligenceBundle(BaseModel):
    documents: list[DocumentAnalysisEntry] = Field(default_factory=list)
    web: WebIntelligence = Field(default_factory=WebIntelligence)


class DimensionalRiskScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    level: RiskLevel
    factors: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @classmethod
    def from_score(
        cls,
        score: float,
        factors: list[str] | None = None,
        reasoning: str = "",
    ) -> DimensionalRiskScore:
        clamped = clamp_score(score)
        return cls(
            score=clamped,
            level=level_for_score(clamped),
            factors=list(factors or []),
            reasoning=reasoning,
        )


DIMENSIONS = ("identity", "industry", "network", "security")


class RiskAssessment(BaseModel):
    identity: DimensionalRiskScore
    industry: DimensionalRiskScore
    network: DimensionalRiskScore
    security: DimensionalRiskScore
    aggregate_score: int = Field(ge=0, le=100)
    aggregate_level: RiskLevel
    overall_reasoning: str = ""
    prompt_version: str = ""

    def dimensions(self) -> dict[str, DimensionalRiskScore]:
        return {name: getattr(self, name) for name in DIMENSIONS}


class RiskFactor(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: FactorType
    description: str
    severity: RiskLevel
    source: str
    timestamp: datetime = Field(default_factory=utcnow)


class RiskProfile(BaseModel):
    subject_id: str
    identity: DimensionalRiskScore
    industry: DimensionalRiskScore
    network: DimensionalRiskScore
    security: DimensionalRiskScore
    aggregate_score: int = Field(ge=0, le=100)
    aggregate_level: RiskLevel
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)

    def dimensions(self) -> dict[str, DimensionalRiskScore]:
        return {name: getattr(self, name) for name in DIMENSIONS}

    def recent_factors(self, count: int) -> list[RiskFactor]:
        return self.risk_factors[-count:] if count > 0 else []


class AssessmentEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    subject_id: str
    action: str = "risk_assessment_updated"
    identity_score: int
    industry_score: int
    network_score: int
    security_score: int
    aggregate_score: int
    aggregate_level: RiskLevel
    web_intelligence_score: int
    web_intelligence_confidence: int
    sources: list[str] = Field(default_factory=list)
    severity: AuditSeverity
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_assessment(
        cls,
        subject_id: str,
        assessment: RiskAssessment,
        web: WebIntelligence,
    ) -> AssessmentEvent:
        severity = (
            AuditSeverity.CRITICAL
            if assessment.aggregate_level is RiskLevel.CRITICAL
            else AuditSeverity.HIGH
        )
        return cls(
            subject_id=subject_id,
            identity_score=assessment.identity.score,
            industry_score=assessment.industry.score,
            network_score=assessment.network.score,
            security_score=assessment.security.score,
            aggregate_score=assessment.aggregate_score,
            aggregate_level=assessment.aggregate_level,
            web_intelligence_score=web.risk_score,
            web_intelligence_confidence=web.confidence,
            sources=list(web.sources),
            severity=severity,
        )


class SinkOutcome(BaseModel):
    sink: str
    ok: bool
    error: str | None = None


class AssessmentResult(BaseModel):
    subject_id: str
    assessment: RiskAssessment
    factors: list[RiskFactor]
    web_intelligence: WebIntelligence
    document_analyses: list[DocumentAnalysisEntry]
    profile: RiskProfile | None = None
    persistence: list[SinkOutcome] = Field(default_factory=list)
    mirrored: bool | None = None
    completed_at: datetime = Field(default_factory=utcnow)

    @property
    def fully_persisted(self) -> bool:
        return all(outcome.ok for outcome in self.persistence)


class SubjectOutcome(BaseModel):
    subject_id: str
    success: bool
    risk_score: int | None = None
    error: str | None = None


class SweepSummary(BaseModel):
    processed: int
    successful: int
    failed: int
    results: list[SubjectOutcome] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.processed == 0:
            return 0.0
        return round(self.successful / self.processed * 100, 2)


class HighRiskEntry(BaseModel):
    subject_id: str
    risk_score: int
    risk_level: RiskLevel
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    last_updated: datetime


class HighRiskListing(BaseModel):
    subjects: list[HighRiskEntry] = Field(default_factory=list)
    level_breakdown: dict[str, int] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.subjects)


class SubjectOverview(BaseModel):
    first_name: str
    last_name: str
    email: str
    kyc_status: KYCStatus
    risk_score: int


class RiskSummary(BaseModel):
    subject_id: str
    subject: SubjectOverview
    profile: RiskProfile | None = None
    contributions: dict[str, float] = Field(default_factory=dict)
    document_count: int = 0
    verified_documents: int = 0
