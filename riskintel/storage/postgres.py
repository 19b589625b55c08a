from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    select,
    text,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from riskintel.domain.levels import RiskLevel
from riskintel.domain.models import (
    Address,
    AssessmentEvent,
    DimensionalRiskScore,
    Document,
    RiskFactor,
    RiskProfile,
    Subject,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from riskintel.config.settings import PostgresConfig
    from riskintel.domain.models import DocumentAnalysis, RiskAssessment

logger = structlog.get_logger(__name__)

metadata = MetaData()

subjects_table = Table(
    "subjects",
    metadata,
    Column("subject_id", String(64), primary_key=True),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("email", String(255), index=True),
    Column("phone_number", String(40)),
    Column("date_of_birth", Date),
    Column("nationality", String(64)),
    Column("address", JSON),
    Column("company", String(255)),
    Column("wallet_address", String(64)),
    Column("kyc_status", String(20), default="not_started"),
    Column("risk_score", Integer, default=0),
    Column("updated_at", DateTime(timezone=True)),
)

documents_table = Table(
    "documents",
    metadata,
    Column("document_id", String(64), primary_key=True),
    Column("subject_id", String(64), index=True),
    Column("document_type", String(30)),
    Column("storage_ref", String(255)),
    Column("file_name", String(255)),
    Column("ocr_data", JSON),
    Column("verification_status", String(20), default="pending"),
    Column("ai_analysis", JSON),
    Column("analyzed_at", DateTime(timezone=True)),
)

risk_profiles_table = Table(
    "risk_profiles",
    metadata,
    Column("subject_id", String(64), primary_key=True),
    Column("identity_risk", JSON),
    Column("industry_risk", JSON),
    Column("network_risk", JSON),
    Column("security_risk", JSON),
    Column("aggregate_score", Integer, index=True),
    Column("aggregate_level", String(20)),
    Column("created_at", DateTime(timezone=True)),
    Column("last_updated", DateTime(timezone=True)),
)

risk_factors_table = Table(
    "risk_factors",
    metadata,
    Column("factor_id", Integer, primary_key=True, autoincrement=True),
    Column("subject_id", String(64), index=True),
    Column("type", String(40)),
    Column("description", Text),
    Column("severity", String(20)),
    Column("source", String(40)),
    Column("created_at", DateTime(timezone=True)),
)

assessment_events_table = Table(
    "assessment_events",
    metadata,
    Column("event_id", String(32), primary_key=True),
    Column("subject_id", String(64), index=True),
    Column("action", String(50)),
    Column("identity_score", Integer),
    Column("industry_score", Integer),
    Column("network_score", Integer),
    Column("security_score", Integer),
    Column("aggregate_score", Integer),
    Column("aggregate_level", String(20)),
    Column("web_intelligence_score", Integer),
    Column("web_intelligence_confidence", Integer),
    Column("sources", JSON),
    Column("severity", String(20)),
    Column("created_at", DateTime(timezone=True)),
)

_DIMENSION_COLUMNS = {
    "identity": "identity_risk",
    "industry": "industry_risk",
    "network": "network_risk",
    "security": "security_risk",
}


def _subject_from_row(row: dict[str, Any]) -> Subject:
    return Subject(
        subject_id=row["subject_id"],
        first_name=row["first_name"] or "",
        last_name=row["last_name"] or "",
        email=row["email"] or "",
        phone_number=row["phone_number"],
        date_of_birth=row["date_of_birth"],
        nationality=row["nationality"],
        address=Address.model_validate(row["address"]) if row["address"] else None,
        company=row["company"],
        wallet_address=row["wallet_address"],
        kyc_status=row["kyc_status"],
        risk_score=row["risk_score"] or 0,
    )


def _factor_from_row(row: dict[str, Any]) -> RiskFactor:
    return RiskFactor(
        type=row["type"],
        description=row["description"],
        severity=row["severity"],
        source=row["source"],
        timestamp=row["created_at"],
    )


def _profile_from_rows(row: dict[str, Any], factors: list[dict[str, Any]]) -> RiskProfile:
    dims = {
        name: DimensionalRiskScore.model_validate(row[column]) for name, column in _DIMENSION_COLUMNS.items()
    }
    return RiskProfile(
        subject_id=row["subject_id"],
        **dims,
        aggregate_score=row["aggregate_score"],
        aggregate_level=row["aggregate_level"],
        risk_factors=[_factor_from_row(f) for f in factors],
        created_at=row["created_at"],
        last_updated=row["last_updated"],
    )


class PostgresStore:
    """PostgreSQL-backed subject directory, document store, profile store and audit sink."""

    def __init__(self, config: PostgresConfig) -> None:
        self.config = config
        self.engine = create_async_engine(
            config.dsn,
            pool_size=10,
            max_overflow=20,
        )

    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("postgres_initialized")

    async def close(self) -> None:
        await self.engine.dispose()

    # Subject directory

    async def get_subject(self, subject_id: str) -> Subject | None:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                select(subjects_table).where(subjects_table.c.subject_id == subject_id)
            )
            row = result.first()
            return _subject_from_row(dict(row._mapping)) if row else None

    async def update_risk_score(self, subject_id: str, score: int) -> None:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                text("""
                    UPDATE subjects
                    SET risk_score = :score, updated_at = NOW()
                    WHERE subject_id = :subject_id
                """),
                {"subject_id": subject_id, "score": score},
            )
            if result.rowcount == 0:  # type: ignore[attr-defined]
                msg = f"Subject {subject_id} not found"
                raise KeyError(msg)
            await session.commit()

    async def list_pending(self, limit: int, max_risk_score: int) -> list[Subject]:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                select(subjects_table)
                .where(subjects_table.c.kyc_status == "in_progress")
                .where(subjects_table.c.risk_score < max_risk_score)
                .order_by(subjects_table.c.updated_at.asc().nulls_first())
                .limit(limit)
            )
            return [_subject_from_row(dict(row._mapping)) for row in result]

    # Document store

    async def list_documents(self, subject_id: str) -> list[Document]:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                select(documents_table).where(documents_table.c.subject_id == subject_id)
            )
            return [
                Document(
                    document_id=row.document_id,
                    subject_id=row.subject_id,
                    document_type=row.document_type,
                    storage_ref=row.storage_ref or "",
                    file_name=row.file_name or "",
                    ocr_data=row.ocr_data or {},
                    verification_status=row.verification_status,
                )
                for row in result
            ]

    async def annotate_analysis(self, document_id: str, analysis: DocumentAnalysis) -> None:
        async with AsyncSession(self.engine) as session:
            await session.execute(
                documents_table.update()
                .where(documents_table.c.document_id == document_id)
                .values(
                    ai_analysis=analysis.model_dump(mode="json", by_alias=True),
                    analyzed_at=utcnow(),
                )
            )
            await session.commit()

    # Profile store

    async def get_profile(self, subject_id: str) -> RiskProfile | None:
        async with AsyncSession(self.engine) as session:
            return await self._load_profile(session, subject_id)

    async def _load_profile(self, session: AsyncSession, subject_id: str) -> RiskProfile | None:
        result = await session.execute(
            select(risk_profiles_table).where(risk_profiles_table.c.subject_id == subject_id)
        )
        row = result.first()
        if row is None:
            return None
        factors = await session.execute(
            select(risk_factors_table)
            .where(risk_factors_table.c.subject_id == subject_id)
            .order_by(risk_factors_table.c.factor_id)
        )
        return _profile_from_rows(dict(row._mapping), [dict(f._mapping) for f in factors])

    async def upsert_profile(
        self,
        subject_id: str,
        update: RiskAssessment,
        new_factors: list[RiskFactor],
    ) -> RiskProfile:
        now = utcnow()
        values = {
            column: getattr(update, name).model_dump(mode="json") for name, column in _DIMENSION_COLUMNS.items()
        }
        values.update(aggregate_score=update.aggregate_score, aggregate_level=update.aggregate_level.value)

        async with AsyncSession(self.engine) as session, session.begin():
            # Row lock serializes concurrent factor appends for one subject.
            await session.execute(
                select(risk_profiles_table.c.subject_id)
                .where(risk_profiles_table.c.subject_id == subject_id)
                .with_for_update()
            )
            stmt = pg_insert(risk_profiles_table).values(
                subject_id=subject_id, created_at=now, last_updated=now, **values
            )
            await session.execute(
                stmt.on_conflict_do_update(
                    index_elements=[risk_profiles_table.c.subject_id],
                    set_={**values, "last_updated": now},
                )
            )
            if new_factors:
                await session.execute(
                    risk_factors_table.insert(),
                    [
                        {
                            "subject_id": subject_id,
                            "type": factor.type.value,
                            "description": factor.description,
                            "severity": factor.severity.value,
                            "source": factor.source,
                            "created_at": factor.timestamp,
                        }
                        for factor in new_factors
                    ],
                )
            profile = await self._load_profile(session, subject_id)

        if profile is None:
            msg = f"Profile for {subject_id} vanished during upsert"
            raise RuntimeError(msg)
        return profile

    async def list_profiles(
        self,
        min_score: int = 0,
        levels: Iterable[RiskLevel] | None = None,
        limit: int = 50,
    ) -> list[RiskProfile]:
        query = (
            select(risk_profiles_table)
            .where(risk_profiles_table.c.aggregate_score >= min_score)
            .order_by(risk_profiles_table.c.aggregate_score.desc())
            .limit(limit)
        )
        if levels:
            query = query.where(risk_profiles_table.c.aggregate_level.in_([RiskLevel(lv).value for lv in levels]))

        async with AsyncSession(self.engine) as session:
            rows = [dict(row._mapping) for row in await session.execute(query)]
            profiles = []
            for row in rows:
                factors = await session.execute(
                    select(risk_factors_table)
                    .where(risk_factors_table.c.subject_id == row["subject_id"])
                    .order_by(risk_factors_table.c.factor_id)
                )
                profiles.append(_profile_from_rows(row, [dict(f._mapping) for f in factors]))
            return profiles

    # Audit sink

    async def append(self, event: AssessmentEvent) -> None:
        async with AsyncSession(self.engine) as session:
            await session.execute(
                assessment_events_table.insert().values(
                    event_id=event.event_id,
                    subject_id=event.subject_id,
                    action=event.action,
                    identity_score=event.identity_score,
                    industry_score=event.industry_score,
                    network_score=event.network_score,
                    security_score=event.security_score,
                    aggregate_score=event.aggregate_score,
                    aggregate_level=event.aggregate_level.value,
                    web_intelligence_score=event.web_intelligence_score,
                    web_intelligence_confidence=event.web_intelligence_confidence,
                    sources=list(event.sources),
                    severity=event.severity.value,
                    created_at=event.timestamp,
                )
            )
            await session.commit()

    async def list_events(self, subject_id: str, limit: int = 20) -> list[AssessmentEvent]:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                select(assessment_events_table)
                .where(assessment_events_table.c.subject_id == subject_id)
                .order_by(assessment_events_table.c.created_at.desc())
                .limit(limit)
            )
            events = []
            for row in result:
                data = dict(row._mapping)
                data["timestamp"] = data.pop("created_at")
                events.append(AssessmentEvent.model_validate(data))
            return events
