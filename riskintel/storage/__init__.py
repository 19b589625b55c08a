from riskintel.storage.base import AuditSink, DocumentStore, LedgerMirror, ProfileStore, SubjectDirectory
from riskintel.storage.ledger import HttpLedgerMirror, LoggingLedgerMirror
from riskintel.storage.memory import (
    InMemoryAuditSink,
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemorySubjectDirectory,
)
from riskintel.storage.postgres import PostgresStore
from riskintel.storage.redis_cache import RedisSummaryCache

__all__ = [
    "AuditSink",
    "DocumentStore",
    "HttpLedgerMirror",
    "InMemoryAuditSink",
    "InMemoryDocumentStore",
    "InMemoryProfileStore",
    "InMemorySubjectDirectory",
    "LedgerMirror",
    "LoggingLedgerMirror",
    "PostgresStore",
    "ProfileStore",
    "RedisSummaryCache",
    "SubjectDirectory",
]
