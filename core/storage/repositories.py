"""Record repositories for analyses, threat scans and chat messages.

Two implementations share one interface: an in-memory store used in
development and tests, and a PostgreSQL store on an asyncpg pool. PostgreSQL
rows keep the lookup columns (id, user_id, status, timestamps) next to the
full record as JSONB.

Every read takes the caller's ``user_id``; a record owned by someone else is
indistinguishable from a missing one.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from app.models.analysis import DocumentAnalysis
from app.models.chat import ChatMessage
from app.models.threat import ThreatScan


class AnalysisRepository(ABC):
    @abstractmethod
    async def create(self, record: DocumentAnalysis) -> DocumentAnalysis: ...

    @abstractmethod
    async def get(self, analysis_id: UUID, user_id: str | None = None) -> DocumentAnalysis | None:
        """Fetch a record; ``user_id=None`` is reserved for the background processor."""

    @abstractmethod
    async def update(self, record: DocumentAnalysis) -> DocumentAnalysis: ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[DocumentAnalysis]:
        """Newest first."""


class ThreatScanRepository(ABC):
    @abstractmethod
    async def create(self, scan: ThreatScan) -> ThreatScan: ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[ThreatScan]:
        """Newest first."""


class ChatMessageRepository(ABC):
    @abstractmethod
    async def append(self, messages: list[ChatMessage]) -> list[ChatMessage]: ...

    @abstractmethod
    async def list_for_document(self, user_id: str, document_id: UUID) -> list[ChatMessage]:
        """Oldest first."""


@dataclass
class Store:
    """The repositories a request handler needs."""
    analyses: AnalysisRepository
    scans: ThreatScanRepository
    messages: ChatMessageRepository


# In-memory implementation

class InMemoryAnalysisRepository(AnalysisRepository):
    def __init__(self) -> None:
        self._records: dict[UUID, DocumentAnalysis] = {}

    async def create(self, record: DocumentAnalysis) -> DocumentAnalysis:
        self._records[record.id] = record
        return record

    async def get(self, analysis_id: UUID, user_id: str | None = None) -> DocumentAnalysis | None:
        record = self._records.get(analysis_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record

    async def update(self, record: DocumentAnalysis) -> DocumentAnalysis:
        if record.id not in self._records:
            raise KeyError(f"Unknown analysis {record.id}")
        self._records[record.id] = record
        return record

    async def list_for_user(self, user_id: str) -> list[DocumentAnalysis]:
        records = [r for r in self._records.values() if r.user_id == user_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)


class InMemoryThreatScanRepository(ThreatScanRepository):
    def __init__(self) -> None:
        self._scans: list[ThreatScan] = []

    async def create(self, scan: ThreatScan) -> ThreatScan:
        self._scans.append(scan)
        return scan

    async def list_for_user(self, user_id: str) -> list[ThreatScan]:
        return [s for s in reversed(self._scans) if s.user_id == user_id]


class InMemoryChatMessageRepository(ChatMessageRepository):
    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    async def append(self, messages: list[ChatMessage]) -> list[ChatMessage]:
        self._messages.extend(messages)
        return messages

    async def list_for_document(self, user_id: str, document_id: UUID) -> list[ChatMessage]:
        return [
            m for m in self._messages
            if m.user_id == user_id and m.document_id == document_id
        ]


def build_memory_store() -> Store:
    return Store(
        analyses=InMemoryAnalysisRepository(),
        scans=InMemoryThreatScanRepository(),
        messages=InMemoryChatMessageRepository(),
    )


# PostgreSQL implementation

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS document_analyses (
        id UUID PRIMARY KEY,
        user_id VARCHAR(255) NOT NULL,
        status VARCHAR(20) NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_document_analyses_user_id ON document_analyses(user_id)",
    """
    CREATE TABLE IF NOT EXISTS threat_scans (
        id UUID PRIMARY KEY,
        user_id VARCHAR(255) NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_threat_scans_user_id ON threat_scans(user_id)",
    """
    CREATE TABLE IF NOT EXISTS chat_messages (
        id UUID PRIMARY KEY,
        user_id VARCHAR(255) NOT NULL,
        document_id UUID NOT NULL,
        data JSONB NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_chat_messages_document_id ON chat_messages(document_id)",
)


async def ensure_tables(pool: Any) -> None:
    """Ensure required database tables exist."""
    async with pool.acquire() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)


class PostgresAnalysisRepository(AnalysisRepository):
    def __init__(self, pool: Any) -> None:
        self.pool = pool

    async def create(self, record: DocumentAnalysis) -> DocumentAnalysis:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO document_analyses (id, user_id, status, data, created_at, updated_at)
                VALUES ($1, $2, $3, $4::jsonb, $5, $6)
                """,
                record.id,
                record.user_id,
                record.status.value,
                record.model_dump_json(),
                record.created_at,
                record.updated_at,
            )
        return record

    async def get(self, analysis_id: UUID, user_id: str | None = None) -> DocumentAnalysis | None:
        query = "SELECT data FROM document_analyses WHERE id = $1"
        params: list[Any] = [analysis_id]
        if user_id is not None:
            query += " AND user_id = $2"
            params.append(user_id)

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)
        return DocumentAnalysis.model_validate_json(row["data"]) if row else None

    async def update(self, record: DocumentAnalysis) -> DocumentAnalysis:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE document_analyses
                SET status = $2, data = $3::jsonb, updated_at = $4
                WHERE id = $1
                """,
                record.id,
                record.status.value,
                record.model_dump_json(),
                record.updated_at,
            )
        if result.endswith(" 0"):
            raise KeyError(f"Unknown analysis {record.id}")
        return record

    async def list_for_user(self, user_id: str) -> list[DocumentAnalysis]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT data FROM document_analyses WHERE user_id = $1 ORDER BY created_at DESC",
                user_id,
            )
        return [DocumentAnalysis.model_validate_json(row["data"]) for row in rows]


class PostgresThreatScanRepository(ThreatScanRepository):
    def __init__(self, pool: Any) -> None:
        self.pool = pool

    async def create(self, scan: ThreatScan) -> ThreatScan:
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO threat_scans (id, user_id, data, created_at)
                VALUES ($1, $2, $3::jsonb, $4)
                """,
                scan.id,
                scan.user_id,
                scan.model_dump_json(),
                scan.created_at,
            )
        return scan

    async def list_for_user(self, user_id: str) -> list[ThreatScan]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT data FROM threat_scans WHERE user_id = $1 ORDER BY created_at DESC",
                user_id,
            )
        return [ThreatScan.model_validate_json(row["data"]) for row in rows]


class PostgresChatMessageRepository(ChatMessageRepository):
    def __init__(self, pool: Any) -> None:
        self.pool = pool

    async def append(self, messages: list[ChatMessage]) -> list[ChatMessage]:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    """
                    INSERT INTO chat_messages (id, user_id, document_id, data, created_at)
                    VALUES ($1, $2, $3, $4::jsonb, $5)
                    """,
                    [
                        (m.id, m.user_id, m.document_id, m.model_dump_json(), m.created_at)
                        for m in messages
                    ],
                )
        return messages

    async def list_for_document(self, user_id: str, document_id: UUID) -> list[ChatMessage]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT data FROM chat_messages
                WHERE user_id = $1 AND document_id = $2
                ORDER BY created_at
                """,
                user_id,
                document_id,
            )
        return [ChatMessage.model_validate_json(row["data"]) for row in rows]


def build_postgres_store(pool: Any) -> Store:
    return Store(
        analyses=PostgresAnalysisRepository(pool),
        scans=PostgresThreatScanRepository(pool),
        messages=PostgresChatMessageRepository(pool),
    )
