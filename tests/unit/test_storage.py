"""Unit tests for repositories and the blob store."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from app.models.analysis import AnalysisResult, AnalysisStatus, DocumentAnalysis
from app.models.chat import ChatMessage, ChatRole
from app.models.threat import ScanType, ThreatScan
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import (
    PostgresAnalysisRepository,
    SCHEMA_STATEMENTS,
    build_memory_store,
    ensure_tables,
)


def make_record(user_id: str = "user-1", **overrides) -> DocumentAnalysis:
    defaults = {
        "user_id": user_id,
        "filename": "lease.pdf",
        "file_type": "application/pdf",
        "file_size": 2048,
        "file_path": f"{user_id}/1_lease.pdf",
    }
    defaults.update(overrides)
    return DocumentAnalysis(**defaults)


class FakePool:
    """Minimal stand-in for an asyncpg pool."""

    def __init__(self, conn: AsyncMock) -> None:
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


class TestInMemoryAnalyses:
    @pytest.mark.asyncio
    async def test_owner_scoped_reads(self) -> None:
        """Test that another user's record reads as missing."""
        store = build_memory_store()
        record = await store.analyses.create(make_record("alice"))

        assert await store.analyses.get(record.id, "alice") == record
        assert await store.analyses.get(record.id, "mallory") is None
        assert await store.analyses.get(record.id) == record

    @pytest.mark.asyncio
    async def test_list_newest_first(self) -> None:
        store = build_memory_store()
        now = datetime.now(timezone.utc)
        older = await store.analyses.create(make_record(created_at=now - timedelta(minutes=5)))
        newer = await store.analyses.create(make_record(created_at=now))
        await store.analyses.create(make_record("someone-else"))

        assert [r.id for r in await store.analyses.list_for_user("user-1")] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_update_replaces_record(self) -> None:
        store = build_memory_store()
        record = await store.analyses.create(make_record())

        await store.analyses.update(record.complete(AnalysisResult(risk_score=75), 1200))

        stored = await store.analyses.get(record.id)
        assert stored.status == AnalysisStatus.COMPLETED
        assert stored.risk_score == 75
        assert stored.processing_time_ms == 1200

    @pytest.mark.asyncio
    async def test_update_unknown_record(self) -> None:
        with pytest.raises(KeyError):
            await build_memory_store().analyses.update(make_record())


class TestInMemoryScansAndMessages:
    @pytest.mark.asyncio
    async def test_scans_owner_scoped(self) -> None:
        store = build_memory_store()
        await store.scans.create(ThreatScan(user_id="alice", scan_type=ScanType.PHISHING, content="a"))
        await store.scans.create(ThreatScan(user_id="bob", scan_type=ScanType.PHISHING, content="b"))
        await store.scans.create(ThreatScan(user_id="alice", scan_type=ScanType.URL_ANALYSIS, content="c"))

        assert [s.content for s in await store.scans.list_for_user("alice")] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_messages_by_document(self) -> None:
        store = build_memory_store()
        record = make_record()
        await store.messages.append([
            ChatMessage(user_id="user-1", document_id=record.id, role=ChatRole.USER, content="Q"),
            ChatMessage(user_id="user-1", document_id=record.id, role=ChatRole.ASSISTANT, content="A"),
        ])

        messages = await store.messages.list_for_document("user-1", record.id)
        assert [m.role for m in messages] == [ChatRole.USER, ChatRole.ASSISTANT]
        assert await store.messages.list_for_document("other", record.id) == []


class TestPostgresAnalyses:
    """Tests for the asyncpg repository against a mocked connection."""

    @pytest.mark.asyncio
    async def test_ensure_tables(self) -> None:
        conn = AsyncMock()
        await ensure_tables(FakePool(conn))
        assert conn.execute.await_count == len(SCHEMA_STATEMENTS)

    @pytest.mark.asyncio
    async def test_create_stores_jsonb(self) -> None:
        conn = AsyncMock()
        record = make_record()

        await PostgresAnalysisRepository(FakePool(conn)).create(record)

        args = conn.execute.await_args.args
        assert "INSERT INTO document_analyses" in args[0]
        assert args[1:4] == (record.id, "user-1", "processing")
        assert DocumentAnalysis.model_validate_json(args[4]).model_dump() == record.model_dump()

    @pytest.mark.asyncio
    async def test_get_filters_by_owner(self) -> None:
        conn = AsyncMock()
        record = make_record()
        conn.fetchrow.return_value = {"data": record.model_dump_json()}

        fetched = await PostgresAnalysisRepository(FakePool(conn)).get(record.id, "user-1")

        assert fetched.model_dump() == record.model_dump()
        query, *params = conn.fetchrow.await_args.args
        assert "user_id = $2" in query
        assert params == [record.id, "user-1"]

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        conn = AsyncMock()
        conn.fetchrow.return_value = None
        assert await PostgresAnalysisRepository(FakePool(conn)).get(make_record().id) is None

    @pytest.mark.asyncio
    async def test_update_missing_row(self) -> None:
        conn = AsyncMock()
        conn.execute.return_value = "UPDATE 0"
        with pytest.raises(KeyError):
            await PostgresAnalysisRepository(FakePool(conn)).update(make_record())


class TestLocalBlobStore:
    def test_save_read_delete(self, tmp_path: Path) -> None:
        blobs = LocalBlobStore(tmp_path)

        path = blobs.save("user-1", "my lease.pdf", b"%PDF")

        assert path.startswith("user-1/")
        assert path.endswith("_my_lease.pdf")
        assert blobs.read(path) == b"%PDF"
        blobs.delete(path)
        assert not blobs.exists(path)
        blobs.delete(path)  # missing file is fine

    def test_unsafe_names_are_contained(self, tmp_path: Path) -> None:
        blobs = LocalBlobStore(tmp_path / "uploads")

        path = blobs.save("../../etc", "../passwd", b"x")

        assert (tmp_path / "uploads" / path).is_file()
        assert ".." not in path

    def test_traversal_rejected(self, tmp_path: Path) -> None:
        blobs = LocalBlobStore(tmp_path / "uploads")
        with pytest.raises(ValueError):
            blobs.read("../secret.txt")
