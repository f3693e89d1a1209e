"""Unit tests for the snapshot-backed document store.

The store is async; each test drives its own event loop with `asyncio.run`
so no async test plugin is required.
"""

from __future__ import annotations

import asyncio
import json
import stat
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from wildhorizons.core.errors import (
    MalformedInputError,
    PersistenceError,
    StoreClosedError,
    StoreCorruptError,
)
from wildhorizons.core.store import DocumentStore, SnapshotFile


def _append_all(store: DocumentStore, drafts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    async def run() -> list[dict[str, Any]]:
        async with store:
            return [await store.append(draft) for draft in drafts]

    return asyncio.run(run())


def _load(store: DocumentStore) -> list[dict[str, Any]]:
    return asyncio.run(store.load())


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "sightings.json"


# ------------------------------- Bootstrap -----------------------------------


def test_load_missing_file_returns_empty(log_path: Path) -> None:
    assert _load(DocumentStore(log_path)) == []
    assert not log_path.exists()


@pytest.mark.parametrize("content", ["", "   \n", "{not json", '{"a": 1}', "[1, 2]", '[{"a": 1}, 3]'])
def test_load_unusable_file_returns_empty(log_path: Path, content: str) -> None:
    log_path.parent.mkdir(parents=True)
    log_path.write_text(content, encoding="utf-8")
    assert _load(DocumentStore(log_path)) == []


def test_load_returns_records_in_file_order(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True)
    records = [{"uuid": "a", "n": 1}, {"uuid": "b", "n": 2}]
    log_path.write_text(json.dumps(records), encoding="utf-8")
    assert _load(DocumentStore(log_path)) == records


# ------------------------------- Append ---------------------------------------


def test_round_trip_appends_draft_with_new_uuid(log_path: Path) -> None:
    store = DocumentStore(log_path)
    first, second = _append_all(store, [{"title": "Red fox"}, {"title": "Otter", "seen": True}])

    snapshot = _load(store)
    assert snapshot == [first, second]
    last = dict(snapshot[-1])
    uuid = last.pop("uuid")
    assert isinstance(uuid, str) and uuid
    assert last == {"title": "Otter", "seen": True}
    assert snapshot[0]["uuid"] != uuid


def test_append_creates_parent_directory_and_pretty_prints(log_path: Path) -> None:
    _append_all(DocumentStore(log_path, indent=2), [{"title": "Badger"}])

    text = log_path.read_text(encoding="utf-8")
    assert text.startswith("[\n  {\n")
    assert text.endswith("]\n")
    assert json.loads(text)[0]["title"] == "Badger"


def test_append_preserves_non_ascii_text(log_path: Path) -> None:
    _append_all(DocumentStore(log_path), [{"location": "Białowieża"}])
    assert "Białowieża" in log_path.read_text(encoding="utf-8")


def test_append_does_not_mutate_draft_and_replaces_supplied_uuid(log_path: Path) -> None:
    draft: dict[str, Any] = {"title": "Heron", "uuid": "client-chosen", "details": [{"a": "b"}]}
    (record,) = _append_all(DocumentStore(log_path, id_factory=lambda: "server-id"), [draft])

    assert record["uuid"] == "server-id"
    assert draft == {"title": "Heron", "uuid": "client-chosen", "details": [{"a": "b"}]}
    record["details"].append({"c": "d"})
    assert draft["details"] == [{"a": "b"}]


def test_append_rejects_non_mapping_draft(log_path: Path) -> None:
    async def run() -> None:
        async with DocumentStore(log_path) as store:
            await store.append(["not", "a", "record"])  # type: ignore[arg-type]

    with pytest.raises(MalformedInputError):
        asyncio.run(run())


def test_append_on_empty_file_bootstraps(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True)
    log_path.write_text("", encoding="utf-8")
    _append_all(DocumentStore(log_path), [{"title": "Wren"}])
    assert len(_load(DocumentStore(log_path))) == 1


def test_concurrent_appends_do_not_lose_updates(log_path: Path) -> None:
    """20 interleaved appends against an empty store yield 20 distinct records."""

    async def run() -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        async with DocumentStore(log_path) as store:
            results = await asyncio.gather(*(store.append({"n": i}) for i in range(20)))
            return list(results), await store.load()

    results, snapshot = asyncio.run(run())

    assert len(snapshot) == 20
    assert len({record["uuid"] for record in snapshot}) == 20
    assert sorted(record["n"] for record in snapshot) == list(range(20))
    assert {r["uuid"] for r in results} == {r["uuid"] for r in snapshot}


def test_colliding_identifier_is_redrawn(log_path: Path) -> None:
    ids: Iterator[str] = iter(["dup", "dup", "", "fresh"])
    store = DocumentStore(log_path, id_factory=lambda: next(ids))

    first, second = _append_all(store, [{"n": 1}, {"n": 2}])

    assert first["uuid"] == "dup"
    assert second["uuid"] == "fresh"


def test_unusable_identifier_factory_fails_without_writing(log_path: Path) -> None:
    store = DocumentStore(log_path, id_factory=lambda: "same")
    _append_all(store, [{"n": 1}])

    with pytest.raises(PersistenceError):
        _append_all(DocumentStore(log_path, id_factory=lambda: "same"), [{"n": 2}])
    assert len(_load(store)) == 1


# ------------------------------- Failures -------------------------------------


def test_append_refuses_to_overwrite_corrupt_snapshot(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True)
    log_path.write_text('[{"uuid": "a"}', encoding="utf-8")

    with pytest.raises(StoreCorruptError):
        _append_all(DocumentStore(log_path), [{"title": "Lynx"}])

    assert log_path.read_text(encoding="utf-8") == '[{"uuid": "a"}'


def test_write_failure_propagates_and_keeps_previous_snapshot(
    log_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = DocumentStore(log_path)
    _append_all(store, [{"title": "Kestrel"}])
    before = log_path.read_text(encoding="utf-8")

    def boom(src: Any, dst: Any) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("wildhorizons.core.store.snapshot.os.replace", boom)

    with pytest.raises(PersistenceError, match="disk full"):
        _append_all(DocumentStore(log_path), [{"title": "Buzzard"}])

    assert log_path.read_text(encoding="utf-8") == before
    assert list(log_path.parent.glob("*.tmp")) == []


def test_unserializable_record_is_a_persistence_error(log_path: Path) -> None:
    with pytest.raises(PersistenceError):
        _append_all(DocumentStore(log_path), [{"when": object()}])
    assert _load(DocumentStore(log_path)) == []


# ------------------------------- Lifecycle ------------------------------------


def test_append_requires_open_store(log_path: Path) -> None:
    store = DocumentStore(log_path)
    with pytest.raises(StoreClosedError):
        asyncio.run(store.append({"title": "Stoat"}))


def test_closed_store_rejects_writes_but_serves_reads(log_path: Path) -> None:
    store = DocumentStore(log_path)
    _append_all(store, [{"title": "Owl"}])  # context manager closes on exit

    assert not store.is_open
    with pytest.raises(StoreClosedError):
        asyncio.run(store.append({"title": "Bat"}))
    assert [r["title"] for r in _load(store)] == ["Owl"]


def test_read_only_store_rejects_append(tmp_path: Path) -> None:
    catalog = tmp_path / "catalog.json"
    catalog.write_text('[{"name": "Serengeti"}]', encoding="utf-8")
    store = DocumentStore(catalog, read_only=True)

    with pytest.raises(PersistenceError, match="read-only"):
        _append_all(store, [{"name": "Nowhere"}])
    assert _load(store) == [{"name": "Serengeti"}]


def test_snapshot_file_strict_read_reports_corruption(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    path.write_text('"just a string"', encoding="utf-8")
    with pytest.raises(StoreCorruptError):
        SnapshotFile(path).read()


def test_hand_edited_unhashable_uuid_does_not_break_append(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True)
    log_path.write_text('[{"uuid": ["not", "a", "string"]}, {"uuid": {"x": 1}}]', encoding="utf-8")

    (record,) = _append_all(DocumentStore(log_path, id_factory=lambda: "fresh"), [{"n": 1}])

    assert record["uuid"] == "fresh"
    assert len(_load(DocumentStore(log_path))) == 3


def test_rewrite_keeps_file_permissions(log_path: Path) -> None:
    store = DocumentStore(log_path)
    _append_all(store, [{"title": "Curlew"}])
    log_path.chmod(0o644)

    _append_all(DocumentStore(log_path), [{"title": "Lapwing"}])

    assert stat.S_IMODE(log_path.stat().st_mode) == 0o644
    assert [r["title"] for r in _load(store)] == ["Curlew", "Lapwing"]


# ------------------------------- Cancellation ---------------------------------


def test_cancelled_append_does_not_clobber_the_next_one(
    log_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """An append abandoned mid-write still finishes before the next append reads."""
    original_write = SnapshotFile.write
    calls: list[int] = []

    def slow_first_write(self: SnapshotFile, snapshot: list[dict[str, Any]]) -> None:
        calls.append(len(snapshot))
        if len(calls) == 1:
            time.sleep(0.3)
        original_write(self, snapshot)

    monkeypatch.setattr(SnapshotFile, "write", slow_first_write)

    async def run() -> tuple[dict[str, Any], list[dict[str, Any]]]:
        async with DocumentStore(log_path) as store:
            first = asyncio.create_task(store.append({"n": 1}))
            await asyncio.sleep(0.05)
            first.cancel()
            with pytest.raises(asyncio.CancelledError):
                await first

            second = await store.append({"n": 2})
            return second, await store.load()

    second, snapshot = asyncio.run(run())

    assert [record["n"] for record in snapshot] == [1, 2]
    assert len({record["uuid"] for record in snapshot}) == 2
    assert snapshot[-1] == second
    assert calls == [1, 2]
