"""
Tests for how writes reach storage: failed saves must surface as errors, and
bursts of concurrent requests must all complete.
"""
import functools

import anyio
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from wishboard.main import create_app
from wishboard.stores import JsonBoardStore

NEW_ENTRY = {"userName": "Alex", "type": "WISH", "content": "Learn Rust", "year": 2026}


class UnwritableJsonStore(JsonBoardStore):
    """JSON store whose disk can be switched to refuse writes."""
    fail_writes = False

    def _write(self, doc):
        if self.fail_writes:
            raise OSError(28, "No space left on device")
        super()._write(doc)


def _burst(app, build_requests, seed=None):
    """Run `seed` sequentially, then every request from `build_requests` at once."""
    async def main():
        results = []
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                context = await seed(http) if seed else None

                async def send(method, url, kwargs):
                    results.append(await http.request(method, url, **kwargs))

                with anyio.fail_after(60):
                    async with anyio.create_task_group() as tg:
                        for method, url, kwargs in build_requests(context):
                            tg.start_soon(functools.partial(send, method, url, kwargs))
        return results

    return anyio.run(main)


# ---------------------------------------------------------------------------
# Failed saves
# ---------------------------------------------------------------------------

class TestFailedWritesJson:
    @pytest.fixture()
    def store(self, tmp_path):
        return UnwritableJsonStore(tmp_path / "db.json")

    def test_create_reports_500_and_stores_nothing(self, client, store):
        store.fail_writes = True
        r = client.post("/entries", json=NEW_ENTRY)
        assert r.status_code == 500
        body = r.json()
        assert body["success"] is False
        assert body["code"] == "STORAGE_ERROR"

        store.fail_writes = False
        assert client.get("/entries").json()["data"] == []
        assert client.get("/users").json()["data"] == []

    def test_failed_delete_keeps_entry(self, client, store, make_entry):
        created = make_entry()
        store.fail_writes = True
        r = client.delete(f"/entries/{created['id']}", params={"userName": "Alex"})
        assert r.status_code == 500

        store.fail_writes = False
        assert client.get(f"/entries/{created['id']}").status_code == 200

    def test_failed_comment_is_not_listed(self, client, store, make_entry):
        created = make_entry()
        store.fail_writes = True
        r = client.post(
            "/comments", json={"entryId": created["id"], "userName": "Sam", "content": "yay"}
        )
        assert r.status_code == 500

        store.fail_writes = False
        assert client.get("/comments", params={"entryId": created["id"]}).json()["data"] == []


class TestFailedWritesSql:
    @pytest.fixture()
    def backend(self):
        return "sql"

    @pytest.fixture()
    def broken_commit(self, monkeypatch):
        def commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
        return lambda: monkeypatch.setattr(Session, "commit", commit)

    def test_create_reports_500_and_stores_nothing(self, client, broken_commit, monkeypatch):
        broken_commit()
        r = client.post("/entries", json=NEW_ENTRY)
        assert r.status_code == 500
        assert r.json()["code"] == "STORAGE_ERROR"

        monkeypatch.undo()
        assert client.get("/entries").json()["data"] == []

    def test_failed_reaction_is_not_kept(self, client, make_entry, broken_commit, monkeypatch):
        created = make_entry()
        broken_commit()
        r = client.post(
            "/reactions", json={"entryId": created["id"], "userName": "Sam", "emoji": "🎉"}
        )
        assert r.status_code == 500

        monkeypatch.undo()
        assert client.get("/reactions", params={"entryId": created["id"]}).json()["data"] == []


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

class TestConcurrentRequests:
    def test_read_burst_larger_than_threadpool_completes(self, app, backend):
        async def seed(http):
            r = await http.post("/entries", json=NEW_ENTRY)
            assert r.status_code == 201

        results = _burst(app, lambda _: [("GET", "/entries", {})] * 120, seed=seed)

        assert len(results) == 120
        assert {r.status_code for r in results} == {200}
        assert all(len(r.json()["data"]) == 1 for r in results)


class TestConcurrentWritesJson:
    @pytest.fixture()
    def backend(self):
        return "json"

    def test_mixed_burst_keeps_every_write(self, app):
        async def seed(http):
            r = await http.post("/entries", json=NEW_ENTRY)
            return r.json()["data"]["id"]

        def requests(entry_id):
            reads = [("GET", "/entries", {})] * 80
            writes = [
                ("POST", "/comments",
                 {"json": {"entryId": entry_id, "userName": "Sam", "content": f"note {i}"}})
                for i in range(50)
            ]
            health = [("GET", "/health", {})] * 10
            return reads + writes + health

        results = _burst(app, requests, seed=seed)
        assert len(results) == 140
        assert sorted({r.status_code for r in results}) == [200, 201]

    def test_all_comments_persisted(self, settings, store, uploader):
        app = create_app(settings=settings, store=store, uploader=uploader)

        async def seed(http):
            r = await http.post("/entries", json=NEW_ENTRY)
            return r.json()["data"]["id"]

        entry_ids = []

        def requests(entry_id):
            entry_ids.append(entry_id)
            return [
                ("POST", "/comments",
                 {"json": {"entryId": entry_id, "userName": "Sam", "content": f"note {i}"}})
                for i in range(60)
            ]

        _burst(app, requests, seed=seed)

        with TestClient(create_app(settings=settings, store=store, uploader=uploader)) as c:
            comments = c.get("/comments", params={"entryId": entry_ids[0]}).json()["data"]
        assert len(comments) == 60


class TestHealthDown:
    @pytest.fixture()
    def backend(self):
        return "json"

    def test_unreadable_store_is_503_envelope(self, client, store):
        store.path.write_text("{broken")
        r = client.get("/health")
        assert r.status_code == 503
        body = r.json()
        assert body["success"] is False
        assert body["code"] == "STORE_UNREACHABLE"
