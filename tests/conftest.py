"""
Shared pytest fixtures.

Every test gets a fresh store in a temporary directory. Board tests run
against both backends (SQLite through SQLAlchemy, and the JSON file) so the
two stay interchangeable. Uploads go to an in-memory fake S3 client.
"""
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from wishboard.core.config import Settings
from wishboard.main import create_app
from wishboard.services.uploads import ObjectStoreUploader
from wishboard.stores import JsonBoardStore, SqlBoardStore


class FakeS3Client:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.fail:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
            )
        self.objects[(Bucket, Key)] = (Body, ContentType)
        return {"ETag": '"fake"'}


def _make_store(backend: str, tmp_path):
    if backend == "sql":
        return SqlBoardStore(f"sqlite:///{tmp_path / 'board.db'}", create_tables=True)
    return JsonBoardStore(tmp_path / "db.json")


@pytest.fixture(params=["sql", "json"])
def backend(request):
    return request.param


@pytest.fixture()
def store(backend, tmp_path):
    return _make_store(backend, tmp_path)


@pytest.fixture()
def s3():
    return FakeS3Client()


@pytest.fixture()
def uploader(s3):
    return ObjectStoreUploader(
        bucket="photos",
        prefix="memories",
        public_base_url="https://cdn.example.com/photos",
        max_bytes=1024,
        client=s3,
    )


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        APP_ENV="test",
        LOG_LEVEL="WARNING",
        DATABASE_URL=f"sqlite:///{tmp_path / 'unused.db'}",
        JSON_STORE_PATH=str(tmp_path / "unused.json"),
    )


@pytest.fixture()
def app(settings, store, uploader):
    return create_app(settings=settings, store=store, uploader=uploader)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_entry(client):
    """POST /entries with sensible defaults; returns the `data` payload."""
    def _make(user="Alex", type="WISH", content="Learn Rust", year=2026, **extra):
        payload = {"userName": user, "type": type, "content": content, "year": year, **extra}
        r = client.post("/entries", json=payload)
        assert r.status_code == 201, r.text
        return r.json()["data"]
    return _make


@pytest.fixture()
def failing_s3():
    return FakeS3Client(fail=True)


@pytest.fixture()
def client_for(settings, store):
    """Build a TestClient around a custom uploader; use as a context manager."""
    def _build(custom_uploader):
        return TestClient(create_app(settings=settings, store=store, uploader=custom_uploader))
    return _build
