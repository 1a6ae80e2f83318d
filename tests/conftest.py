"""
Test fixtures

- in-memory SQLite (StaticPool) in place of the configured database
- LocalBlobStore on tmp_path in place of the configured blob store
- users with bearer tokens
"""
import json
import os
import tempfile

# Set testing environment BEFORE any app imports
_TMP_DIR = tempfile.mkdtemp(prefix="mehndi-album-test-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-chars"
os.environ["ADMIN_EMAIL"] = "admin@mehndi.app"
os.environ["ADMIN_PASSWORD"] = "admin-secret"
os.environ["OPENAI_API_KEY"] = ""
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.models.user import User
from app.services.storage_service import LocalBlobStore, StorageError, get_blob_store
from main import app

ADMIN = {"email": "admin@mehndi.app", "password": "admin-secret"}
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FlakyBlobStore(LocalBlobStore):
    """LocalBlobStore that fails on demand"""

    def __init__(self, base_dir: str, public_base_url: str):
        super().__init__(base_dir, public_base_url)
        self.fail_upload = False
        self.fail_destroy_ids: set[str] = set()
        self.destroyed: list[str] = []

    def upload(self, content, folder, key, content_type):
        if self.fail_upload:
            raise StorageError("upload unavailable")
        return super().upload(content, folder, key, content_type)

    def destroy(self, public_id):
        if public_id in self.fail_destroy_ids:
            raise StorageError("destroy unavailable")
        super().destroy(public_id)
        self.destroyed.append(public_id)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=lambda obj: json.dumps(obj, ensure_ascii=False),
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store(tmp_path):
    return FlakyBlobStore(str(tmp_path / "blobs"), "/uploads")


@pytest.fixture
def client(session_factory, blob_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user directly in the database"""
    counter = {"n": 0}

    def _make(name: str | None = None, email: str | None = None, password: str = "password123"):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@mehndi.app",
            hashed_password=hash_password(password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(make_user):
    return make_user(name="Asha", email="asha@mehndi.app")


@pytest.fixture
def other_user(make_user):
    return make_user(name="Meera", email="meera@mehndi.app")


@pytest.fixture
def headers(user):
    return auth_headers(user)


@pytest.fixture
def upload(client):
    """Upload a photo through the API and return the JSON body"""

    def _upload(headers: dict, **form):
        filename = form.pop("filename", "design.png")
        data = {key: str(value).lower() if isinstance(value, bool) else str(value) for key, value in form.items()}
        response = client.post(
            "/api/v1/photos/upload",
            headers=headers,
            files={"file": (filename, PNG_BYTES, "image/png")},
            data=data,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _upload
