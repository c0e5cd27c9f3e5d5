"""Shared fixtures for the family tree test suite."""
import os

# Set env vars BEFORE any app imports
os.environ.setdefault("COOKIE_SECRET", "test-secret-key-for-testing")

import pytest
import kuzu
from fastapi.testclient import TestClient

from familytree.db import init_schema, get_conn
from familytree import auth, crud, storage
from familytree.tree_layout.models import Member, Relationship, RelType


# Ensure auth module uses test cookie secret
auth.COOKIE_SECRET = os.environ["COOKIE_SECRET"]


# ── Layout record helpers ──

def make_member(mid, first=None, last="Doe", **kwargs):
    return Member(id=mid, first_name=first or mid.capitalize(), last_name=last, **kwargs)


def parent_child(rid, parent, child):
    return Relationship(id=rid, source_id=parent, target_id=child, type=RelType.PARENT_CHILD)


def spouse(rid, a, b):
    return Relationship(id=rid, source_id=a, target_id=b, type=RelType.SPOUSE)


# ── Database fixtures ──

@pytest.fixture
def db_path(tmp_path):
    """Temp directory for a fresh KuzuDB."""
    return tmp_path / "test_db"


@pytest.fixture
def db(db_path):
    """Initialized KuzuDB with full schema."""
    database = kuzu.Database(str(db_path))
    init_schema(database)
    yield database
    database.close()


@pytest.fixture
def conn(db):
    """KuzuDB connection for unit tests."""
    return kuzu.Connection(db)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(storage, "UPLOAD_DIR", path)
    return path


# ── User fixtures ──

@pytest.fixture
def user_alice(conn):
    return auth.create_user(conn, "alice@example.com", "Alice", "password123")


# ── Member fixtures ──

@pytest.fixture
def member_grandpa(conn):
    return crud.create_member(conn, "Walter", "Doe", birth_date="1920-03-01",
                              death_date="1990-07-12", bio="The patriarch")


@pytest.fixture
def member_dad(conn):
    return crud.create_member(conn, "John", "Doe", birth_date="1950-05-05")


@pytest.fixture
def member_mom(conn):
    return crud.create_member(conn, "Mary", "Smith")


@pytest.fixture
def member_child(conn):
    return crud.create_member(conn, "Jack", "Doe")


@pytest.fixture
def family_graph(conn, member_grandpa, member_dad, member_mom, member_child):
    """grandpa->dad, dad->child, mom->child, dad<->mom (spouse)."""
    crud.create_relationship(conn, member_grandpa["id"], member_dad["id"], "PARENT_CHILD")
    crud.create_relationship(conn, member_dad["id"], member_child["id"], "PARENT_CHILD")
    crud.create_relationship(conn, member_mom["id"], member_child["id"], "PARENT_CHILD")
    crud.create_relationship(conn, member_dad["id"], member_mom["id"], "SPOUSE")
    return {
        "grandpa": member_grandpa,
        "dad": member_dad,
        "mom": member_mom,
        "child": member_child,
    }


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at test DB."""
    from familytree.main import app

    def override_get_conn():
        c = kuzu.Connection(db)
        try:
            yield c
        finally:
            pass

    app.dependency_overrides[get_conn] = override_get_conn
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    """Unauthenticated TestClient."""
    return TestClient(app_with_db, raise_server_exceptions=False)


@pytest.fixture
def auth_client(app_with_db, db):
    """TestClient carrying a valid session cookie."""
    c = kuzu.Connection(db)
    user = auth.create_user(c, "editor@test.com", "Editor", "password123")
    token = auth.create_session_token(user["id"])
    tc = TestClient(app_with_db, raise_server_exceptions=False, cookies={"session": token})
    tc._test_user = user
    return tc
