import pytest
from fastapi.testclient import TestClient

from bookstore.auth import StaticTokenResolver, get_identity_resolver
from bookstore.catalog.schemas import BookCreate
from bookstore.catalog.store import InMemoryBookStore
from bookstore.main import app
from bookstore.models import CallerIdentity, Role
from bookstore.storage import get_store


ADMIN_TOKEN = "admin-token-123"
USER_TOKEN = "user-token-456"


def book_payload(**overrides):
    payload = {
        "title": "Dune",
        "description": "Spice, sandworms and politics.",
        "price": 9.99,
        "stock": 4,
        "category": "Science Fiction",
        "author": "Frank Herbert",
        "rating": 4.5,
    }
    payload.update(overrides)
    return payload


def add_books(store, count, prefix="Book", **fields):
    """Insert ``count`` books titled ``<prefix> 01``, ``<prefix> 02``..."""
    books = []
    for n in range(1, count + 1):
        data = book_payload(title=f"{prefix} {n:02d}", **fields)
        books.append(store.insert(BookCreate(**data)))
    return books


@pytest.fixture
def store():
    return InMemoryBookStore()


@pytest.fixture
def admin():
    return CallerIdentity(user_id="alice", role=Role.ADMIN)


@pytest.fixture
def user():
    return CallerIdentity(user_id="bob", role=Role.STANDARD)


@pytest.fixture
def client(store, admin, user):
    resolver = StaticTokenResolver({ADMIN_TOKEN: admin, USER_TOKEN: user})
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}
