import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from database import ensure_indexes
from ratings_client import RatingsApp
from schemas import Store as StoreSchema, UserForm, UserRole

PASSWORD = "Secret@123"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_db(monkeypatch):
    database = mongomock.MongoClient(tz_aware=True)["store_ratings_test"]
    ensure_indexes(database)
    monkeypatch.setattr(main, "db", database)
    return database


@pytest.fixture
def client(mock_db):
    return TestClient(main.app)


@pytest.fixture
def make_user(mock_db):
    def _make(name, email, role=UserRole.USER, password=PASSWORD):
        form = UserForm(name=name, email=email, address="12 Market Street, Pune", password=password, role=role)
        return str(main.insert_user(form, role)["_id"])
    return _make


@pytest.fixture
def make_store(mock_db):
    def _make(owner_id, name="Patil Electronics Megastore", email="patil@shops.com", address="MG Road, Pune"):
        doc = StoreSchema(owner_id=owner_id, name=name, email=email, address=address).model_dump()
        return str(mock_db["store"].insert_one(doc).inserted_id)
    return _make


def token_for(user_id):
    return main.create_access_token({"sub": user_id})


@pytest.fixture
def token():
    return token_for


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        return {"Authorization": f"Bearer {token_for(user_id)}"}
    return _headers


@pytest.fixture
def admin_id(make_user):
    return make_user("Adaline Administrator Prime", "admin@shops.com", UserRole.ADMIN)


@pytest.fixture
def owner_id(make_user):
    return make_user("Oliver Owner Of Electronics", "owner@shops.com", UserRole.OWNER)


@pytest.fixture
def user_id(make_user):
    return make_user("Ursula Regular Customer", "ursula@mail.com")


@pytest.fixture
async def ratings_app(mock_db):
    transport = httpx.ASGITransport(app=main.app)
    async with RatingsApp("http://testserver", transport=transport) as app:
        yield app
