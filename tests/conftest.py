"""Общие фикстуры: SQLite в памяти вместо Postgres и каталог на httpx.MockTransport."""
import os

os.environ.setdefault("KAFKA_ENABLED", "false")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from checkout_service import models  # noqa: F401
from checkout_service.api.dependencies import get_catalog_client
from checkout_service.database import Base, get_db
from checkout_service.main import app
from checkout_service.services.catalog_client import CatalogClient

CUSTOMER_ID = "cust-001"
OTHER_CUSTOMER_ID = "cust-002"

LISTINGS = {
    "L1": {
        "id": "L1",
        "business_id": "V1",
        "title": "Sourdough loaf",
        "price": 10.00,
        "photo_url": '["https://img.test/l1.jpg", "https://img.test/l1-side.jpg"]',
    },
    "L2": {
        "id": "L2",
        "vendor_id": "V1",
        "title": "Croissant",
        "price": "5.00",
        "photo_url": "https://img.test/l2.jpg",
    },
    "L3": {
        "id": "L3",
        "vendor_id": "V2",
        "title": "Tamales",
        "price": 12.5,
        "photo_url": None,
    },
    "L4": {
        "id": "L4",
        "vendor_id": "V1",
        "title": "Free sample",
        "price": None,
        "photo_url": "",
    },
}

VENDORS = {
    "V1": {"id": "V1", "business_name": "Barrio Bakery", "city": "Austin"},
    "V2": {"id": "V2", "business_name": "Casa Tamal", "city": "Austin"},
}


def catalog_handler(request: httpx.Request) -> httpx.Response:
    parts = request.url.path.strip("/").split("/")
    if len(parts) != 2:
        return httpx.Response(404)

    kind, key = parts
    if key == "BROKEN":
        return httpx.Response(500, json={"error": "boom"})
    if key == "DOWN":
        raise httpx.ConnectError("catalog is down", request=request)

    source = LISTINGS if kind == "listings" else VENDORS if kind == "vendors" else {}
    if key not in source:
        return httpx.Response(404, json={"error": "not found"})
    return httpx.Response(200, json=source[key])


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite сам управляет транзакциями и ломает SAVEPOINT, отдаём это SQLAlchemy
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture()
def catalog_client():
    return CatalogClient(base_url="http://catalog.test", transport=httpx.MockTransport(catalog_handler))


class RecordingProducer:
    """Producer, который просто запоминает события"""

    def __init__(self):
        self.events = []

    async def publish_event(self, topic, event_type, payload, key=None):
        self.events.append({"topic": topic, "event_type": event_type, "payload": payload, "key": key})
        return True

    def topics(self):
        return [event["topic"] for event in self.events]


@pytest.fixture()
def producer():
    return RecordingProducer()


@pytest.fixture()
def client(db_session, catalog_client):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_client] = lambda: catalog_client

    yield TestClient(app, headers={"X-Customer-Id": CUSTOMER_ID})

    app.dependency_overrides.clear()
