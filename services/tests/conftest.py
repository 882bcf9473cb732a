"""
Shared fixtures: both services run in-process behind httpx ASGITransport, the
check service's folio client is pointed at the folio service app, and every
store writes into the test's tmp_path.
"""
import os

os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("STORE_PATH", "/tmp/check-service-test-unused.json")
os.environ.setdefault("FOLIO_DB_PATH", "/tmp/folio-service-test-unused.json")
os.environ.setdefault("OPT_LOCK_MAX_RETRIES", "20")

import httpx
import pytest
import pytest_asyncio

from check_service.api.deps import get_check_store, get_folio_client
from check_service.clients.folio_client import FolioClient
from check_service.core.config import Settings, get_settings
from check_service.db.check_store import CheckStore
from check_service.db.snapshot import FileSnapshotBackend
from check_service.main import app as check_app
from folio_service.api.deps import get_folio_store
from folio_service.db.folio_store import FolioStore
from folio_service.main import app as folio_app

HOTEL_ID = "HOTEL1"


@pytest.fixture
def store(tmp_path) -> CheckStore:
    return CheckStore(FileSnapshotBackend(str(tmp_path / "checks.json")))


@pytest.fixture
def folio_store(tmp_path) -> FolioStore:
    return FolioStore(str(tmp_path / "opera.json"))


@pytest.fixture
def folio_service(folio_store):
    folio_app.dependency_overrides[get_folio_store] = lambda: folio_store
    yield folio_app
    folio_app.dependency_overrides.clear()


@pytest.fixture
def folio_client(folio_service) -> FolioClient:
    return FolioClient(
        base_url="http://folio-service",
        hotel_id=HOTEL_ID,
        transport=httpx.ASGITransport(app=folio_service),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(AUTO_POST=True, DEFAULT_TRANSACTION_CODE=None, REQUIRE_LOCATION_HEADERS=False)


@pytest.fixture
def check_service(store, folio_client, settings):
    check_app.dependency_overrides[get_check_store] = lambda: store
    check_app.dependency_overrides[get_folio_client] = lambda: folio_client
    check_app.dependency_overrides[get_settings] = lambda: settings
    yield check_app
    check_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(check_service):
    transport = httpx.ASGITransport(app=check_service)
    async with httpx.AsyncClient(transport=transport, base_url="http://check-service") as c:
        yield c


@pytest_asyncio.fixture
async def pms(folio_service):
    transport = httpx.ASGITransport(app=folio_service)
    async with httpx.AsyncClient(transport=transport, base_url="http://folio-service") as c:
        yield c


@pytest_asyncio.fixture
async def seeded_guest(pms):
    """Room 101 / Smith, in-house, reservation RES-555."""
    r = await pms.post(
        "/__seed/guest",
        json={
            "room": 101,
            "lastName": "Smith",
            "reservationId": "RES-555",
            "guestName": "Jordan Smith",
            "inHouse": True,
        },
    )
    assert r.status_code == 200, r.text
    return {"room": "101", "last_name": "Smith", "reservation_id": "RES-555"}
