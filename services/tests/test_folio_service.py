"""
Folio service (PMS emulator): reservation lookup, charge posting, folio
retrieval with fetch instructions, and seeding.
"""
import pytest

from folio_service.core.config import Settings, get_settings

HOTEL = "/rsv/v1/hotels/HOTEL1"
CASHIER = "/csh/v1/hotels/HOTEL1"


@pytest.mark.asyncio
async def test_lookup_returns_reservation(pms, seeded_guest):
    r = await pms.get(f"{HOTEL}/reservations", params={"roomId": "101", "surname": "smith"})
    assert r.status_code == 200
    body = r.json()
    assert body["reservationId"] == "RES-555"
    assert body["guestName"] == "Jordan Smith"
    assert body["roomNumber"] == "101"
    assert body["inHouse"] is True
    assert body["hotelId"] == "HOTEL1"


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{}, {"roomId": "101"}, {"surname": "Smith"}])
async def test_lookup_requires_room_and_surname(pms, params):
    r = await pms.get(f"{HOTEL}/reservations", params=params)
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_lookup_unknown_or_departed_guest_is_404(pms, seeded_guest):
    r = await pms.get(f"{HOTEL}/reservations", params={"roomId": "101", "surname": "Jones"})
    assert r.status_code == 404

    await pms.post("/__seed/guest", json={"room": 7, "lastName": "Left", "reservationId": "RES-7", "inHouse": False})
    r = await pms.get(f"{HOTEL}/reservations", params={"roomId": "7", "surname": "Left"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_post_charge_appends_folio_line(pms, seeded_guest, folio_store):
    r = await pms.post(f"{CASHIER}/reservations/RES-555/charges", json={"amount": 12.5, "transactionCode": "FNB"})
    assert r.status_code == 201
    body = r.json()
    assert body["postingId"].startswith("POST-")
    assert body["transactionCode"] == "FNB"
    assert body["amount"] == 12.5

    folio = await folio_store.get_folio("RES-555")
    assert [line.posting_id for line in folio.lines] == [body["postingId"]]


@pytest.mark.asyncio
async def test_post_charge_defaults_transaction_code(pms, seeded_guest):
    r = await pms.post(f"{CASHIER}/reservations/RES-555/charges", json={"amount": 1})
    assert r.status_code == 201
    assert r.json()["transactionCode"] == "ROOM_SERVICE"


@pytest.mark.asyncio
async def test_post_charge_unknown_reservation_is_404(pms, seeded_guest):
    r = await pms.post(f"{CASHIER}/reservations/RES-404/charges", json={"amount": 1})
    assert r.status_code == 404
    assert r.json() == {"error": "Reservation not found"}


@pytest.mark.asyncio
async def test_post_charge_rejects_negative_amount(pms, seeded_guest):
    r = await pms.post(f"{CASHIER}/reservations/RES-555/charges", json={"amount": -1})
    assert r.status_code == 422
    assert r.json()["error"] == "invalid request body"


@pytest.mark.asyncio
async def test_folio_fetch_instructions(pms, seeded_guest):
    for amount, code in [(10, "ROOM_SERVICE"), (5.25, "BAR"), (0, "PAYCC")]:
        await pms.post(f"{CASHIER}/reservations/RES-555/charges", json={"amount": amount, "transactionCode": code})

    r = await pms.get(f"{CASHIER}/reservations/RES-555/folios")
    body = r.json()
    assert len(body["lines"]) == 3
    assert "payments" not in body
    assert "transactionCodes" not in body

    r = await pms.get(
        f"{CASHIER}/reservations/RES-555/folios",
        params=[("fetchInstructions", "Totalbalance,Payment"), ("fetchInstructions", "Postings")],
    )
    body = r.json()
    assert body["totalBalance"] == 15.25
    assert [line["trxCode"] for line in body["payments"]] == ["PAYCC"]
    assert [line["trxCode"] for line in body["postings"]] == ["ROOM_SERVICE", "BAR"]

    r = await pms.get(
        f"{CASHIER}/reservations/RES-555/folios",
        params={"fetchInstructions": "Transactioncodes"},
    )
    assert r.json()["transactionCodes"] == ["ROOM_SERVICE", "BAR", "PAYCC"]


@pytest.mark.asyncio
async def test_folio_for_unknown_reservation_is_empty(pms):
    r = await pms.get(f"{CASHIER}/reservations/RES-NONE/folios")
    assert r.status_code == 200
    assert r.json()["lines"] == []


@pytest.mark.asyncio
async def test_seed_can_be_disabled(pms, folio_service):
    folio_service.dependency_overrides[get_settings] = lambda: Settings(SEED_ENABLED=False)
    r = await pms.post("/__seed/guest", json={"room": 1, "lastName": "X"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_seed_replaces_guest_for_same_room_and_surname(pms, seeded_guest):
    await pms.post("/__seed/guest", json={"room": "101", "lastName": "SMITH", "reservationId": "RES-556"})
    r = await pms.get(f"{HOTEL}/reservations", params={"roomId": "101", "surname": "Smith"})
    assert r.json()["reservationId"] == "RES-556"


@pytest.mark.asyncio
async def test_health(pms):
    r = await pms.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
