"""
Check Service — Checks API

  POST /checks                      create            201
  GET  /checks?{filters}            list              200
  GET  /checks/{id}                 fetch             200 | 404
  POST /checks/{id}/items           add items         200 | 404 | 409
  POST /checks/{id}/tenders         room-charge tender 202 | 400 | 404 | 409 | 502 | 500
  GET  /checks/{id}/printed-lines   guest-check print 200 | 404
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from check_service.api.deps import get_check_store, get_folio_client
from check_service.clients.folio_client import FolioClient
from check_service.core.config import Settings, get_settings
from check_service.db.check_store import CheckStore
from check_service.models.check import Check
from check_service.ops.filters import list_checks, parse_criteria
from check_service.ops.printing import render_check
from check_service.ops.settlement import SettlementOrchestrator
from check_service.schemas.check import (
    AddItemsRequest,
    CreateCheckRequest,
    PrintedLines,
    SettlementReceipt,
    TenderRequest,
)

router = APIRouter(prefix="/checks", tags=["checks"])


@router.post("", response_model=Check, status_code=status.HTTP_201_CREATED)
async def create_check(payload: CreateCheckRequest, store: CheckStore = Depends(get_check_store)):
    """Open a new check. Id, number and creation time are assigned here."""
    return await store.create(
        table_name=payload.table_name,
        employee_ref=payload.employee_ref,
        order_type_ref=payload.order_type_ref,
        check_name=payload.check_name,
        guest_count=payload.guest_count,
        items=[(i.sku, i.qty) for i in payload.items],
    )


@router.get("", response_model=list[Check])
async def list_all_checks(
    check_employee_ref: str | None = Query(None, alias="checkEmployeeRef"),
    check_numbers: list[str] | None = Query(None, alias="checkNumbers"),
    include_closed: str | None = Query(None, alias="includeClosed"),
    order_type_ref: str | None = Query(None, alias="orderTypeRef"),
    since_time: str | None = Query(None, alias="sinceTime"),
    table_name: str | None = Query(None, alias="tableName"),
    store: CheckStore = Depends(get_check_store),
):
    """
    List checks. Filters are ANDed; an unusable filter value (e.g. a
    non-numeric employee ref) makes the result empty instead of failing.
    """
    criteria = parse_criteria(
        check_employee_ref=check_employee_ref,
        check_numbers=check_numbers,
        include_closed=include_closed,
        order_type_ref=order_type_ref,
        since_time=since_time,
        table_name=table_name,
    )
    return list_checks(await store.list(), criteria)


@router.get("/{check_id}", response_model=Check)
async def get_check(check_id: str, store: CheckStore = Depends(get_check_store)):
    return await store.get(check_id)


@router.post("/{check_id}/items", response_model=Check)
async def add_items(
    check_id: str,
    payload: AddItemsRequest,
    store: CheckStore = Depends(get_check_store),
):
    """Append items (priced from the catalog now) and recompute totals."""
    return await store.append_items(check_id, [(i.sku, i.qty) for i in payload.items])


@router.post(
    "/{check_id}/tenders",
    response_model=SettlementReceipt,
    status_code=status.HTTP_202_ACCEPTED,
)
async def tender_check(
    check_id: str,
    request: Request,
    payload: Any = Body(None),
    store: CheckStore = Depends(get_check_store),
    folio: FolioClient = Depends(get_folio_client),
    settings: Settings = Depends(get_settings),
):
    """Settle the check to a guest room and close it."""
    location = getattr(request.state, "location", None)
    if location is not None and location.loc_ref:
        folio = folio.for_hotel(location.loc_ref)

    orchestrator = SettlementOrchestrator(
        store,
        folio,
        auto_post=settings.AUTO_POST,
        default_transaction_code=settings.DEFAULT_TRANSACTION_CODE,
    )
    return await orchestrator.tender(check_id, TenderRequest.from_body(payload))


@router.get("/{check_id}/printed-lines", response_model=PrintedLines)
async def printed_lines(check_id: str, store: CheckStore = Depends(get_check_store)):
    check = await store.get(check_id)
    return PrintedLines(check_id=check.check_id, lines=render_check(check))
