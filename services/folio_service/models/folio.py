"""
Folio Service — Guest and folio records

[CONFIG DATA]        guests: seeded, keyed by "room|surname" (surname lower-cased)
[TRANSACTIONAL DATA] folios: append-only posting lines per reservation
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def guest_key(room: str, surname: str) -> str:
    return f"{str(room).strip()}|{surname.strip().lower()}"


class Guest(CamelModel):
    reservation_id: str
    folio_window: int = 1
    guest_name: str
    room_number: str
    in_house: bool = True


class FolioLine(CamelModel):
    posting_id: str
    trx_code: str
    amount: float
    hotel_id: str
    posted_at: datetime


class Folio(CamelModel):
    reservation_id: str
    window: int = 1
    lines: list[FolioLine] = Field(default_factory=list)


class PmsSnapshot(CamelModel):
    guests: dict[str, Guest] = Field(default_factory=dict)
    folios: dict[str, Folio] = Field(default_factory=dict)
