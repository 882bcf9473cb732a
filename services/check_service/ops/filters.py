"""
Check Service — Check list filters

Query parameters are parsed into `FilterValue`s before any check is looked at:

  None           → filter absent, no restriction
  Valid(v)       → filter present with a usable value
  Unsatisfiable  → filter present but its value is unusable; matches nothing

Invalid input therefore yields an empty list, never an error. All present
filters are ANDed. Results are ordered by (created time, check id).
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, Iterable, TypeVar, Union

from check_service.models.check import Check, CheckStatus

T = TypeVar("T")

INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class _Unsatisfiable:
    def __repr__(self) -> str:
        return "Unsatisfiable"


Unsatisfiable = _Unsatisfiable()

FilterValue = Union[Valid[T], _Unsatisfiable]


@dataclass(frozen=True)
class CheckCriteria:
    employee_ref: FilterValue[int] | None = None
    check_numbers: FilterValue[frozenset[int]] | None = None
    exclude_closed: bool = False
    order_type_ref: FilterValue[int] | None = None
    since_time: FilterValue[datetime] | None = None
    table_name: str | None = None


def _parse_int(raw: str | None) -> FilterValue[int] | None:
    if raw is None or raw == "":
        return None
    text = raw.strip()
    if not INTEGER.fullmatch(text):
        return Unsatisfiable
    return Valid(int(text))


def _parse_int_set(raw: list[str] | None) -> FilterValue[frozenset[int]] | None:
    raw = [r for r in (raw or []) if r != ""]
    if not raw:
        return None
    numbers = set()
    for entry in raw:
        parsed = _parse_int(entry)
        if isinstance(parsed, Valid):
            numbers.add(parsed.value)
    return Valid(frozenset(numbers)) if numbers else Unsatisfiable


def _parse_time(raw: str | None) -> FilterValue[datetime] | None:
    if raw is None or raw == "":
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        return Unsatisfiable
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return Valid(parsed)


def parse_criteria(
    check_employee_ref: str | None = None,
    check_numbers: list[str] | None = None,
    include_closed: str | None = None,
    order_type_ref: str | None = None,
    since_time: str | None = None,
    table_name: str | None = None,
) -> CheckCriteria:
    return CheckCriteria(
        employee_ref=_parse_int(check_employee_ref),
        check_numbers=_parse_int_set(check_numbers),
        # only the literal "false" filters; anything else keeps closed checks
        exclude_closed=include_closed == "false",
        order_type_ref=_parse_int(order_type_ref),
        since_time=_parse_time(since_time),
        table_name=table_name or None,
    )


def _satisfiable(criteria: CheckCriteria) -> bool:
    return all(
        value is not Unsatisfiable
        for value in (
            criteria.employee_ref,
            criteria.check_numbers,
            criteria.order_type_ref,
            criteria.since_time,
        )
    )


def matches(check: Check, criteria: CheckCriteria) -> bool:
    if isinstance(criteria.employee_ref, Valid) and check.employee_ref != criteria.employee_ref.value:
        return False
    if isinstance(criteria.check_numbers, Valid) and check.check_number not in criteria.check_numbers.value:
        return False
    if criteria.exclude_closed and check.status == CheckStatus.CLOSED:
        return False
    if isinstance(criteria.order_type_ref, Valid) and check.order_type_ref != criteria.order_type_ref.value:
        return False
    if isinstance(criteria.since_time, Valid) and check.created_time < criteria.since_time.value:
        return False
    if criteria.table_name is not None and check.table_name != criteria.table_name:
        return False
    return True


def list_checks(checks: Iterable[Check], criteria: CheckCriteria) -> list[Check]:
    if not _satisfiable(criteria):
        return []
    selected = [c for c in checks if matches(c, criteria)]
    return sorted(selected, key=lambda c: (c.created_time, c.check_id))
