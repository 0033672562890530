"""Persisted ledger document schema.

The ledger is stored and synced as one JSON document::

    {"version": 3, "workers": [...], "entries": [...], "monthLocks": [...],
     "salaryConfigs": [...], "deductions": [...]}

Readers of an older document only backfill structure: missing or malformed
collections become empty and ``version`` is set to ``CURRENT_VERSION``.
Field semantics are never migrated.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from house_help.ledger.dates import to_iso_date

logger = logging.getLogger(__name__)

CURRENT_VERSION = 3


class ShiftStatus(str, Enum):
    """Attendance status of one worker on one day."""

    WORKED = "WORKED"
    ABSENT = "ABSENT"
    HALF = "HALF"
    OFF = "OFF"


_STATUS_ALIASES: dict[str, ShiftStatus] = {
    "worked": ShiftStatus.WORKED,
    "work": ShiftStatus.WORKED,
    "present": ShiftStatus.WORKED,
    "p": ShiftStatus.WORKED,
    "full": ShiftStatus.WORKED,
    "half": ShiftStatus.HALF,
    "halfday": ShiftStatus.HALF,
    "h": ShiftStatus.HALF,
    "off": ShiftStatus.OFF,
    "leave": ShiftStatus.OFF,
    "holiday": ShiftStatus.OFF,
    "absent": ShiftStatus.ABSENT,
    "a": ShiftStatus.ABSENT,
}


def parse_status(raw: Any) -> ShiftStatus | None:
    """Map a stored status (current or legacy spelling) to ShiftStatus."""
    if isinstance(raw, ShiftStatus):
        return raw
    if not isinstance(raw, str):
        return None
    return _STATUS_ALIASES.get(raw.strip().lower())


def _coerce_day(value: Any) -> Any:
    # Legacy documents stored either an ISO string or epoch milliseconds.
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return to_iso_date(datetime.fromtimestamp(value / 1000).date())
    if isinstance(value, str) and len(value) >= 10:
        return value[:10]
    return value


class LedgerRecord(BaseModel):
    """Base for every record kept inside the ledger document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Worker(LedgerRecord):
    id: str
    name: str
    default_shift_label: str | None = None
    created_at: int = 0
    updated_at: int = 0


class ShiftEntry(LedgerRecord):
    id: str
    worker_id: str
    date_iso: str = Field(alias="dateISO", pattern=r"^\d{4}-\d{2}-\d{2}$")
    status: ShiftStatus
    hours: Union[int, float, None] = None
    note: str | None = None
    created_at: int = 0
    updated_at: int = 0

    @model_validator(mode="before")
    @classmethod
    def _legacy_date_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "dateISO" in data or "date_iso" in data:
            return data
        data = dict(data)
        for key in ("dayISO", "isoDate", "date"):
            if key in data:
                data["dateISO"] = data.pop(key)
                break
        return data

    @field_validator("date_iso", mode="before")
    @classmethod
    def _normalize_day(cls, value: Any) -> Any:
        return _coerce_day(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> ShiftStatus:
        status = parse_status(value)
        if status is None:
            raise ValueError(f"unknown shift status {value!r}")
        return status

    @property
    def month_key(self) -> str:
        return self.date_iso[:7]


class MonthLock(LedgerRecord):
    id: str
    worker_id: str
    month_key: str
    locked: bool = False
    locked_at: int | None = None
    locked_by: str | None = None


class SalaryConfig(LedgerRecord):
    id: str
    worker_id: str
    month_key: str
    monthly_salary: Union[int, float] = 0
    paid_off_allowance: Union[int, float] = 0
    updated_at: int = 0

    @model_validator(mode="before")
    @classmethod
    def _legacy_amount_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "monthlySalary" not in data and "monthly_salary" not in data and "salary" in data:
            data["monthlySalary"] = data.pop("salary")
        if "paidOffAllowance" not in data and "paid_off_allowance" not in data:
            for key in ("paidOff", "offAllowance", "paidOffDays"):
                if key in data:
                    data["paidOffAllowance"] = data.pop(key)
                    break
        return data


class Deduction(LedgerRecord):
    id: str
    worker_id: str
    month_key: str
    date_iso: str = Field(alias="dateISO")
    amount: Union[int, float]
    note: str | None = None
    created_at: int = 0
    updated_at: int = 0


class Ledger(BaseModel):
    """All workers and their records for one owner."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = CURRENT_VERSION
    workers: list[Worker] = Field(default_factory=list)
    entries: list[ShiftEntry] = Field(default_factory=list)
    month_locks: list[MonthLock] = Field(default_factory=list, alias="monthLocks")
    salary_configs: list[SalaryConfig] = Field(default_factory=list, alias="salaryConfigs")
    deductions: list[Deduction] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "workers": [w.to_document() for w in self.workers],
            "entries": [e.to_document() for e in self.entries],
            "monthLocks": [m.to_document() for m in self.month_locks],
            "salaryConfigs": [s.to_document() for s in self.salary_configs],
            "deductions": [d.to_document() for d in self.deductions],
        }

    def serialize(self) -> str:
        """Compact JSON text; equal ledgers serialize to identical text."""
        return json.dumps(self.to_document(), ensure_ascii=False, separators=(",", ":"))


# (field name, document key, record model)
_COLLECTIONS: list[tuple[str, str, type[LedgerRecord]]] = [
    ("workers", "workers", Worker),
    ("entries", "entries", ShiftEntry),
    ("month_locks", "monthLocks", MonthLock),
    ("salary_configs", "salaryConfigs", SalaryConfig),
    ("deductions", "deductions", Deduction),
]


def _parse_items(model: type[LedgerRecord], key: str, items: list[Any]) -> list[Any]:
    parsed = []
    for item in items:
        if isinstance(item, model):
            parsed.append(item)
            continue
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed %s record (%d validation errors)",
                key,
                exc.error_count(),
            )
    return parsed


def normalize_ledger(raw: Any) -> Ledger:
    """Coerce any decoded document into a current-version Ledger.

    Never raises: anything that is not a mapping becomes an empty ledger.
    """
    if isinstance(raw, Ledger):
        raw = raw.to_document()
    if not isinstance(raw, dict):
        return Ledger()

    collections: dict[str, list[Any]] = {}
    for field_name, key, model in _COLLECTIONS:
        items = raw.get(key)
        if items is None:
            items = raw.get(field_name)
        collections[field_name] = _parse_items(model, key, items) if isinstance(items, list) else []

    return Ledger(version=CURRENT_VERSION, **collections)


def parse_ledger_json(raw: str | bytes | None) -> Ledger:
    """Decode persisted bytes; malformed JSON degrades to an empty ledger."""
    if not raw:
        return Ledger()
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("Persisted ledger is not valid JSON; starting from an empty ledger")
        return Ledger()
    return normalize_ledger(decoded)
