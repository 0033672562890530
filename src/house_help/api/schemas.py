"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from house_help.calculators.salary import money
from house_help.ledger.schema import ShiftStatus
from house_help.services.share import SalarySlip


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
    code: str | None = None


# ============================================================================
# Ledger sync
# ============================================================================


class LedgerBlobResponse(BaseModel):
    """Stored ledger for the signed-in owner."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    data: dict[str, Any]
    updated_at: datetime


# ============================================================================
# Share links
# ============================================================================


class ShareLinkResponse(BaseModel):
    token: str
    url: str
    expires_at: datetime | None = None


class RevokeResponse(BaseModel):
    revoked: bool


# ============================================================================
# Salary slip
# ============================================================================


class AttendanceTotalsResponse(BaseModel):
    worked: int
    half: int
    absent: int
    off: int
    hours: float


class StatusDatesResponse(BaseModel):
    worked: list[str]
    half: list[str]
    off: list[str]
    absent: list[str]


class DeductionLine(BaseModel):
    id: str
    date_iso: str
    amount: int
    note: str | None = None


class SalaryBreakdownResponse(BaseModel):
    """Salary amounts rounded to whole currency units."""

    monthly_salary: int
    paid_off_allowance: int
    per_day: int
    half_day: int
    paid_off_count: int
    unpaid_off_count: int
    worked_amount: int
    half_amount: int
    off_amount: int
    gross_payable: int
    deductions_total: int
    net_payable: int


class SalarySlipResponse(BaseModel):
    worker_id: str
    worker_name: str
    month_key: str
    days_in_month: int
    details_until: str
    totals: AttendanceTotalsResponse
    dates: StatusDatesResponse
    deductions: list[DeductionLine]
    salary: SalaryBreakdownResponse

    @classmethod
    def from_slip(cls, slip: SalarySlip) -> SalarySlipResponse:
        salary = slip.salary
        return cls(
            worker_id=slip.worker_id,
            worker_name=slip.worker_name,
            month_key=slip.month_key,
            days_in_month=slip.days_in_month,
            details_until=slip.details_until,
            totals=AttendanceTotalsResponse(
                worked=slip.totals.worked,
                half=slip.totals.half,
                absent=slip.totals.absent,
                off=slip.totals.off,
                hours=float(slip.totals.hours),
            ),
            dates=StatusDatesResponse(
                worked=slip.dates[ShiftStatus.WORKED],
                half=slip.dates[ShiftStatus.HALF],
                off=slip.dates[ShiftStatus.OFF],
                absent=slip.dates[ShiftStatus.ABSENT],
            ),
            deductions=[
                DeductionLine(id=d.id, date_iso=d.date_iso, amount=money(d.amount), note=d.note)
                for d in slip.deductions
            ],
            salary=SalaryBreakdownResponse(
                monthly_salary=salary.monthly_salary,
                paid_off_allowance=salary.paid_off_allowance,
                per_day=money(salary.per_day),
                half_day=money(salary.half_day),
                paid_off_count=salary.paid_off_count,
                unpaid_off_count=salary.unpaid_off_count,
                worked_amount=money(salary.worked_amount),
                half_amount=money(salary.half_amount),
                off_amount=money(salary.off_amount),
                gross_payable=money(salary.gross_payable),
                deductions_total=money(salary.deductions_total),
                net_payable=money(salary.net_payable),
            ),
        )
