from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.core.enums import FineType, PaymentMode
from app.core.schemas import CamelModel


# --- Fee types ---
class FeeTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None


class FeeTypeUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class FeeTypeResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    code: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# --- Fee groups ---
class FeeGroupLineIn(CamelModel):
    fee_type_id: UUID
    amount: Decimal = Field(..., ge=0)
    due_date: Optional[date] = None
    fine_type: FineType = FineType.NONE
    fine_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    fine_amount: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_fine(self) -> "FeeGroupLineIn":
        if self.fine_type == FineType.PERCENTAGE and self.fine_percent is None:
            raise ValueError("finePercent is required for percentage fines")
        if self.fine_type == FineType.FIXED and self.fine_amount is None:
            raise ValueError("fineAmount is required for fixed fines")
        return self


class FeeGroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    lines: List[FeeGroupLineIn] = Field(default_factory=list)


class FeeGroupUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    lines: Optional[List[FeeGroupLineIn]] = Field(None, description="Replaces all lines when given")


class FeeGroupLineResponse(CamelModel):
    id: UUID
    fee_type_id: UUID
    fee_type_name: Optional[str] = None
    fee_type_code: Optional[str] = None
    amount: Decimal
    due_date: Optional[date] = None
    fine_type: str
    fine_percent: Optional[Decimal] = None
    fine_amount: Optional[Decimal] = None


class FeeGroupResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    description: Optional[str] = None
    is_active: bool
    total_amount: Decimal
    lines: List[FeeGroupLineResponse]
    created_at: datetime
    updated_at: datetime


# --- Assignment ---
class FeeAssignRequest(CamelModel):
    class_id: UUID
    fee_group_id: UUID
    session_id: Optional[UUID] = Field(None, description="Defaults to the active session")
    assign_to_students: bool = Field(True, description="Materialize for every student enrolled in the class")


class FeesMasterResponse(CamelModel):
    id: UUID
    session_id: UUID
    session_name: Optional[str] = None
    class_id: UUID
    class_name: Optional[str] = None
    fee_group_id: UUID
    fee_group_name: Optional[str] = None
    total_amount: Decimal = Decimal("0")
    student_count: int = 0
    created_at: datetime


class FeeAssignResult(CamelModel):
    fees_master: FeesMasterResponse
    students_assigned: int


# --- Collection ---
class PaymentCreate(CamelModel):
    student_id: UUID
    student_fees_master_id: UUID
    amount: Decimal = Field(..., description="Negative amounts record an offsetting correction")
    discount: Decimal = Field(Decimal("0"), ge=0)
    fine: Decimal = Field(Decimal("0"), ge=0)
    payment_mode: PaymentMode = PaymentMode.CASH
    payment_date: Optional[datetime] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    note: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError("Amount cannot be zero")
        return v


class PaymentResponse(CamelModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    admission_no: Optional[str] = None
    student_fees_master_id: UUID
    fee_group_name: Optional[str] = None
    amount: Decimal
    discount: Decimal
    fine: Decimal
    payment_mode: str
    payment_date: datetime
    transaction_id: Optional[str] = None
    note: Optional[str] = None
    collected_by: Optional[UUID] = None
    created_at: datetime


# --- Due report ---
class LedgerFigures(CamelModel):
    total_assigned: Decimal
    total_paid: Decimal
    total_due: Decimal
    total_fine: Decimal
    grand_total: Decimal


class DueFeeLine(CamelModel):
    """One fee type line of an assigned group, with the fine it carries as of the report date."""

    fee_group_type_id: UUID
    fee_type_id: UUID
    fee_type_name: Optional[str] = None
    fee_type_code: Optional[str] = None
    amount: Decimal
    due_date: Optional[date] = None
    fine_type: str
    fine_percent: Optional[Decimal] = None
    fine_amount: Optional[Decimal] = None
    is_overdue: bool
    fine: Decimal


class DueFeeGroup(LedgerFigures):
    student_fees_master_id: UUID
    fee_group_id: UUID
    fee_group_name: str
    lines: List[DueFeeLine] = Field(default_factory=list)


class DueSession(LedgerFigures):
    session_id: UUID
    session_name: str
    class_name: Optional[str] = None
    section_name: Optional[str] = None
    fee_groups: List[DueFeeGroup]


class StudentDue(CamelModel):
    student_id: UUID
    admission_no: str
    student_name: str
    sessions: List[DueSession]
    summary: LedgerFigures


class DueReportSummary(CamelModel):
    total_students: int
    total_due_amount: Decimal


class DueReport(CamelModel):
    as_of: date
    students: List[StudentDue]
    summary: DueReportSummary
