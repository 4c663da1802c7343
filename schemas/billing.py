from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from models.fee_models import LedgerStatus

# 1. Ledger rows (student_fees / teacher_salary)
class FeeOut(BaseModel):
    id: int
    student_id: int
    month: int
    year: int
    amount: float
    status: LedgerStatus
    paid_date: Optional[datetime] = None

    class Config:
        from_attributes = True

class SalaryOut(BaseModel):
    id: int
    teacher_id: int
    month: int
    year: int
    amount: float
    status: LedgerStatus
    paid_date: Optional[datetime] = None

    class Config:
        from_attributes = True

# 2. Status toggle body for PUT /api/fees and PUT /api/salaries
class LedgerUpdate(BaseModel):
    id: int
    amount: Optional[float] = Field(default=None, ge=0)
    status: Optional[LedgerStatus] = None
    paid_date: Optional[datetime] = None

class FeeCreate(BaseModel):
    student_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    amount: float = Field(default=0, ge=0)

class SalaryToggleRequest(BaseModel):
    teacherId: int
    amount: float = Field(default=0, ge=0)

class LedgerSummaryOut(BaseModel):
    total: float
    paid: float
    unpaid: float

# 3. Vouchers
class VoucherIssueRequest(BaseModel):
    studentId: int
    includeFine: bool = False
    removeArrears: bool = False

class BulkVoucherRequest(BaseModel):
    studentIds: List[int] = Field(min_length=1)
    includeFine: bool = False
    removeArrears: bool = False

class VoucherOut(BaseModel):
    serialNumber: int
    studentId: int
    rollNumber: str
    studentName: str
    fatherName: str
    className: str
    acNumber: Optional[str] = None
    month: str
    year: int
    issueDate: date
    dueDate: date
    monthlyFee: float
    arrears: float
    arrearsMonthsLabel: Optional[str] = None
    fines: float
    annualCharges: float
    examFee: float
    otherCharges: float
    totalAmount: float
    finePerDay: int
    daysLate: int
    amountInWords: str

# 4. Cron run report
class BillingRunOut(BaseModel):
    success: bool = True
    message: str
    studentsProcessed: int
    teachersProcessed: int
    month: int
    year: int
    feesCreated: int
    salariesCreated: int
    vouchersIssued: int
    voucherFailures: List[dict] = []
    feesExpired: Optional[int] = None
