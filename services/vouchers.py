"""
Fee Voucher Generator
Monthly fee + arrears + late fines, stamped with a unique serial number
"""
import datetime
import logging
from decimal import Decimal

from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload

from config import settings
from models.fee_models import FeeVoucher, VoucherCounter
from models.students import Student
from services.arrears import arrears_breakdown
from services.errors import SubjectNotFound, VoucherNotFound
from services.ledgers import LedgerKind, find_row
from services.periods import Period

logger = logging.getLogger(__name__)

COUNTER_NAME = "fee_voucher"
ZERO = Decimal("0")


def compute_fine(today: datetime.date, period: Period, include_fine: bool,
                 fine_per_day: int = settings.fine_per_day,
                 due_day: int = settings.voucher_due_day) -> tuple[int, Decimal]:
    """Return ``(days_late, fines)``; nothing is charged on or before the due day."""
    if not include_fine:
        return 0, ZERO
    days_late = max(0, (today - period.due_date(due_day)).days)
    return days_late, Decimal(days_late * fine_per_day)


def ensure_counter(db: Session) -> VoucherCounter:
    """Create the serial counter row, starting from the highest serial already issued."""
    counter = db.query(VoucherCounter).filter(VoucherCounter.name == COUNTER_NAME).first()
    if not counter:
        highest = db.query(func.max(FeeVoucher.serial_number)).scalar() or 0
        counter = VoucherCounter(name=COUNTER_NAME, last_number=highest)
        db.add(counter)
        db.flush()
    return counter


def next_serial_number(db: Session) -> int:
    """
    Atomically take the next voucher serial.

    The increment happens in the database (``last_number = last_number + 1``),
    so two transactions can never be handed the same number; the row lock is
    held until the caller commits or rolls back.
    """
    result = db.execute(
        update(VoucherCounter)
        .where(VoucherCounter.name == COUNTER_NAME)
        .values(last_number=VoucherCounter.last_number + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        counter = ensure_counter(db)
        counter.last_number += 1
        db.flush()
        return counter.last_number

    return db.query(VoucherCounter.last_number).filter(VoucherCounter.name == COUNTER_NAME).scalar()


def has_voucher_for(db: Session, student_id: int, period: Period) -> bool:
    return db.query(FeeVoucher.id).filter(
        FeeVoucher.student_id == student_id,
        FeeVoucher.month == period.month,
        FeeVoucher.year == period.year,
    ).first() is not None


def issue_voucher(
    db: Session,
    student_id: int,
    include_fine: bool = False,
    remove_arrears: bool = False,
    today: datetime.date | None = None,
    period: Period | None = None,
    commit: bool = True,
) -> FeeVoucher:
    today = today or datetime.date.today()
    period = period or Period.current(today)

    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise SubjectNotFound(f"Student {student_id} not found")

    # 1. This month's fee
    current_row = find_row(db, LedgerKind.FEE, student_id, period)
    monthly_fee = Decimal(str(current_row.amount)) if current_row else ZERO

    # 2. Unpaid months before this one
    arrears, arrears_labels = (ZERO, []) if remove_arrears else arrears_breakdown(db, student_id, period)

    # 3. Late fine
    _, fines = compute_fine(today, period, include_fine)

    annual_charges = exam_fee = other_charges = ZERO
    total = monthly_fee + arrears + fines + annual_charges + exam_fee + other_charges

    voucher = FeeVoucher(
        serial_number=next_serial_number(db),
        student_id=student_id,
        month=period.month,
        year=period.year,
        issue_date=today,
        due_date=period.due_date(settings.voucher_due_day),
        monthly_fee=monthly_fee,
        arrears=arrears,
        arrears_months=", ".join(arrears_labels) or None,
        fines=fines,
        annual_charges=annual_charges,
        exam_fee=exam_fee,
        other_charges=other_charges,
        total_amount=total,
    )
    db.add(voucher)

    if commit:
        db.commit()
        db.refresh(voucher)
    else:
        db.flush()

    logger.info("Voucher #%s issued for student %s (%s): total=%s",
                voucher.serial_number, student_id, period, total)
    return voucher


def issue_vouchers(db: Session, student_ids, include_fine: bool = False, remove_arrears: bool = False,
                   today: datetime.date | None = None) -> list[FeeVoucher]:
    """Bulk print: one voucher per known student, consecutive serials; unknown students are skipped."""
    vouchers = []
    for student_id in student_ids:
        try:
            vouchers.append(issue_voucher(db, student_id, include_fine, remove_arrears, today))
        except SubjectNotFound as exc:
            db.rollback()
            logger.warning("Skipping voucher: %s", exc.message)
    return vouchers


def get_voucher(db: Session, serial_number: int) -> FeeVoucher:
    voucher = db.query(FeeVoucher).options(
        joinedload(FeeVoucher.student).joinedload(Student.class_val)
    ).filter(FeeVoucher.serial_number == serial_number).first()
    if not voucher:
        raise VoucherNotFound(f"Voucher {serial_number} not found")
    return voucher


def number_to_words(num):
    """Convert number to words (Indian format)"""
    ones = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
            "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
            "Seventeen", "Eighteen", "Nineteen"]
    tens = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

    def words(n):
        parts = []
        for size, name in ((10000000, "Crore"), (100000, "Lakh"), (1000, "Thousand")):
            if n >= size:
                parts.append(f"{words(n // size)} {name}")
                n %= size
        if n >= 100:
            parts.append(f"{ones[n // 100]} Hundred")
            n %= 100
        if n >= 20:
            parts.append(tens[n // 10])
            n %= 10
        if n > 0:
            parts.append(ones[n])
        return " ".join(parts)

    num = int(num)
    if num == 0:
        return "Zero Only"
    if num < 0:
        return "Minus " + number_to_words(-num)
    return words(num) + " Only"


def build_voucher_view(voucher: FeeVoucher) -> dict:
    """Printable view of a stored voucher, with student details and arrears months."""
    student = voucher.student
    period = Period.of(voucher.month, voucher.year)

    days_late = 0
    if voucher.fines and voucher.fines > 0:
        days_late = max(0, (voucher.issue_date - voucher.due_date).days)

    return {
        "serialNumber": voucher.serial_number,
        "studentId": voucher.student_id,
        "rollNumber": (student.roll_number if student else None) or "",
        "studentName": student.name if student else "",
        "fatherName": (student.guardian_name if student else None) or "",
        "className": student.class_val.name if student and student.class_val else "",
        "acNumber": student.ac_number if student else None,
        "month": period.month_name,
        "year": voucher.year,
        "issueDate": voucher.issue_date,
        "dueDate": voucher.due_date,
        "monthlyFee": voucher.monthly_fee,
        "arrears": voucher.arrears,
        "arrearsMonthsLabel": voucher.arrears_months,
        "fines": voucher.fines,
        "annualCharges": voucher.annual_charges,
        "examFee": voucher.exam_fee,
        "otherCharges": voucher.other_charges,
        "totalAmount": voucher.total_amount,
        "finePerDay": settings.fine_per_day,
        "daysLate": days_late,
        "amountInWords": number_to_words(voucher.total_amount or 0),
    }
