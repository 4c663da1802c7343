"""
Ledger access for student fees and teacher salaries.

Both ledgers share one row shape; ``LedgerKind`` says which table, which
subject column and which subject table a call works against, so the status
toggle, lookups and summaries are written once.
"""
import datetime
import enum
import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.fee_models import LedgerStatus, StudentFee, TeacherSalary
from models.students import Student
from models.teachers import Teacher
from services.errors import LedgerRowNotFound, NothingToUpdate, SubjectNotFound
from services.periods import Period

logger = logging.getLogger(__name__)


class LedgerKind(str, enum.Enum):
    FEE = "fee"
    SALARY = "salary"

    @property
    def model(self):
        return StudentFee if self is LedgerKind.FEE else TeacherSalary

    @property
    def subject_model(self):
        return Student if self is LedgerKind.FEE else Teacher

    @property
    def subject_column(self):
        return getattr(self.model, self.model.subject_field)


def _utc_naive(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def get_row(db: Session, kind: LedgerKind, row_id: int):
    row = db.query(kind.model).filter(kind.model.id == row_id).first()
    if not row:
        raise LedgerRowNotFound(f"{kind.value.capitalize()} record {row_id} not found")
    return row


def find_row(db: Session, kind: LedgerKind, subject_id: int, period: Period):
    model = kind.model
    return db.query(model).filter(
        kind.subject_column == subject_id,
        model.month == period.month,
        model.year == period.year,
    ).first()


def list_rows(
    db: Session,
    kind: LedgerKind,
    subject_id: int | None = None,
    month: int | None = None,
    year: int | None = None,
    all_months: bool = False,
    today: datetime.date | None = None,
):
    """List ledger rows; with no month/year filter and no ``all_months`` only the current month is returned."""
    model = kind.model
    query = db.query(model)

    if subject_id is not None:
        query = query.filter(kind.subject_column == subject_id)
    if month is not None:
        query = query.filter(model.month == month)
    if year is not None:
        query = query.filter(model.year == year)

    if month is None and year is None and not all_months:
        current = Period.current(today)
        query = query.filter(model.month == current.month, model.year == current.year)

    return query.order_by(model.year, model.month, model.id).all()


def list_all_newest_first(db: Session, kind: LedgerKind):
    model = kind.model
    return db.query(model).order_by(model.year.desc(), model.month.desc(), model.id).all()


def ensure_subject(db: Session, kind: LedgerKind, subject_id: int):
    subject = db.query(kind.subject_model).filter(kind.subject_model.id == subject_id).first()
    if not subject:
        raise SubjectNotFound(f"{kind.subject_model.__name__} {subject_id} not found")
    return subject


def create_row_if_missing(db: Session, kind: LedgerKind, subject_id: int, period: Period, amount=0):
    """Return ``(row, created)``; an existing row for the period is returned untouched."""
    ensure_subject(db, kind, subject_id)

    existing = find_row(db, kind, subject_id, period)
    if existing:
        return existing, False

    row = kind.model(
        month=period.month,
        year=period.year,
        amount=Decimal(str(amount or 0)),
        status=LedgerStatus.UNPAID,
        paid_date=None,
    )
    setattr(row, kind.model.subject_field, subject_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row, True


def update_row(
    db: Session,
    kind: LedgerKind,
    row_id: int,
    amount=None,
    status: LedgerStatus | None = None,
    paid_date: datetime.datetime | None = None,
    now: datetime.datetime | None = None,
):
    """
    Fee/salary status toggle.

    - amount only: the amount changes, status is left alone
    - status=paid: stamps paid_date (given value or now)
    - status=unpaid: clears paid_date
    """
    if amount is None and status is None:
        raise NothingToUpdate()

    row = get_row(db, kind, row_id)

    if status is not None:
        status = LedgerStatus(status)
        row.status = status
        if status is LedgerStatus.PAID:
            row.paid_date = _utc_naive(paid_date) if paid_date else (now or datetime.datetime.utcnow())
        else:
            row.paid_date = None

    if amount is not None:
        row.amount = Decimal(str(amount))

    db.commit()
    db.refresh(row)
    logger.info("%s %s updated: status=%s amount=%s", kind.value, row.id, row.status.value, row.amount)
    return row


def toggle_current_salary(db: Session, teacher_id: int, amount=0, today: datetime.date | None = None,
                          now: datetime.datetime | None = None):
    """Flip the teacher's salary for the current month, creating it as paid when missing."""
    ensure_subject(db, LedgerKind.SALARY, teacher_id)
    period = Period.current(today)
    stamp = now or datetime.datetime.utcnow()

    row = find_row(db, LedgerKind.SALARY, teacher_id, period)
    if row:
        next_status = LedgerStatus.UNPAID if row.status is LedgerStatus.PAID else LedgerStatus.PAID
    else:
        next_status = LedgerStatus.PAID
        row = TeacherSalary(teacher_id=teacher_id, month=period.month, year=period.year)
        db.add(row)

    row.amount = Decimal(str(amount or 0))
    row.status = next_status
    row.paid_date = stamp if next_status is LedgerStatus.PAID else None

    db.commit()
    db.refresh(row)
    return row


def summarize(db: Session, kind: LedgerKind) -> dict:
    model = kind.model
    totals = dict(
        db.query(model.status, func.coalesce(func.sum(model.amount), 0))
        .group_by(model.status)
        .all()
    )
    paid = Decimal(str(totals.get(LedgerStatus.PAID, 0)))
    unpaid = Decimal(str(totals.get(LedgerStatus.UNPAID, 0)))
    return {"total": paid + unpaid, "paid": paid, "unpaid": unpaid}


def default_period(db: Session, kind: LedgerKind, subject_id: int, today: datetime.date | None = None) -> Period:
    """
    Month a payment form should open on: the oldest unpaid month before the
    current one, or the current month when everything earlier is paid.
    Query errors propagate to the caller.
    """
    model = kind.model
    current = Period.current(today)
    oldest = (
        db.query(model)
        .filter(
            kind.subject_column == subject_id,
            model.status == LedgerStatus.UNPAID,
            (model.year < current.year) | ((model.year == current.year) & (model.month < current.month)),
        )
        .order_by(model.year, model.month)
        .first()
    )
    if oldest:
        return Period.of(oldest.month, oldest.year)
    return current
