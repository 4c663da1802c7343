"""
Monthly Billing Roller

Runs once at the start of each month (triggered from the cron endpoint):
1. makes sure every student has a fee row and every teacher a salary row for
   the month, carrying forward last month's amount
2. issues the month's fee voucher for every student
3. resets paid fees whose month has lapsed

Ledger rows are inserted with ON CONFLICT DO NOTHING on (subject, month, year),
so running the job twice for the same month never duplicates or overwrites
a row. Vouchers are issued one student per transaction and are best-effort.
"""
import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.fee_models import LedgerStatus
from models.students import Student
from models.teachers import Teacher
from services.expiration import expire_paid_rows
from services.ledgers import LedgerKind, find_row
from services.periods import Period
from services.vouchers import has_voucher_for, issue_voucher

logger = logging.getLogger(__name__)

# Keeps each INSERT well under SQLite's bound-parameter limit
BATCH_SIZE = 500


@dataclass
class BillingRunResult:
    month: int
    year: int
    students_processed: int = 0
    teachers_processed: int = 0
    fees_created: int = 0
    salaries_created: int = 0
    vouchers_issued: int = 0
    voucher_failures: list = field(default_factory=list)
    fees_expired: int | None = 0


def previous_amounts(db: Session, kind: LedgerKind, period: Period) -> dict:
    """``{subject_id: amount}`` for every row of the month before ``period``."""
    model = kind.model
    prior = period.previous()
    rows = db.query(kind.subject_column, model.amount).filter(
        model.month == prior.month,
        model.year == prior.year,
    ).all()
    return {subject_id: amount for subject_id, amount in rows}


def build_candidate_rows(kind: LedgerKind, subject_ids, period: Period, carry: dict,
                         now: datetime.datetime) -> list[dict]:
    subject_field = kind.model.subject_field
    return [
        {
            subject_field: subject_id,
            "month": period.month,
            "year": period.year,
            "amount": Decimal(str(carry.get(subject_id) or 0)),
            "status": LedgerStatus.UNPAID,
            "paid_date": None,
            "created_at": now,
            "updated_at": now,
        }
        for subject_id in subject_ids
    ]


def insert_ignoring_duplicates(db: Session, kind: LedgerKind, rows: list[dict]) -> int:
    """Insert ledger rows, silently skipping any (subject, month, year) that already exists."""
    if not rows:
        return 0

    model = kind.model
    conflict_target = [model.subject_field, "month", "year"]
    dialect = db.get_bind().dialect.name

    if dialect not in ("postgresql", "sqlite"):
        # No native upsert: fall back to check-then-insert
        created = 0
        for values in rows:
            period = Period.of(values["month"], values["year"])
            if not find_row(db, kind, values[model.subject_field], period):
                db.add(model(**values))
                created += 1
        db.flush()
        return created

    insert = pg_insert if dialect == "postgresql" else sqlite_insert
    created = 0
    for start in range(0, len(rows), BATCH_SIZE):
        stmt = insert(model).values(rows[start:start + BATCH_SIZE])
        stmt = stmt.on_conflict_do_nothing(index_elements=conflict_target)
        result = db.execute(stmt)
        created += max(result.rowcount or 0, 0)
    return created


def ensure_ledger_rows(db: Session, kind: LedgerKind, subject_ids, period: Period,
                       now: datetime.datetime) -> int:
    carry = previous_amounts(db, kind, period)
    rows = build_candidate_rows(kind, subject_ids, period, carry, now)
    return insert_ignoring_duplicates(db, kind, rows)


def issue_period_vouchers(db: Session, student_ids, period: Period, today: datetime.date,
                          result: BillingRunResult) -> None:
    for student_id in student_ids:
        try:
            if has_voucher_for(db, student_id, period):
                continue
            issue_voucher(db, student_id, today=today, period=period)
            result.vouchers_issued += 1
        except Exception as exc:
            db.rollback()
            logger.exception("[Cron] Voucher failed for student %s", student_id)
            result.voucher_failures.append({"studentId": student_id, "error": str(exc)})


def run_monthly_billing(db: Session, period: Period | None = None, today: datetime.date | None = None,
                        now: datetime.datetime | None = None) -> BillingRunResult:
    """
    Roll the ledgers forward to ``period`` (defaults to the current month).

    Ledger failures raise; the run is safe to repeat for the same period.
    Voucher and expiration failures are logged and reported in the result.
    """
    today = today or datetime.date.today()
    now = now or datetime.datetime.utcnow()
    period = period or Period.current(today)
    result = BillingRunResult(month=period.month, year=period.year)

    logger.info("[Cron] Starting monthly billing process for %s", period)

    student_ids = [sid for (sid,) in db.query(Student.id).order_by(Student.id).all()]
    teacher_ids = [tid for (tid,) in db.query(Teacher.id).order_by(Teacher.id).all()]

    try:
        result.fees_created = ensure_ledger_rows(db, LedgerKind.FEE, student_ids, period, now)
        result.salaries_created = ensure_ledger_rows(db, LedgerKind.SALARY, teacher_ids, period, now)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[Cron] Ledger roll-forward failed for %s", period)
        raise

    result.students_processed = len(student_ids)
    result.teachers_processed = len(teacher_ids)

    issue_period_vouchers(db, student_ids, period, today, result)

    try:
        result.fees_expired = expire_paid_rows(db, LedgerKind.FEE, now)
    except Exception:
        db.rollback()
        result.fees_expired = None
        logger.exception("[Cron] Fee expiration check failed")

    logger.info(
        "[Cron] Completed %s: %d students (%d new fees), %d teachers (%d new salaries), "
        "%d vouchers, %d voucher failures",
        period, result.students_processed, result.fees_created, result.teachers_processed,
        result.salaries_created, result.vouchers_issued, len(result.voucher_failures),
    )
    return result
