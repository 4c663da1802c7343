"""
Cron Router - monthly billing roll-forward and paid-status resets

Scheduling lives outside the app (e.g. "0 0 1 * *" hitting
/api/cron/monthly-billing); these handlers only do the work.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from schemas.billing import BillingRunOut
from services import cron_auth
from services.errors import CronUnauthorized
from services.expiration import expire_paid_rows
from services.ledgers import LedgerKind
from services.periods import Period
from services.roller import run_monthly_billing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["Cron"])


def verify_cron_secret(
    secret: Optional[str] = Query(default=None),
    authorization: Optional[str] = Header(default=None),
):
    supplied = cron_auth.extract_credentials(secret, authorization)
    outcome = cron_auth.evaluate(settings.cron_secret, supplied)
    if not cron_auth.is_allowed(outcome, strict=settings.cron_require_secret):
        logger.warning("[Cron] Rejected request: %s", outcome.value)
        raise CronUnauthorized()
    return outcome


def target_period(month: Optional[int] = None, year: Optional[int] = None) -> Optional[Period]:
    """Optional ?month=&year= override, for re-running a month that failed"""
    if month is None and year is None:
        return None
    if month is None or year is None:
        raise HTTPException(status_code=400, detail="month and year must be given together")
    try:
        return Period.of(month, year)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.api_route("/monthly-billing", methods=["GET", "POST"], response_model=BillingRunOut)
def monthly_billing(
    period: Optional[Period] = Depends(target_period),
    _outcome=Depends(verify_cron_secret),
    db: Session = Depends(get_db),
):
    try:
        result = run_monthly_billing(db, period)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[Cron] Monthly billing error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return BillingRunOut(
        message=f"Successfully created monthly fees and salaries for {result.month}/{result.year}",
        studentsProcessed=result.students_processed,
        teachersProcessed=result.teachers_processed,
        month=result.month,
        year=result.year,
        feesCreated=result.fees_created,
        salariesCreated=result.salaries_created,
        vouchersIssued=result.vouchers_issued,
        voucherFailures=result.voucher_failures,
        feesExpired=result.fees_expired,
    )


def _reset(db: Session, kind: LedgerKind):
    try:
        count = expire_paid_rows(db, kind)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[Cron] Failed to reset %s records: %s", kind.value, e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "reset": count}


@router.post("/reset-student-fees")
def reset_student_fees(_outcome=Depends(verify_cron_secret), db: Session = Depends(get_db)):
    return _reset(db, LedgerKind.FEE)


@router.post("/reset-teacher-salary")
def reset_teacher_salary(_outcome=Depends(verify_cron_secret), db: Session = Depends(get_db)):
    return _reset(db, LedgerKind.SALARY)
