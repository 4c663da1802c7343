"""
Student Fees Router - monthly fee ledger (student_fees)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas.billing import FeeCreate, FeeOut, LedgerSummaryOut, LedgerUpdate
from services import ledgers
from services.arrears import unpaid_before
from services.ledgers import LedgerKind
from services.periods import Period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Student Fees"])


@router.get("/fees")
def get_fees(
    studentId: Optional[int] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    allMonths: bool = False,
    db: Session = Depends(get_db),
):
    """
    Fetch student fees
    - studentId: fees of one student
    - month / year: filter by period
    - allMonths: every month (default is the current month only)
    """
    try:
        rows = ledgers.list_rows(db, LedgerKind.FEE, studentId, month, year, allMonths)
    except SQLAlchemyError as e:
        logger.error("Error fetching fees: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"fees": [FeeOut.model_validate(r) for r in rows], "success": True}


@router.post("/fees")
def create_fee(data: FeeCreate, db: Session = Depends(get_db)):
    """Create a student's fee row for a month unless it already exists"""
    try:
        row, created = ledgers.create_row_if_missing(
            db, LedgerKind.FEE, data.student_id, Period.of(data.month, data.year), data.amount
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error creating fee: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"fee": FeeOut.model_validate(row), "success": True, "created": created}


@router.put("/fees")
def update_fee(data: LedgerUpdate, db: Session = Depends(get_db)):
    """Update fee status (paid/unpaid) and/or amount"""
    try:
        row = ledgers.update_row(db, LedgerKind.FEE, data.id, data.amount, data.status, data.paid_date)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error updating fee: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"fee": FeeOut.model_validate(row), "success": True}


@router.get("/fees/monthly")
def get_monthly_fee(studentId: int, month: int, year: int, db: Session = Depends(get_db)):
    """One student's fee for one month; a missing row is not an error"""
    try:
        row = ledgers.find_row(db, LedgerKind.FEE, studentId, Period.of(month, year))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        logger.error("Error fetching monthly fee: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "fee": FeeOut.model_validate(row) if row else None,
        "success": True,
        "exists": row is not None,
    }


@router.get("/fees/summary", response_model=LedgerSummaryOut)
def get_fee_summary(db: Session = Depends(get_db)):
    try:
        return ledgers.summarize(db, LedgerKind.FEE)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/fees/unpaid/{student_id}")
def get_unpaid_fees(student_id: int, db: Session = Depends(get_db)):
    """Unpaid months before the current one (what makes up the arrears)"""
    try:
        ledgers.ensure_subject(db, LedgerKind.FEE, student_id)
        rows = unpaid_before(db, student_id, Period.current())
    except SQLAlchemyError as e:
        logger.error("Error fetching unpaid fees: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "fees": [
            {**FeeOut.model_validate(r).model_dump(), "label": Period.of(r.month, r.year).label}
            for r in rows
        ],
        "total": float(sum(r.amount for r in rows)),
        "success": True,
    }


@router.get("/fees/default-period/{student_id}")
def get_default_fee_period(student_id: int, db: Session = Depends(get_db)):
    """Month the payment form should open on: oldest unpaid earlier month, else the current month"""
    try:
        period = ledgers.default_period(db, LedgerKind.FEE, student_id)
    except SQLAlchemyError as e:
        logger.error("Error checking previous months: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"month": period.month, "year": period.year, "success": True}


@router.get("/students/fees")
def get_all_student_fees(db: Session = Depends(get_db)):
    """All fee rows, newest month first"""
    try:
        rows = ledgers.list_all_newest_first(db, LedgerKind.FEE)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"fees": [FeeOut.model_validate(r) for r in rows], "success": True}
