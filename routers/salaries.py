"""
Teacher Salary Router - monthly salary ledger (teacher_salary)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas.billing import LedgerSummaryOut, LedgerUpdate, SalaryOut, SalaryToggleRequest
from services import ledgers
from services.ledgers import LedgerKind
from services.periods import Period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Teacher Salaries"])


@router.get("/salaries")
def get_salaries(teacherId: Optional[int] = None, db: Session = Depends(get_db)):
    try:
        rows = ledgers.list_rows(db, LedgerKind.SALARY, teacherId, all_months=True)
    except SQLAlchemyError as e:
        logger.error("Error fetching salaries: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"salaries": [SalaryOut.model_validate(r) for r in rows], "success": True}


@router.put("/salaries")
def update_salary(data: LedgerUpdate, db: Session = Depends(get_db)):
    try:
        row = ledgers.update_row(db, LedgerKind.SALARY, data.id, data.amount, data.status, data.paid_date)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error updating salary: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"salary": SalaryOut.model_validate(row), "success": True}


@router.get("/salaries/monthly")
def get_monthly_salary(teacherId: int, month: int, year: int, db: Session = Depends(get_db)):
    try:
        row = ledgers.find_row(db, LedgerKind.SALARY, teacherId, Period.of(month, year))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        logger.error("Error fetching monthly salary: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "salary": SalaryOut.model_validate(row) if row else None,
        "success": True,
        "exists": row is not None,
    }


@router.get("/salaries/summary", response_model=LedgerSummaryOut)
def get_salary_summary(db: Session = Depends(get_db)):
    try:
        return ledgers.summarize(db, LedgerKind.SALARY)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/teacher-salary/toggle")
def toggle_teacher_salary(data: SalaryToggleRequest, db: Session = Depends(get_db)):
    """Flip this month's salary between paid and unpaid"""
    try:
        row = ledgers.toggle_current_salary(db, data.teacherId, data.amount)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error toggling salary: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "status": row.status, "salary": SalaryOut.model_validate(row)}
