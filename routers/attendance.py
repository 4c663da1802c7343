import logging
from datetime import date as dt_date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from models.attendance import StudentAttendance
from models.students import Student
from schemas.attendance import AttendanceOut, AttendanceSubmission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("")
def get_attendance(
    classId: Optional[int] = None,
    startDate: Optional[dt_date] = None,
    endDate: Optional[dt_date] = None,
    db: Session = Depends(get_db),
):
    query = db.query(StudentAttendance)
    if classId is not None:
        student_ids = [s.id for s in db.query(Student.id).filter(Student.class_id == classId).all()]
        query = query.filter(StudentAttendance.student_id.in_(student_ids))
    if startDate and endDate:
        query = query.filter(StudentAttendance.date >= startDate, StudentAttendance.date <= endDate)

    try:
        records = query.order_by(StudentAttendance.date, StudentAttendance.student_id).all()
    except SQLAlchemyError as e:
        logger.error("Error fetching attendance: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"attendance": [AttendanceOut.model_validate(r) for r in records], "success": True}


@router.post("")
def save_attendance(payload: AttendanceSubmission, db: Session = Depends(get_db)):
    """Mark attendance; an existing mark for the same student and day is overwritten"""
    # Last mark wins when a batch repeats a student/day
    latest = {(item.student_id, item.date): item for item in payload.records}

    saved = []
    for item in latest.values():
        existing = db.query(StudentAttendance).filter(
            StudentAttendance.student_id == item.student_id,
            StudentAttendance.date == item.date,
        ).first()
        if existing:
            existing.status = item.status
            existing.remarks = item.remarks
            if item.class_id is not None:
                existing.class_id = item.class_id
            saved.append(existing)
        else:
            record = StudentAttendance(**item.model_dump())
            db.add(record)
            saved.append(record)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error saving attendance: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    for record in saved:
        db.refresh(record)
    return {"attendance": [AttendanceOut.model_validate(r) for r in saved], "success": True}
