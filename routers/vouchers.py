"""
Fee Voucher Router - issue, fetch and print serially numbered vouchers
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas.billing import BulkVoucherRequest, VoucherIssueRequest, VoucherOut
from services import vouchers

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Fee Vouchers"])
templates = Jinja2Templates(directory="templates")


@router.post("/api/fee-vouchers")
def issue_fee_voucher(data: VoucherIssueRequest, db: Session = Depends(get_db)):
    try:
        voucher = vouchers.issue_voucher(db, data.studentId, data.includeFine, data.removeArrears)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error issuing voucher: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"voucher": VoucherOut(**vouchers.build_voucher_view(voucher)), "success": True}


@router.post("/api/fee-vouchers/bulk")
def issue_bulk_fee_vouchers(data: BulkVoucherRequest, db: Session = Depends(get_db)):
    """One voucher per student with consecutive serial numbers (bulk print)"""
    try:
        issued = vouchers.issue_vouchers(db, data.studentIds, data.includeFine, data.removeArrears)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error issuing bulk vouchers: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "vouchers": [VoucherOut(**vouchers.build_voucher_view(v)) for v in issued],
        "success": True,
    }


@router.get("/api/fee-vouchers/{serial_number}")
def get_fee_voucher(serial_number: int, db: Session = Depends(get_db)):
    voucher = vouchers.get_voucher(db, serial_number)
    return {"voucher": VoucherOut(**vouchers.build_voucher_view(voucher)), "success": True}


@router.get("/fee-vouchers/{serial_number}/print", response_class=HTMLResponse)
def print_fee_voucher(request: Request, serial_number: int, db: Session = Depends(get_db)):
    voucher = vouchers.get_voucher(db, serial_number)
    return templates.TemplateResponse(
        request,
        "fee_voucher.html",
        {"voucher": vouchers.build_voucher_view(voucher), "copies": ["Bank Copy", "School Copy", "Student Copy"]},
    )
