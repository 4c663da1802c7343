import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from models.fee_models import LedgerStatus, StudentFee
from services.periods import Period

logger = logging.getLogger(__name__)


def unpaid_before(db: Session, student_id: int, period: Period):
    """Unpaid fee rows of a student strictly before ``period``, oldest first."""
    return (
        db.query(StudentFee)
        .filter(
            StudentFee.student_id == student_id,
            StudentFee.status == LedgerStatus.UNPAID,
            (StudentFee.year < period.year)
            | ((StudentFee.year == period.year) & (StudentFee.month < period.month)),
        )
        .order_by(StudentFee.year, StudentFee.month)
        .all()
    )


def calculate_arrears(db: Session, student_id: int, period: Period) -> Decimal:
    return sum((Decimal(str(row.amount or 0)) for row in unpaid_before(db, student_id, period)), Decimal("0"))


def arrears_breakdown(db: Session, student_id: int, period: Period) -> tuple[Decimal, list[str]]:
    """Arrears total plus the "January 2024" style labels of the months it covers."""
    rows = unpaid_before(db, student_id, period)
    total = Decimal("0")
    labels = []
    for row in rows:
        total += Decimal(str(row.amount or 0))
        label = Period.of(row.month, row.year).label
        if label not in labels:
            labels.append(label)
    return total, labels
