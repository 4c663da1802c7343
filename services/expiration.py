import datetime
import logging

from sqlalchemy.orm import Session

from models.fee_models import LedgerStatus
from services.ledgers import LedgerKind
from services.periods import Period

logger = logging.getLogger(__name__)


def is_expired(paid_date: datetime.datetime, now: datetime.datetime) -> bool:
    """A payment covers the calendar month it was made in; it lapses once that month is over."""
    return now > Period.current(paid_date.date()).last_moment()


def expire_paid_rows(db: Session, kind: LedgerKind = LedgerKind.FEE, now: datetime.datetime | None = None) -> int:
    """Reset lapsed paid rows to unpaid; returns how many were reset."""
    now = now or datetime.datetime.utcnow()
    model = kind.model

    paid_rows = db.query(model).filter(
        model.status == LedgerStatus.PAID,
        model.paid_date.isnot(None),
    ).all()

    expired = [row for row in paid_rows if is_expired(row.paid_date, now)]
    for row in expired:
        row.status = LedgerStatus.UNPAID
        row.paid_date = None

    if expired:
        db.commit()
        logger.info("Reset %d expired %s record(s) to unpaid", len(expired), kind.value)
    return len(expired)
