import datetime

from conftest import make_fee, make_student
from models.fee_models import LedgerStatus
from services.arrears import arrears_breakdown, calculate_arrears
from services.periods import Period


def test_sums_unpaid_months_before_current(db):
    student = make_student(db)
    make_fee(db, student, 1, 2024, 1000)
    make_fee(db, student, 2, 2024, 1500)
    make_fee(db, student, 3, 2024, 2000)  # current month, never part of arrears

    assert calculate_arrears(db, student.id, Period.of(3, 2024)) == 2500


def test_no_prior_unpaid_rows_is_zero(db):
    student = make_student(db)
    make_fee(db, student, 3, 2024, 2000)

    assert calculate_arrears(db, student.id, Period.of(3, 2024)) == 0


def test_paid_rows_and_other_students_excluded(db):
    student = make_student(db)
    other = make_student(db, name="Sara Khan")
    make_fee(db, student, 1, 2024, 1000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 1, 5))
    make_fee(db, student, 2, 2024, 1500)
    make_fee(db, other, 2, 2024, 9999)

    assert calculate_arrears(db, student.id, Period.of(3, 2024)) == 1500


def test_previous_year_counts_and_future_does_not(db):
    student = make_student(db)
    make_fee(db, student, 12, 2023, 800)
    make_fee(db, student, 4, 2024, 700)

    total, labels = arrears_breakdown(db, student.id, Period.of(3, 2024))
    assert total == 800
    assert labels == ["December 2023"]


def test_breakdown_labels_oldest_first(db):
    student = make_student(db)
    make_fee(db, student, 2, 2024, 1500)
    make_fee(db, student, 1, 2024, 1000)

    total, labels = arrears_breakdown(db, student.id, Period.of(3, 2024))
    assert total == 2500
    assert labels == ["January 2024", "February 2024"]
