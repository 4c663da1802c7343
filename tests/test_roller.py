import datetime

from sqlalchemy.exc import OperationalError

from conftest import make_fee, make_salary, make_student, make_teacher
from models.fee_models import FeeVoucher, LedgerStatus, StudentFee, TeacherSalary
from services.errors import BillingError
from services.periods import Period
from services.roller import run_monthly_billing

MARCH = Period.of(3, 2024)
TODAY = datetime.date(2024, 3, 1)
NOW = datetime.datetime(2024, 3, 1, 0, 0, 5)


def fee_for(db, student, period):
    return db.query(StudentFee).filter_by(student_id=student.id, month=period.month, year=period.year).one()


def test_creates_rows_carrying_last_month_amount(db):
    carried = make_student(db)
    fresh = make_student(db, name="Sara Khan")
    make_fee(db, carried, 2, 2024, 5000)

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.fees_created == 2
    assert result.students_processed == 2
    assert fee_for(db, carried, MARCH).amount == 5000
    assert fee_for(db, fresh, MARCH).amount == 0
    row = fee_for(db, carried, MARCH)
    assert row.status is LedgerStatus.UNPAID
    assert row.paid_date is None


def test_january_carries_december_of_previous_year(db):
    student = make_student(db)
    make_fee(db, student, 12, 2023, 3000)

    result = run_monthly_billing(db, Period.of(1, 2024), datetime.date(2024, 1, 1), datetime.datetime(2024, 1, 1))

    assert (result.month, result.year) == (1, 2024)
    assert fee_for(db, student, Period.of(1, 2024)).amount == 3000


def test_rerun_is_idempotent(db):
    student = make_student(db)
    make_teacher(db)
    make_fee(db, student, 2, 2024, 2500)

    first = run_monthly_billing(db, MARCH, TODAY, NOW)
    second = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert (first.fees_created, first.salaries_created, first.vouchers_issued) == (1, 1, 1)
    assert (second.fees_created, second.salaries_created, second.vouchers_issued) == (0, 0, 0)
    assert db.query(StudentFee).filter_by(month=3, year=2024).count() == 1
    assert db.query(TeacherSalary).filter_by(month=3, year=2024).count() == 1
    assert db.query(FeeVoucher).filter_by(month=3, year=2024).count() == 1


def test_existing_row_is_not_overwritten(db):
    student = make_student(db)
    make_fee(db, student, 2, 2024, 2500)
    make_fee(db, student, 3, 2024, 4000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 3, 5))

    result = run_monthly_billing(db, MARCH, datetime.date(2024, 3, 20), datetime.datetime(2024, 3, 20))

    assert result.fees_created == 0
    row = fee_for(db, student, MARCH)
    db.refresh(row)
    assert row.amount == 4000
    assert row.status is LedgerStatus.PAID
    assert row.paid_date == datetime.datetime(2024, 3, 5)


def test_salaries_carry_forward(db):
    teacher = make_teacher(db)
    make_salary(db, teacher, 2, 2024, 45000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 2, 28))

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.salaries_created == 1
    assert result.teachers_processed == 1
    row = db.query(TeacherSalary).filter_by(teacher_id=teacher.id, month=3, year=2024).one()
    assert row.amount == 45000
    assert row.status is LedgerStatus.UNPAID


def test_voucher_includes_arrears(db):
    student = make_student(db)
    make_fee(db, student, 1, 2024, 1000)
    make_fee(db, student, 2, 2024, 1500)

    run_monthly_billing(db, MARCH, TODAY, NOW)

    voucher = db.query(FeeVoucher).filter_by(student_id=student.id).one()
    assert voucher.monthly_fee == 1500
    assert voucher.arrears == 2500
    assert voucher.fines == 0


def test_voucher_failure_is_reported_not_raised(db, monkeypatch):
    good = make_student(db)
    bad = make_student(db, name="Sara Khan")

    import services.roller as roller
    real_issue = roller.issue_voucher

    def flaky_issue(session, student_id, **kwargs):
        if student_id == bad.id:
            raise BillingError("printer on fire")
        return real_issue(session, student_id, **kwargs)

    monkeypatch.setattr(roller, "issue_voucher", flaky_issue)

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.vouchers_issued == 1
    assert result.voucher_failures == [{"studentId": bad.id, "error": "printer on fire"}]
    assert result.fees_created == 2
    assert db.query(FeeVoucher).filter_by(student_id=good.id).count() == 1


def test_lapsed_paid_fees_are_reset(db):
    student = make_student(db)
    make_fee(db, student, 1, 2024, 1000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 1, 10))
    make_fee(db, student, 2, 2024, 1000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 2, 27))

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.fees_expired == 2
    statuses = {(r.month, r.status) for r in db.query(StudentFee).filter_by(student_id=student.id)}
    assert statuses == {(1, LedgerStatus.UNPAID), (2, LedgerStatus.UNPAID), (3, LedgerStatus.UNPAID)}


def test_no_students_no_teachers(db):
    result = run_monthly_billing(db, MARCH, TODAY, NOW)
    assert result.students_processed == 0
    assert result.fees_created == 0
    assert result.voucher_failures == []


def test_database_error_in_voucher_phase_does_not_abort_run(db, monkeypatch):
    student = make_student(db)
    make_fee(db, student, 1, 2024, 1000, status=LedgerStatus.PAID, paid_date=datetime.datetime(2024, 1, 10))

    import services.roller as roller

    def broken_lookup(session, student_id, period):
        raise OperationalError("SELECT fee_vouchers", {}, Exception("database is locked"))

    monkeypatch.setattr(roller, "has_voucher_for", broken_lookup)

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.fees_created == 1
    assert result.vouchers_issued == 0
    assert [f["studentId"] for f in result.voucher_failures] == [student.id]
    assert "database is locked" in result.voucher_failures[0]["error"]
    assert result.fees_expired == 1
    assert db.query(StudentFee).filter_by(student_id=student.id, month=3, year=2024).count() == 1


def test_expiration_failure_is_reported_as_none(db, monkeypatch):
    make_student(db)

    import services.roller as roller

    def broken_expire(session, kind, now):
        raise OperationalError("UPDATE student_fees", {}, Exception("disk I/O error"))

    monkeypatch.setattr(roller, "expire_paid_rows", broken_expire)

    result = run_monthly_billing(db, MARCH, TODAY, NOW)

    assert result.fees_expired is None
    assert result.vouchers_issued == 1
