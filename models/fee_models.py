"""
Billing Models - Monthly fee / salary ledgers and printable vouchers
One ledger row per subject per calendar month, vouchers are append-only
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import datetime
import enum


class LedgerStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


# Shared column set for student_fees and teacher_salary
class LedgerColumns:
    id = Column(Integer, primary_key=True, index=True)
    month = Column(Integer, nullable=False)          # 1-12
    year = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(
        Enum(LedgerStatus, native_enum=False, length=10, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LedgerStatus.UNPAID,
    )
    paid_date = Column(DateTime, nullable=True)      # set only while status == paid
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)


# 1. STUDENT FEES - one row per student per month
class StudentFee(LedgerColumns, Base):
    __tablename__ = "student_fees"

    subject_field = "student_id"

    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("student_id", "month", "year", name="uq_student_fee_period"),
    )

    student = relationship("models.students.Student")


# 2. TEACHER SALARY - one row per teacher per month
class TeacherSalary(LedgerColumns, Base):
    __tablename__ = "teacher_salary"

    subject_field = "teacher_id"

    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("teacher_id", "month", "year", name="uq_teacher_salary_period"),
    )

    teacher = relationship("models.teachers.Teacher")


# 3. FEE VOUCHER - printable bill, never updated in place
class FeeVoucher(Base):
    __tablename__ = "fee_vouchers"

    id = Column(Integer, primary_key=True, index=True)
    serial_number = Column(Integer, unique=True, nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)

    # Billing month this voucher was issued for
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)          # 12th of the billing month

    monthly_fee = Column(Numeric(12, 2), default=0)
    arrears = Column(Numeric(12, 2), default=0)
    arrears_months = Column(String(255), nullable=True)   # "January 2024, February 2024", frozen at issue
    fines = Column(Numeric(12, 2), default=0)
    annual_charges = Column(Numeric(12, 2), default=0)
    exam_fee = Column(Numeric(12, 2), default=0)
    other_charges = Column(Numeric(12, 2), default=0)
    total_amount = Column(Numeric(12, 2), default=0)

    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    student = relationship("models.students.Student")


# 4. VOUCHER COUNTER - atomic source of voucher serial numbers
class VoucherCounter(Base):
    __tablename__ = "voucher_counters"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)  # e.g. "fee_voucher"
    last_number = Column(Integer, nullable=False, default=0)
