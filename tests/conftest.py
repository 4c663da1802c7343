import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.fee_models import FeeVoucher, LedgerStatus, StudentFee, TeacherSalary
from models.masters import ClassMaster
from models.students import Student
from models.teachers import Teacher


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- factories ---

def make_class(db, name="Class 1", section="A"):
    row = ClassMaster(name=name, section=section)
    db.add(row)
    db.commit()
    return row


def make_student(db, name="Ali Raza", class_id=None, roll_number="1", guardian_name="Raza Ahmed"):
    student = Student(name=name, class_id=class_id, roll_number=roll_number, guardian_name=guardian_name)
    db.add(student)
    db.commit()
    return student


def make_teacher(db, name="Fatima Zahra", email=None):
    teacher = Teacher(name=name, email=email)
    db.add(teacher)
    db.commit()
    return teacher


def make_fee(db, student, month, year, amount, status=LedgerStatus.UNPAID, paid_date=None):
    row = StudentFee(
        student_id=student.id, month=month, year=year, amount=Decimal(str(amount)),
        status=status, paid_date=paid_date,
    )
    db.add(row)
    db.commit()
    return row


def make_salary(db, teacher, month, year, amount, status=LedgerStatus.UNPAID, paid_date=None):
    row = TeacherSalary(
        teacher_id=teacher.id, month=month, year=year, amount=Decimal(str(amount)),
        status=status, paid_date=paid_date,
    )
    db.add(row)
    db.commit()
    return row


def make_voucher(db, student, serial_number, month=1, year=2024):
    voucher = FeeVoucher(
        serial_number=serial_number, student_id=student.id, month=month, year=year,
        issue_date=datetime.date(year, month, 1), due_date=datetime.date(year, month, 12),
    )
    db.add(voucher)
    db.commit()
    return voucher
