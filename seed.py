import logging
from decimal import Decimal

from database import SessionLocal, engine, Base
from models.masters import ClassMaster
from models.students import Student
from models.teachers import Teacher
from models.fee_models import StudentFee, TeacherSalary
from services.periods import Period
from services.vouchers import ensure_counter

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger("seed")

# Tables are created if missing
Base.metadata.create_all(bind=engine)

CLASSES = [("Class 1", "A"), ("Class 2", "A"), ("Class 3", "A"), ("Class 4", "A"), ("Class 5", "A")]

STUDENTS = [
    {"name": "Ali Raza", "roll_number": "1", "guardian_name": "Raza Ahmed", "class": "Class 1", "fee": 2500},
    {"name": "Sara Khan", "roll_number": "2", "guardian_name": "Imran Khan", "class": "Class 1", "fee": 2500},
    {"name": "Hamza Tariq", "roll_number": "1", "guardian_name": "Tariq Mehmood", "class": "Class 3", "fee": 3000},
    {"name": "Ayesha Noor", "roll_number": "1", "guardian_name": "Noor Hassan", "class": "Class 5", "fee": 3500},
]

TEACHERS = [
    {"name": "Fatima Zahra", "email": "fatima@school.test", "salary": 45000},
    {"name": "Usman Ghani", "email": "usman@school.test", "salary": 40000},
]


def seed_data():
    db = SessionLocal()
    period = Period.current()
    logger.info("Seeding demo data for %s", period)

    try:
        # 1. CLASSES
        class_ids = {}
        for name, section in CLASSES:
            exists = db.query(ClassMaster).filter_by(name=name, section=section).first()
            if not exists:
                exists = ClassMaster(name=name, section=section)
                db.add(exists)
                db.flush()
                logger.info("Added class %s-%s", name, section)
            class_ids[name] = exists.id

        # 2. STUDENTS with this month's fee (later months carry it forward)
        for s in STUDENTS:
            student = db.query(Student).filter_by(name=s["name"], class_id=class_ids[s["class"]]).first()
            if not student:
                student = Student(
                    name=s["name"], roll_number=s["roll_number"],
                    guardian_name=s["guardian_name"], class_id=class_ids[s["class"]],
                )
                db.add(student)
                db.flush()
                logger.info("Added student %s", s["name"])
            if not db.query(StudentFee).filter_by(student_id=student.id, month=period.month, year=period.year).first():
                db.add(StudentFee(student_id=student.id, month=period.month, year=period.year,
                                  amount=Decimal(s["fee"])))

        # 3. TEACHERS with this month's salary
        for t in TEACHERS:
            teacher = db.query(Teacher).filter_by(email=t["email"]).first()
            if not teacher:
                teacher = Teacher(name=t["name"], email=t["email"])
                db.add(teacher)
                db.flush()
                logger.info("Added teacher %s", t["name"])
            if not db.query(TeacherSalary).filter_by(teacher_id=teacher.id, month=period.month, year=period.year).first():
                db.add(TeacherSalary(teacher_id=teacher.id, month=period.month, year=period.year,
                                     amount=Decimal(t["salary"])))

        ensure_counter(db)
        db.commit()
        logger.info("All data seeded")
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_data()
