from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

class StudentAttendance(Base):
    __tablename__ = "student_attendance"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=True)
    date = Column(Date, index=True, nullable=False)

    # Status: present, absent, leave
    status = Column(String(10), default="present")
    remarks = Column(String(255), nullable=True)

    # One mark per student per day
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    student = relationship("models.students.Student")
    class_val = relationship("models.masters.ClassMaster")
