from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
import datetime

class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    roll_number = Column(String(20), nullable=True)

    # --- ACADEMIC INFO ---
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=True)

    # --- GUARDIAN / BANK INFO (printed on vouchers) ---
    guardian_name = Column(String(100), nullable=True)
    guardian_phone = Column(String(15), nullable=True)
    ac_number = Column(String(50), nullable=True)

    status = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    # --- RELATIONSHIPS ---
    class_val = relationship("models.masters.ClassMaster")
