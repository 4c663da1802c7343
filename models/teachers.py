from sqlalchemy import Column, Integer, String, Boolean, DateTime
from database import Base
import datetime

class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(15), nullable=True)
    status = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
