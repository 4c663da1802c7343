from sqlalchemy import Column, Integer, String, Boolean
from database import Base

# 1. CLASS TABLE
class ClassMaster(Base):
    __tablename__ = "classes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, index=True)
    section = Column(String(10), nullable=True)
    status = Column(Boolean, default=True)
