# technurture/models/lead.py

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from technurture.utils.database import Base


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    service = Column(String(100), nullable=True)
    message = Column(Text, nullable=False)
    newsletter = Column(Integer, nullable=False, default=0)  # 0/1
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    course = Column(String(100), nullable=False)
    experience = Column(String(50), nullable=True)
    motivation = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
