# technurture/models/form.py

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func

from technurture.utils.database import Base


class DynamicForm(Base):
    __tablename__ = "dynamic_forms"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)               # course, hiring, event, ...
    fields = Column(JSON, nullable=False)                   # ordered field descriptors
    active = Column(Integer, nullable=False, default=1, index=True)  # 0/1
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(Integer, primary_key=True, index=True)
    form_id = Column(String(64), nullable=False, index=True)  # weak reference, no FK
    submission_data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
