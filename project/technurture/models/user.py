# technurture/models/user.py

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from technurture.utils.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)      # serial
    username = Column(Text, unique=True, nullable=False)
    password = Column(Text, nullable=False)                 # hash only
    role = Column(String(50), nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
