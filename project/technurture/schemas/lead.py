# technurture/schemas/lead.py

from datetime import datetime
from typing import Optional

from pydantic import EmailStr

from technurture.schemas.base import CamelModel, Flag, NonEmpty


# ────────────── Contact form ──────────────
class ContactCreate(CamelModel):
    name: NonEmpty
    email: EmailStr
    phone: Optional[str] = None
    service: Optional[str] = None
    message: NonEmpty
    newsletter: Flag = 0


class Contact(ContactCreate):
    id: str
    created_at: datetime


# ────────────── Academy enrollment ──────────────
class EnrollmentCreate(CamelModel):
    name: NonEmpty
    email: EmailStr
    phone: Optional[str] = None
    course: NonEmpty
    experience: Optional[str] = None
    motivation: Optional[str] = None


class Enrollment(EnrollmentCreate):
    id: str
    created_at: datetime
