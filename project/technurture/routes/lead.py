# technurture/routes/lead.py

from fastapi import APIRouter, Depends, Request

from technurture.middleware.auth import require_admin
from technurture.schemas.lead import ContactCreate, EnrollmentCreate

router = APIRouter()


# ────────────── CONTACT FORM ──────────────
@router.post(
    "/contact",
    summary="Submit the contact form",
    responses={
        200: {"description": "Contact request stored"},
        400: {"description": "Invalid fields, see errors"},
        500: {"description": "Internal server error"},
    },
)
async def create_contact(request: Request, contact: ContactCreate):
    try:
        created = await request.state.storage.create_contact(contact)
    except Exception as e:
        await request.app.state.log.log_error("lead", f"Failed to store contact: {e}")
        raise
    await request.app.state.log.log_info("lead", "Contact received", {"id": created.id, "service": created.service})
    return {"success": True, "contact": created.to_json()}


@router.get("/contacts", summary="All contact requests, newest first (admin)", dependencies=[Depends(require_admin)])
async def read_contacts(request: Request):
    contacts = await request.state.storage.get_contacts()
    return [c.to_json() for c in contacts]


# ────────────── ACADEMY ENROLLMENT ──────────────
@router.post(
    "/enrollment",
    summary="Submit an academy enrollment",
    responses={
        200: {"description": "Enrollment stored"},
        400: {"description": "Invalid fields, see errors"},
        500: {"description": "Internal server error"},
    },
)
async def create_enrollment(request: Request, enrollment: EnrollmentCreate):
    try:
        created = await request.state.storage.create_enrollment(enrollment)
    except Exception as e:
        await request.app.state.log.log_error("lead", f"Failed to store enrollment: {e}")
        raise
    await request.app.state.log.log_info("lead", "Enrollment received", {"id": created.id, "course": created.course})
    return {"success": True, "enrollment": created.to_json()}


@router.get("/enrollments", summary="All enrollments, newest first (admin)", dependencies=[Depends(require_admin)])
async def read_enrollments(request: Request):
    enrollments = await request.state.storage.get_enrollments()
    return [e.to_json() for e in enrollments]
