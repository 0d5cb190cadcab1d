# technurture/routes/forms.py

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from technurture.middleware.auth import require_admin
from technurture.routes.blog import parse_flag
from technurture.schemas.form import DynamicFormCreate, DynamicFormUpdate, FormSubmissionCreate

router = APIRouter()


# ────────────── FORM DEFINITIONS ──────────────
@router.get("/forms", summary="List dynamic forms, newest first")
async def read_forms(request: Request, active: Optional[str] = None):
    forms = await request.state.storage.get_dynamic_forms(parse_flag(active))
    return [f.to_json() for f in forms]


@router.get("/forms/{id}", summary="Get one dynamic form", responses={404: {"description": "Form not found"}})
async def read_form(id: str, request: Request):
    form = await request.state.storage.get_dynamic_form(id)
    if form is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return form.to_json()


@router.post("/forms", summary="Create a dynamic form (admin)", dependencies=[Depends(require_admin)])
async def create_form(request: Request, form: DynamicFormCreate):
    created = await request.state.storage.create_dynamic_form(form)
    await request.app.state.log.log_info("forms", "Form created", {"id": created.id, "fields": len(created.fields)})
    return {"success": True, "form": created.to_json()}


@router.put("/forms/{id}", summary="Update a dynamic form (admin)", dependencies=[Depends(require_admin)])
async def update_form(id: str, request: Request, form_update: DynamicFormUpdate):
    updated = await request.state.storage.update_dynamic_form(id, form_update.changes())
    await request.app.state.log.log_info("forms", "Form updated", {"id": id})
    return {"success": True, "form": updated.to_json()}


@router.delete("/forms/{id}", summary="Delete a dynamic form (admin)", dependencies=[Depends(require_admin)])
async def delete_form(id: str, request: Request):
    """Submissions already received for the form are kept."""
    await request.state.storage.delete_dynamic_form(id)
    await request.app.state.log.log_info("forms", "Form deleted", {"id": id})
    return {"success": True}


# ────────────── SUBMISSIONS ──────────────
@router.post("/forms/{id}/submit", summary="Answer a dynamic form")
async def submit_form(id: str, request: Request, answers: dict[str, Any] = Body(...)):
    """
    The answer set is stored as-is; it is not checked against the form's
    field list and the form id is not required to exist.
    """
    submission = await request.state.storage.create_form_submission(
        FormSubmissionCreate(form_id=id, submission_data=answers)
    )
    await request.app.state.log.log_info("forms", "Submission received", {"id": submission.id, "formId": id})
    return {"success": True, "submission": submission.to_json()}


@router.get("/submissions", summary="Form submissions, newest first (admin)", dependencies=[Depends(require_admin)])
async def read_submissions(request: Request, formId: Optional[str] = None):
    submissions = await request.state.storage.get_form_submissions(formId)
    return [s.to_json() for s in submissions]
