# technurture/routes/users.py

from fastapi import APIRouter, Depends, HTTPException, Request, status

from technurture.middleware.auth import CurrentUser, require_admin
from technurture.schemas.user import UserCreate, UserPublic, UserUpdate
from technurture.services.auth import auth_service

router = APIRouter(dependencies=[Depends(require_admin)])


def check_password_policy(password: str) -> None:
    result = auth_service.validate_password(password)
    if not result.is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Password does not meet requirements", "errors": result.errors},
        )


@router.get("", summary="List users (admin)")
async def list_users(request: Request):
    users = await request.state.storage.get_users()
    return [UserPublic.from_user(u).to_json() for u in users]


@router.post(
    "",
    summary="Create a user (admin)",
    responses={
        200: {"description": "User created"},
        400: {"description": "Invalid data, weak password or username taken"},
        401: {"description": "Not authenticated"},
        403: {"description": "Not an admin"},
    },
)
async def create_user(request: Request, user: UserCreate):
    """
    Create a user. The username must be free and the password must pass
    the password policy; only its hash is stored.
    """
    storage = request.state.storage
    check_password_policy(user.password)

    if await storage.get_user_by_username(user.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Username '{user.username}' already exists",
        )

    hashed = user.model_copy(update={"password": auth_service.hash_password(user.password)})
    created = await storage.create_user(hashed)
    await request.app.state.log.log_info("users", "User created", {"id": created.id, "username": created.username})
    return {"success": True, "user": UserPublic.from_user(created).to_json()}


@router.get("/{id}", summary="Get one user (admin)")
async def get_user(id: str, request: Request):
    user = await request.state.storage.get_user(id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserPublic.from_user(user).to_json()


@router.put("/{id}", summary="Update a user (admin)")
async def update_user(id: str, request: Request, user_update: UserUpdate):
    changes = user_update.changes()
    if "password" in changes:
        check_password_policy(changes["password"])
        changes["password"] = auth_service.hash_password(changes["password"])

    updated = await request.state.storage.update_user(id, changes)
    await request.app.state.log.log_info("users", "User updated", {"id": id, "fields": sorted(changes)})
    return {"success": True, "user": UserPublic.from_user(updated).to_json()}


@router.delete("/{id}", summary="Delete a user (admin)")
async def delete_user(id: str, request: Request):
    current: CurrentUser = request.state.user
    if current.id == id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    await request.app.state.log.log_info("users", "Deleting user", {"id": id})
    await request.state.storage.delete_user(id)
    return {"success": True}
