from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from repairhub.database import get_db
from repairhub.dependencies import get_current_user, get_caller, get_admin, get_staff
from repairhub.models.role import UserRole
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.user import UserCreateRequest, UserUpdateRequest, BulkUserRequest
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.role_transition_service import role_transition_service
from repairhub.services.user_service import user_service, serialize_user

router = APIRouter(prefix="/users")


# GET /users - Admin, Employee
@router.get("", status_code=status.HTTP_200_OK, summary="List accounts (paginated)")
def list_users(
    page:     int                = Query(1,    ge=1),
    limit:    int                = Query(20,   ge=1, le=100),
    search:   Optional[str]      = Query(None, description="Search by name, email, or phone"),
    role:     Optional[UserRole] = Query(None),
    isActive: Optional[bool]     = Query(None),
    db:       Session            = Depends(get_db),
    _:        CallerContext      = Depends(get_staff),
):
    data, total = user_service.list_users(db, page, limit, search, role.value if role else None, isActive)
    return paginated_response("Users retrieved successfully", data, total, page, limit)


# GET /users/me - Any authenticated account
@router.get("/me", status_code=status.HTTP_200_OK, summary="Get current account")
def get_me(current_user: User = Depends(get_current_user)):
    return success_response("Profile retrieved", serialize_user(current_user))


# POST /users/role-transition - Any authenticated account
@router.post("/role-transition", status_code=status.HTTP_200_OK, summary="Move the account into a new role")
def role_transition(
    payload: dict[str, Any] = Body(...),
    db:      Session        = Depends(get_db),
    caller:  CallerContext  = Depends(get_caller),
):
    """
    Body carries `role` plus the fields that role needs:
    - **company**: `companyName` (optional)
    - **company_driver**: `companyId`, `driverInfo.{name, phoneNumber}`
    - **unregistered_driver**: `driverInfo.{name, phoneNumber}`, `companyDetails.{companyName, contactPerson}`
    - **truck_owner**: `licensePlate`, `brand`
    """
    result = role_transition_service.transition(db, payload, caller)
    message = result.pop("message")
    user = result.pop("user")
    return success_response(message, user, user=user, **result)


# POST /users/bulk - Admin only
@router.post("/bulk", status_code=status.HTTP_200_OK, summary="Activate, deactivate, delete or re-role many accounts")
def bulk_users(
    data:   BulkUserRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_admin),
):
    """
    `operation` is one of `activate`, `deactivate`, `delete`, `updateRole`;
    `updateRole` needs `data.role`. All accounts change or none do.
    """
    affected = user_service.bulk_operation(db, data, caller.id)
    return success_response(f"Bulk {data.operation.value} completed successfully", affectedCount=affected)


# GET /users/{user_id} - Admin, Employee
@router.get("/{user_id}", status_code=status.HTTP_200_OK, summary="Get account by ID")
def get_user(user_id: int, db: Session = Depends(get_db), _: CallerContext = Depends(get_staff)):
    return success_response("User retrieved", user_service.get_user(db, user_id))


# POST /users - Admin only
@router.post("", status_code=status.HTTP_201_CREATED, summary="Create account (Admin)")
def create_user(
    data:   UserCreateRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_admin),
):
    return success_response("User created successfully", user_service.create_user(db, data, caller.id))


# PUT /users/{user_id} - Admin only
@router.put("/{user_id}", status_code=status.HTTP_200_OK, summary="Update account (Admin)")
def update_user(
    user_id: int,
    data:    UserUpdateRequest,
    db:      Session       = Depends(get_db),
    caller:  CallerContext = Depends(get_admin),
):
    return success_response("User updated successfully", user_service.update_user(db, user_id, data, caller.id))


# PATCH /users/{user_id}/toggle-active - Admin only
@router.patch("/{user_id}/toggle-active", status_code=status.HTTP_200_OK, summary="Activate/deactivate account")
def toggle_active(
    user_id: int,
    db:      Session       = Depends(get_db),
    caller:  CallerContext = Depends(get_admin),
):
    data = user_service.toggle_active(db, user_id, caller.id)
    label = "activated" if data["isActive"] else "deactivated"
    return success_response(f"User {label} successfully", data)


# DELETE /users/{user_id} - Admin only
@router.delete("/{user_id}", status_code=status.HTTP_200_OK, summary="Delete account (Admin)")
def delete_user(
    user_id: int,
    db:      Session       = Depends(get_db),
    caller:  CallerContext = Depends(get_admin),
):
    user_service.delete_user(db, user_id, caller.id)
    return success_response("User deleted successfully")
