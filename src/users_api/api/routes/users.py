"""
User CRUD API routes
"""

import logging
from typing import List
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from users_api.models.user import (
    UserCreate,
    UserUpdateRequest,
    UserResponse,
    UserCreatedResponse,
    MessageResponse
)
from users_api.services.users_service import UsersService, UPDATABLE_FIELDS, get_users_service

router = APIRouter()
logger = logging.getLogger(__name__)

def user_not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": "User not found"})

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

@router.get("", response_model=List[UserResponse])
async def list_users(service: UsersService = Depends(get_users_service)):
    """List every user without password hashes"""
    result = await service.list_users()

    if not result.success:
        return error_response(500, "Query failed")

    return [UserResponse(**row) for row in result.data]

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, service: UsersService = Depends(get_users_service)):
    """Get user by ID"""
    result = await service.get_user(user_id)

    if not result.success:
        if result.error_type == "RESOURCE_NOT_FOUND":
            return user_not_found()
        return error_response(500, "Query failed")

    return UserResponse(**result.data[0])

@router.post("", response_model=UserCreatedResponse, status_code=201)
async def create_user(request: UserCreate, service: UsersService = Depends(get_users_service)):
    """Create a user, storing only the bcrypt hash of the password"""
    if not request.password:
        return error_response(400, "Password is required")
    if not request.firstname or not request.lastname:
        return error_response(400, "First name and last name are required")

    result = await service.create_user(
        firstname=request.firstname,
        fullname=request.fullname,
        lastname=request.lastname,
        password=request.password
    )

    if not result.success:
        return error_response(500, "Insert failed")

    return UserCreatedResponse(**result.data[0])

@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    service: UsersService = Depends(get_users_service)
):
    """
    Update a user's name fields and optionally the password

    Only fields present in the body are written; without a password the
    stored hash is left untouched.
    """
    provided = request.model_dump(include=set(UPDATABLE_FIELDS), exclude_unset=True)

    if not provided and not request.password:
        return error_response(400, "No fields provided for update")

    result = await service.update_user(user_id, provided, password=request.password)

    if not result.success:
        if result.error_type == "RESOURCE_NOT_FOUND":
            return user_not_found()
        return error_response(500, "Update failed")

    return MessageResponse(message="User updated successfully")

@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, service: UsersService = Depends(get_users_service)):
    """Hard-delete a user"""
    result = await service.delete_user(user_id)

    if not result.success:
        if result.error_type == "RESOURCE_NOT_FOUND":
            return user_not_found()
        return error_response(500, "Delete failed")

    return MessageResponse(message="User deleted successfully")
