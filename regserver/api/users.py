"""
regserver/api/users.py

Purpose: JSON API for users

- POST /users registers a user from a JSON body
- GET /users lists registered users
"""

from typing import List

from fastapi import APIRouter, Depends

from regserver.api.deps import get_registration_service
from regserver.models.user import UserCreate, UserPublic
from regserver.schemas.response import RegistrationResponse
from regserver.services.registration_service import RegistrationService

router = APIRouter()


@router.post("/users", response_model=RegistrationResponse, status_code=201)
async def create_user(
    candidate: UserCreate,
    service: RegistrationService = Depends(get_registration_service),
):
    user_id = await service.register(candidate)
    return RegistrationResponse(user_id=user_id)


@router.get("/users", response_model=List[UserPublic])
async def list_users(
    service: RegistrationService = Depends(get_registration_service),
):
    return await service.list_all()
