"""Account endpoints for the signed-in user"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import get_client_ip, get_current_user
from ..database import get_db
from ..domain.users.schemas import (
    CurrentUserResponse,
    ProfileResponse,
    ProfileUpdate,
    SessionResponse,
)
from ..domain.users.service import UserService
from ..models import Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    current_user: Profile = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Profile, roles and permissions; the dashboard uses can_access_dashboard to gate its UI"""
    return service.get_me(current_user)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    data: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.update_me(current_user, data)


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def record_login(
    request: Request,
    current_user: Profile = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Called by the client right after sign-in"""
    return service.record_login(current_user, get_client_ip(request), request.headers.get("user-agent"))


@router.post("/sessions/logout")
async def record_logout(
    current_user: Profile = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.record_logout(current_user)


@router.get("/sessions", response_model=list[SessionResponse])
async def list_my_sessions(
    current_user: Profile = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.get_own_sessions(current_user)
