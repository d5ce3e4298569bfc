from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from parish_api.auth.deps import get_current_user
from parish_api.core.db import get_db
from parish_api.models.user import User
from parish_api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    OnboardingRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from parish_api.schemas.user import ProfileOut
from parish_api.services import auth as auth_service
from parish_api.services import users as users_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    return auth_service.register(db, payload)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    return auth_service.login(db, payload)


@router.post("/refresh", response_model=TokenPair)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)) -> TokenPair:
    return auth_service.refresh(db, payload.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> None:
    auth_service.logout(db, user)


@router.get("/me", response_model=ProfileOut)
def me(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> ProfileOut:
    return users_service.profile(db, user)


@router.post("/me/community", response_model=AuthResponse)
def onboard_community(
    payload: OnboardingRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> AuthResponse:
    """Attach the caller to a community and create or update their member record."""
    return auth_service.onboard_community(db, user, payload)
