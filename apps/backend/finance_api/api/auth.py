from __future__ import annotations

from fastapi import APIRouter, Depends

from finance_api import models
from finance_api.core.deps import get_auth_service, get_current_user
from finance_api.schemas import (
    AuthOut,
    ForgotPasswordIn,
    LoginIn,
    MessageOut,
    ProfileUpdate,
    RegisterIn,
    ResetPasswordIn,
    UserOut,
)
from finance_api.services.auth_service import AuthService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    user, token = svc.register(payload)
    return AuthOut(user=UserOut.model_validate(user), token=token)


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    user, token = svc.login(payload.email, payload.password)
    return AuthOut(user=UserOut.model_validate(user), token=token)


@router.post("/forgot-password", response_model=MessageOut)
def forgot_password(payload: ForgotPasswordIn, svc: AuthService = Depends(get_auth_service)):
    svc.request_password_reset(payload.email)
    return MessageOut(message="Password reset instructions have been issued.")


@router.post("/reset-password", response_model=MessageOut)
def reset_password(payload: ResetPasswordIn, svc: AuthService = Depends(get_auth_service)):
    svc.reset_password(payload.token, payload.password)
    return MessageOut(message="Password has been reset.")


@router.get("/profile", response_model=UserOut)
def get_profile(current_user: models.User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    svc: AuthService = Depends(get_auth_service),
    current_user: models.User = Depends(get_current_user),
):
    return svc.update_profile(current_user.id, payload)
