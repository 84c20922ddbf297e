from fastapi import APIRouter, Depends
from portal.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    RefreshRequest, PasswordResetRequest, PasswordUpdateRequest,
    SessionResponse, RoleResponse
)
from portal.modules.auth.service import AuthService
from portal.core.dependencies import get_auth_service, get_current_token, get_current_user
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token. Deactivated accounts are refused with 403."""
    return service.login(login_data)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    refresh_data: RefreshRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.refresh(refresh_data.refresh_token)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Session check: current user, profile data and admin flag. Inactive users are refused by get_current_user."""
    profile = service.get_profile(current_user["id"]) or {}
    email = current_user.get("email") or ""
    role = profile.get("role") or "user"
    return SessionResponse(
        id=current_user["id"],
        email=email,
        name=profile.get("name") or current_user["user_metadata"].get("name") or email.split("@")[0],
        role=role,
        is_admin=role == "admin",
        company_id=profile.get("company_id"),
        user_metadata=current_user["user_metadata"],
        last_sign_in_at=str(current_user["last_sign_in_at"]) if current_user.get("last_sign_in_at") else None
    )


@router.get("/role", response_model=RoleResponse)
async def get_role(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Role lookup for the current user (is admin? which workspace? owner?)"""
    return service.get_role(current_user)


@router.post("/password-reset", status_code=200)
async def request_password_reset(
    request: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service)
):
    service.request_password_reset(request.email)
    return {"message": "If the e-mail is registered, a recovery link has been sent"}


@router.post("/password", status_code=200)
async def update_password(
    request: PasswordUpdateRequest,
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password for the authenticated user (reset-password page)"""
    service.update_password(current_user["id"], request.password)
    return {"message": "Password updated successfully"}
