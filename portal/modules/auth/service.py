import hashlib
import time
from supabase import Client
from portal.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, RoleResponse
)
from portal.config import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

MIN_PASSWORD_LENGTH = 6


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cached_user(key: str, now: float) -> Optional[Dict[str, Any]]:
    entry = _AUTH_USER_CACHE.get(key)
    if entry is None:
        return None
    user_data, expiry = entry
    if now >= expiry:
        del _AUTH_USER_CACHE[key]
        return None
    return user_data


def _cache_user(key: str, user_data: Dict[str, Any], now: float) -> None:
    """Store a resolved user. A full cache drops its expired entries first."""
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        for stale in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if now >= expiry]:
            del _AUTH_USER_CACHE[stale]
    if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
        _AUTH_USER_CACHE[key] = (user_data, now + _AUTH_CACHE_TTL_SEC)


def _session_user(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "last_sign_in_at": getattr(user, "last_sign_in_at", None),
    }


class AuthService:
    def __init__(self, supabase: Client, service_supabase: Optional[Client] = None):
        self.supabase = supabase
        # Profile lookups and admin calls need the service-role client
        self.service_supabase = service_supabase or supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.name:
                user_metadata["name"] = register_data.name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth and refuse deactivated accounts"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            logger.warning("Login failed for %s: %s", login_data.email, error_message)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")

        user = auth_response.user
        if not self.is_user_active(user.id, user.app_metadata or {}):
            logger.warning("Login attempt by inactive user %s", login_data.email)
            self.logout(auth_response.session.access_token)
            raise HTTPException(status_code=403, detail="User inactive")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            token_type="bearer",
            user_id=user.id,
            email=user.email or login_data.email
        )

    def refresh(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new session"""
        try:
            auth_response = self.supabase.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.warning("Token refresh failed: %s", e)
            raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

        if not auth_response.session or not auth_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

        user = auth_response.user
        if not self.is_user_active(user.id, user.app_metadata or {}):
            logger.warning("Refresh attempt by inactive user %s", user.id)
            self.logout(auth_response.session.access_token)
            raise HTTPException(status_code=403, detail="User inactive")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or ""
        )

    def is_user_active(self, user_id: str, app_metadata: Dict[str, Any]) -> bool:
        """Inactive when app_metadata.disabled is set or the profile is flagged inactive"""
        if app_metadata.get("disabled") is True:
            return False
        try:
            result = self.service_supabase.table("profiles")\
                .select("is_active")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.warning("Could not read profile status for %s: %s", user_id, e)
            return True
        if result and result.data and result.data.get("is_active") is False:
            return False
        return True

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the session user, cached for a short TTL per token hash"""
        key = _cache_key(token)
        now = time.monotonic()
        cached = _cached_user(key, now)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user_data = _session_user(user_response.user)
        _cache_user(key, user_data, now)
        return user_data

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(_cache_key(token), None)
        try:
            # Supabase access tokens are stateless JWTs; sign_out drops the refresh session
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.error("Error during logout: %s", e)
            return False

    def request_password_reset(self, email: str) -> None:
        """Send the recovery e-mail; failures are logged so the response never reveals whether the account exists"""
        try:
            self.supabase.auth.reset_password_for_email(
                email,
                {"redirect_to": settings.password_reset_redirect_url}
            )
            logger.info("Password reset requested for %s", email)
        except Exception as e:
            logger.error("Password reset request failed for %s: %s", email, e)

    def update_password(self, user_id: str, new_password: str) -> None:
        """Set a new password for the authenticated user"""
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=400,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        try:
            response = self.service_supabase.auth.admin.update_user_by_id(
                user_id,
                {"password": new_password}
            )
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error("Password update failed for %s: %s", user_id, e)
            raise HTTPException(status_code=500, detail=f"Failed to update password: {str(e)}")

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.service_supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            return result.data if result else None
        except Exception as e:
            logger.warning("Profile lookup failed for %s: %s", user_id, e)
            return None

    def lookup_role(self, user_id: str, email: Optional[str]) -> Optional[str]:
        """Profile role by id, falling back to a lookup by email. None when neither resolves."""
        try:
            result = self.service_supabase.table("profiles")\
                .select("role")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if result and result.data:
                return result.data.get("role")
        except Exception as e:
            logger.warning("Role lookup by id failed for %s: %s", user_id, e)

        if not email:
            return None
        try:
            result = self.service_supabase.table("profiles")\
                .select("role")\
                .eq("email", email)\
                .limit(1)\
                .execute()
            if result.data:
                return result.data[0].get("role")
        except Exception as e:
            logger.warning("Role lookup by email failed for %s: %s", email, e)
        return None

    def get_role(self, user_data: Dict[str, Any]) -> RoleResponse:
        """Profile role plus the user's workspace membership, if any"""
        role = self.lookup_role(user_data["id"], user_data.get("email")) or "user"
        workspace_id = None
        is_owner = False
        try:
            membership = self.service_supabase.table("workspace_users")\
                .select("workspace_id, role")\
                .eq("user_id", user_data["id"])\
                .limit(1)\
                .execute()
            if membership.data:
                workspace_id = membership.data[0]["workspace_id"]
                workspace = self.service_supabase.table("workspaces")\
                    .select("id, owner_id")\
                    .eq("id", workspace_id)\
                    .maybe_single()\
                    .execute()
                if workspace and workspace.data:
                    is_owner = workspace.data.get("owner_id") == user_data["id"]
        except Exception as e:
            logger.error("Error fetching workspace role for %s: %s", user_data["id"], e)
            raise HTTPException(status_code=500, detail="Failed to fetch user role")

        return RoleResponse(
            is_admin=role == "admin",
            role=role,
            workspace_id=workspace_id,
            is_owner=is_owner
        )
