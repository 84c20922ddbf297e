"""
Core dependencies for route protection and the admin permission gate
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from portal.database.supabase_client import get_supabase, get_service_supabase
from portal.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, service_supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the session user from the bearer token; deactivated accounts get 403"""
    user_data = auth_service.get_current_user(token)
    if not auth_service.is_user_active(user_data["id"], user_data.get("app_metadata", {})):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User inactive")
    return user_data


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict[str, Any]]:
    """Session user when a valid bearer token is present, otherwise None"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        user_data = auth_service.get_current_user(credentials.credentials)
    except HTTPException:
        return None
    if not auth_service.is_user_active(user_data["id"], user_data.get("app_metadata", {})):
        return None
    return user_data


def check_is_admin(user_data: Optional[Dict[str, Any]], supabase: Client) -> bool:
    """True only when the user's profile role is 'admin'. Lookup failures count as non-admin."""
    if not user_data or not user_data.get("id"):
        return False
    try:
        role = AuthService(supabase).lookup_role(user_data["id"], user_data.get("email"))
    except Exception as e:
        logger.error("Error checking admin privileges: %s", e)
        return False
    return role == "admin"


def require_admin(
    user_data: Dict[str, Any] = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> Dict[str, Any]:
    """Dependency for admin-only routes: 401 without a session, 403 for non-admins"""
    if not check_is_admin(user_data, supabase):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Only administrators can access this resource."
        )
    return user_data


def check_workspace_role(
    workspace_id: str,
    user_data: Dict[str, Any],
    supabase: Client,
    allowed_roles=("owner", "admin"),
    detail: str = "Permission denied",
) -> Dict[str, Any]:
    """Require the user's workspace_users role to be one of allowed_roles"""
    try:
        result = supabase.table("workspace_users")\
            .select("role")\
            .eq("workspace_id", workspace_id)\
            .eq("user_id", user_data["id"])\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error("Error checking workspace role: %s", e)
        raise HTTPException(status_code=500, detail="Failed to check workspace role")

    if not result.data or result.data[0].get("role") not in allowed_roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )
    return user_data
