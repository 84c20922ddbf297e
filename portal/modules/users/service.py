from supabase import Client
from portal.modules.users.schemas import UserCreate, UserUpdate, UserResponse, UserMutationResponse
from typing import List, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def auth_users_by_id(auth_users) -> Dict[str, Any]:
    # auth.admin.list_users() returns a list of users on supabase-py 2.x
    users = auth_users if isinstance(auth_users, list) else getattr(auth_users, "users", None) or []
    return {u.id: u for u in users}


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_users(self) -> List[UserResponse]:
        """Profiles merged with Supabase Auth users (created_at, last_sign_in_at, disabled flag)"""
        try:
            profiles = self.supabase.table("profiles").select("*").execute()
        except Exception as e:
            logger.error(f"Error fetching profiles: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        auth_by_id = {}
        try:
            auth_by_id = auth_users_by_id(self.supabase.auth.admin.list_users())
        except Exception as e:
            logger.error(f"Error listing auth users: {e}")

        users = []
        for profile in profiles.data or []:
            auth_user = auth_by_id.get(profile["id"])
            if auth_user is not None:
                app_metadata = getattr(auth_user, "app_metadata", None) or {}
                is_active = app_metadata.get("disabled") is not True
            else:
                is_active = profile.get("is_active") is not False
            users.append(UserResponse(
                id=profile["id"],
                email=profile.get("email"),
                name=profile.get("name"),
                company=profile.get("company"),
                company_id=profile.get("company_id"),
                phone=profile.get("phone"),
                role=profile.get("role") or "user",
                created_at=getattr(auth_user, "created_at", None) or profile.get("created_at"),
                last_sign_in_at=getattr(auth_user, "last_sign_in_at", None),
                is_active=is_active
            ))
        logger.info(f"{len(users)} users found")
        return users

    def create_user(self, user_data: UserCreate) -> UserMutationResponse:
        """Create a confirmed auth user and its profile"""
        if not user_data.email or not user_data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")

        try:
            response = self.supabase.auth.admin.create_user({
                "email": user_data.email,
                "password": user_data.password,
                "email_confirm": True
            })
        except Exception as e:
            logger.error(f"Error creating auth user {user_data.email}: {e}")
            message = str(e)
            if "already" in message.lower():
                raise HTTPException(status_code=409, detail="User already exists")
            raise HTTPException(status_code=500, detail=message)

        if not response.user:
            raise HTTPException(status_code=500, detail="Failed to create user")

        user_id = response.user.id
        try:
            self.supabase.table("profiles").upsert({
                "id": user_id,
                "email": user_data.email,
                "name": user_data.name or "",
                "company": user_data.company or "",
                "company_id": user_data.company_id,
                "phone": user_data.phone or "",
                "role": user_data.role or "user",
                "is_active": True,
                "updated_at": datetime.now(timezone.utc).isoformat()
            }).execute()
        except Exception as e:
            logger.error(f"Error creating profile for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"User created but profile failed: {str(e)}")

        logger.info(f"User {user_data.email} created")
        return UserMutationResponse(success=True, id=user_id)

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserMutationResponse:
        """Update profile; is_active is mirrored into app_metadata.disabled (best-effort)"""
        update_data = user_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating profile {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")

        if user_data.is_active is not None:
            try:
                self.supabase.auth.admin.update_user_by_id(
                    user_id,
                    {"app_metadata": {"disabled": not user_data.is_active}}
                )
                logger.info(f"User {user_id} {'activated' if user_data.is_active else 'deactivated'}")
            except Exception as e:
                logger.error(f"Error updating activation status for {user_id}: {e}")

        return UserMutationResponse(success=True, id=user_id)

    def delete_user(self, user_id: str) -> UserMutationResponse:
        """Delete the auth user, then its profile row (best-effort)"""
        try:
            self.supabase.auth.admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"Error deleting auth user {user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        try:
            self.supabase.table("profiles").delete().eq("id", user_id).execute()
        except Exception as e:
            logger.warning(f"Error deleting profile {user_id}: {e}")

        logger.info(f"User {user_id} deleted")
        return UserMutationResponse(success=True, id=user_id)
