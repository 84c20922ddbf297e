from fastapi import APIRouter, Depends
from portal.database.supabase_client import get_service_supabase
from portal.modules.users.schemas import UserCreate, UserUpdate, UserResponse, UserMutationResponse
from portal.modules.users.service import UserService
from portal.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_service_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """List all users with their activation status (admin only)"""
    return service.list_users()


@router.post("", response_model=UserMutationResponse, status_code=201)
async def create_user(
    user_body: UserCreate,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Create a user and profile (admin only)"""
    return service.create_user(user_body)


@router.put("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    user_id: str,
    user_body: UserUpdate,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return service.update_user(user_id, user_body)


@router.delete("/{user_id}", response_model=UserMutationResponse)
async def delete_user(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return service.delete_user(user_id)
