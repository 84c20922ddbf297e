from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, Any, Literal

UserRole = Literal["admin", "user"]


class UserCreate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None
    company_id: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = "user"


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    company: Optional[str] = None
    company_id: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("role", "is_active", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None
    company_id: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = "user"
    created_at: Optional[Any] = None
    last_sign_in_at: Optional[Any] = None
    is_active: bool = True


class UserMutationResponse(BaseModel):
    success: bool = True
    id: Optional[str] = None
