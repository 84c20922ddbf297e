from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{label} is required")
    return value.strip()


class CompanyCreate(BaseModel):
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        return _require_text(value, "Company name")


class CompanyUpdate(CompanyCreate):
    pass


class CompanyResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    user_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
