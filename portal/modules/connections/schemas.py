from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any
from datetime import datetime

CONNECTION_STATUSES = ("active", "pending", "failed")


class ConnectionCreate(BaseModel):
    name: str
    type: str
    description: Optional[str] = None
    logo: Optional[str] = None
    config: Optional[Dict[str, Any]] = None

    @field_validator("name", "type")
    @classmethod
    def not_blank(cls, value):
        if not value or not value.strip():
            raise ValueError("Name and type are required")
        return value.strip()


class ConnectionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    status: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class ConnectionStatusUpdate(BaseModel):
    status: str


class ConnectionRow(BaseModel):
    """Connection as stored"""
    id: str
    name: str
    type: str
    description: Optional[str] = None
    status: str
    config: Optional[Dict[str, Any]] = None
    logo_url: Optional[str] = None
    last_sync: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConnectionSummary(BaseModel):
    """Connection shaped for display, with a resolved logo URL"""
    id: str
    name: str
    logo: Optional[str] = None
    status: str
    last_sync: Optional[datetime] = None
    type: str
    description: Optional[str] = None


class ConnectionResponse(ConnectionSummary):
    config: Optional[Dict[str, Any]] = None
