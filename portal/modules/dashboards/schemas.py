from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class DashboardCreate(BaseModel):
    # title and embed_url are checked by the service so a missing value is a 400
    title: Optional[str] = None
    embed_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    thumbnail: Optional[str] = None
    is_new: bool = False
    workspaces: Optional[List[str]] = None


class DashboardUpdate(DashboardCreate):
    pass


class DashboardResponse(BaseModel):
    id: str
    title: str
    embed_url: str
    description: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    thumbnail: Optional[str] = None
    is_new: bool = False
    is_favorite: bool = False
    workspaces: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardMutationResponse(BaseModel):
    message: str
    dashboard: DashboardResponse


class CatalogDashboard(BaseModel):
    """Dashboard as shown in a user's catalog"""
    id: str
    title: str
    category: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    last_updated: Optional[datetime] = None
    is_favorite: bool = False
    thumbnail: Optional[str] = None
    is_new: bool = False
    embed_url: Optional[str] = None


class FavoriteRequest(BaseModel):
    dashboard_id: Optional[str] = None
    is_favorite: bool = False


class FavoriteResponse(BaseModel):
    success: bool = True
    is_favorite: bool
    message: Optional[str] = None
