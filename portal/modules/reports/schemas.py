from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ReportResponse(BaseModel):
    id: str
    name: str
    embed_url: str
    type: Optional[str] = None
    thumbnail: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    workspace: Optional[str] = None
