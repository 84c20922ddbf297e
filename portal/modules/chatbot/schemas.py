from pydantic import BaseModel
from typing import Any


class ChatRequest(BaseModel):
    # Any so that a non-string message is a 400 from the service, not a schema error
    message: Any = None


class ChatResponse(BaseModel):
    response: str
