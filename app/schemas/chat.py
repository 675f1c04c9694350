from typing import Literal
from pydantic import BaseModel, Field

Role = Literal["system", "user", "assistant", "tool"]


class ChatMessage(BaseModel):
    role: Role
    content: str


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error message")
