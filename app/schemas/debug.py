from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., description="Health status of the application")

class ModelInfo(BaseModel):
    model: str = Field(..., description="Chat model identifier")
    system_prompt_enabled: bool = Field(..., description="Whether the system prompt is prepended to the history")
    call_shape: str = Field(..., description="Preferred chat engine calling convention")
    retrieval_mode: str = Field(..., description="Document retrieval mode: sparse | dense")
