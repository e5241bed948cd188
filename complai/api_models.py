"""
API request/response models for the Complai service.

All models use Pydantic v2 for validation and serialization. Field names
on the wire are camelCase (``conversationId``, ``errorCode``); snake_case
is accepted on input as well.
"""

from pydantic import BaseModel, ConfigDict, Field

from complai.schemas import ComplaintResponse


# --- Requests ---

class AskRequest(BaseModel):
    """Request body for a question about El Prat."""
    model_config = ConfigDict(populate_by_name=True)

    # Emptiness is checked by the orchestrator so it maps to errorCode=VALIDATION
    text: str | None = Field(
        default=None,
        description="The question to ask",
        json_schema_extra={"example": "Where is the recycling center in El Prat de Llobregat?"},
    )
    conversation_id: str | None = Field(
        default=None,
        alias="conversationId",
        description="Optional id to keep context across requests",
    )


class RedactRequest(BaseModel):
    """Request body for drafting a complaint letter."""
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = Field(
        default=None,
        description="Free-text complaint",
        json_schema_extra={"example": "Night-time noise from the airport in El Prat de Llobregat"},
    )
    format: str | None = Field(
        default=None,
        description="Output format: json, pdf or auto (default auto)",
    )
    conversation_id: str | None = Field(
        default=None,
        alias="conversationId",
    )


# --- Responses ---

class PublicResponse(BaseModel):
    """JSON body returned by /complai/ask and /complai/redact."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str | None = None
    error: str | None = None
    error_code: int = Field(default=0, alias="errorCode")

    @classmethod
    def from_result(cls, result: ComplaintResponse) -> "PublicResponse":
        return cls(
            success=result.success,
            message=result.message,
            error=result.error,
            error_code=int(result.error_kind),
        )


class HomeResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """System health status."""
    status: str
    provider: str
    active_conversations: int
