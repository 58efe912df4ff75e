# ─────────────────────────────────────────────────────────────────────────────
# Pydantic v2 Request / Response Schemas
# ─────────────────────────────────────────────────────────────────────────────


from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TextPromptRequest(BaseModel):
    """JSON body of POST /generate-text.

    ``prompt`` is deliberately untyped: presence and shape are judged by
    validate_prompt so that every bad prompt yields the same 400.
    """

    model_config = ConfigDict(extra="allow")

    prompt: Any = None


class GenerationResponse(BaseModel):
    """Generated text, verbatim from the model."""

    result: str | None = Field(..., description="Model output text")


class MessageResponse(BaseModel):
    """Status message or error description."""

    message: str


class LivenessResponse(BaseModel):
    """Liveness probe — minimal, near-zero cost."""

    status: str = "ok"
