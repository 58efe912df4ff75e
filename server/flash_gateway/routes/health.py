# ─────────────────────────────────────────────────────────────────────────────
# Status Routes — root banner and liveness probe
# ─────────────────────────────────────────────────────────────────────────────
#   /        → banner, kept for existing clients that ping the root.
#   /health  → liveness probe. No deps, no I/O.
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter

from flash_gateway.schemas import LivenessResponse, MessageResponse

router = APIRouter()


@router.get("/", response_model=MessageResponse)
async def root() -> MessageResponse:
    return MessageResponse(message="Gemini Flash API is running")


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe — is the process alive?"""
    return LivenessResponse(status="ok")
