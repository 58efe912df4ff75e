"""Services — the single boundary call to the generation API."""

from flash_gateway.services.generation import GEMINI_MODEL, GenerationGateway

__all__ = [
    "GEMINI_MODEL",
    "GenerationGateway",
]
