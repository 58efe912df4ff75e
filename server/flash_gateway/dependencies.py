# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# No global variables. Every dependency is explicit in endpoint signatures.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from flash_gateway.services.generation import GenerationGateway


def get_generation_gateway(request: Request) -> GenerationGateway:
    """Inject GenerationGateway into endpoints via Depends()."""
    return request.app.state.generation_gateway  # type: ignore[no-any-return]
