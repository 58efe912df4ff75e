# Process entrypoint: python -m flash_gateway
# Refuses to start (exit status 1) when GEMINI_API_KEY is missing.

import sys

import structlog
import uvicorn
from pydantic import ValidationError

from flash_gateway.config import MISSING_API_KEY_MESSAGE, get_settings, is_missing_api_key

logger = structlog.get_logger(__name__)


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        if is_missing_api_key(exc):
            sys.exit(MISSING_API_KEY_MESSAGE)
        sys.exit(f"Invalid configuration: {exc}")

    logger.info("server_starting", host=settings.host, port=settings.port)
    uvicorn.run(
        "flash_gateway.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
