# Generation gateway: the only boundary call to the Gemini API.
# One call per request. No retry, no timeout override, no post-processing.


from typing import Any

import structlog
from google import genai
from google.genai import types
from opentelemetry import trace

from flash_gateway.exceptions import UpstreamFailure
from flash_gateway.uploads import IncomingAttachment

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

GEMINI_MODEL = "gemini-2.5-flash"


def build_contents(prompt: str, attachment: IncomingAttachment | None = None) -> list[types.Part]:
    """Text part first, then the attachment as inline data (base64 on the wire)."""
    parts = [types.Part.from_text(text=prompt)]
    if attachment is not None:
        parts.append(
            types.Part.from_bytes(data=attachment.data, mime_type=attachment.content_type)
        )
    return parts


def _upstream_message(exc: Exception) -> str:
    """The collaborator's own message: genai APIError.message, else str(exc)."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


class GenerationGateway:
    """Wraps the genai client. Created once at startup, shared read-only."""

    def __init__(self, client: genai.Client, model: str = GEMINI_MODEL) -> None:
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        prompt: str,
        attachment: IncomingAttachment | None = None,
        *,
        operation: str = "text",
    ) -> str | None:
        """Generate text for ``prompt`` (plus optional attachment).

        Returns the model's text verbatim (None if it produced no text).

        Raises:
            UpstreamFailure: any error raised by the genai client, carrying
                the client's message unmodified.
        """
        contents: Any = build_contents(prompt, attachment)
        with tracer.start_as_current_span("generate_content") as span:
            span.set_attribute("model", self._model)
            span.set_attribute("operation", operation)
            if attachment is not None:
                span.set_attribute("attachment.mime_type", attachment.content_type)
                span.set_attribute("attachment.size_bytes", attachment.size_bytes)

            try:
                response = await self._client.aio.models.generate_content(
                    model=self._model,
                    contents=contents,
                )
            except Exception as exc:
                message = _upstream_message(exc)
                span.record_exception(exc)
                logger.error(
                    f"{operation}_generation_failed",
                    error=message,
                    error_type=type(exc).__name__,
                    exc_info=exc,
                )
                raise UpstreamFailure(message, operation=operation) from exc

        return response.text
