# ─────────────────────────────────────────────────────────────────────────────
# POST /generate-* — text and multimodal generation endpoints (THIN)
# ─────────────────────────────────────────────────────────────────────────────
# Pipeline per request: upload gate (dependency) → prompt → generation.
# Every failure is raised; exceptions.py turns it into {"message": ...}.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import APIRouter, Depends, Request
from python_multipart.multipart import parse_options_header

from flash_gateway.dependencies import get_generation_gateway
from flash_gateway.exceptions import (
    AttachmentRequiredError,
    MalformedBodyError,
    PromptRequiredError,
)
from flash_gateway.media import AttachmentCategory
from flash_gateway.schemas import GenerationResponse, TextPromptRequest
from flash_gateway.services.generation import GenerationGateway
from flash_gateway.uploads import IncomingAttachment, IngestedForm, UploadGate
from flash_gateway.validation import validate_prompt

router = APIRouter()

DEFAULT_DOCUMENT_PROMPT = "Please summarize the content of the document."
DEFAULT_AUDIO_PROMPT = "Please transcribe the audio content."


def _require_attachment(
    form: IngestedForm, category: AttachmentCategory
) -> IncomingAttachment:
    if form.attachment is None:
        raise AttachmentRequiredError(category.value)
    return form.attachment


def _is_json(content_type: str | None) -> bool:
    mime, _ = parse_options_header(content_type)
    return mime == b"application/json" or mime.endswith(b"+json")


async def read_json_prompt(request: Request) -> object:
    """The raw ``prompt`` of a JSON object body.

    Bodies under any other content type are not parsed and carry no prompt,
    and neither does a JSON array. Undecodable JSON and JSON scalars are
    rejected as malformed.
    """
    if not _is_json(request.headers.get("Content-Type")):
        return None
    if not await request.body():
        return None
    try:
        payload = await request.json()
    except ValueError as exc:
        raise MalformedBodyError() from exc

    if isinstance(payload, list):
        return None
    if not isinstance(payload, dict):
        raise MalformedBodyError()
    return TextPromptRequest.model_validate(payload).prompt


@router.post(
    "/generate-text",
    response_model=GenerationResponse,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": TextPromptRequest.model_json_schema()}},
        }
    },
)
async def generate_text(
    raw_prompt: object = Depends(read_json_prompt),
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> GenerationResponse:
    """Generate text from a JSON ``{"prompt": ...}`` body."""
    prompt = validate_prompt(raw_prompt)
    if prompt is None:
        raise PromptRequiredError()

    result = await gateway.generate(prompt, operation="text")
    return GenerationResponse(result=result)


@router.post("/generate-from-image", response_model=GenerationResponse)
async def generate_from_image(
    form: IngestedForm = Depends(UploadGate(AttachmentCategory.image)),
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> GenerationResponse:
    """Multipart ``prompt`` + ``image``. Both are required, prompt checked first.

    Unlike the document and audio routes there is no default prompt here;
    existing clients rely on the 400.
    """
    prompt = validate_prompt(form.prompt)
    if prompt is None:
        raise PromptRequiredError()
    attachment = _require_attachment(form, AttachmentCategory.image)

    result = await gateway.generate(prompt, attachment, operation="image")
    return GenerationResponse(result=result)


@router.post("/generate-from-document", response_model=GenerationResponse)
async def generate_from_document(
    form: IngestedForm = Depends(UploadGate(AttachmentCategory.document)),
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> GenerationResponse:
    """Multipart ``document`` (required) + optional ``prompt``; defaults to a summary."""
    attachment = _require_attachment(form, AttachmentCategory.document)
    prompt = validate_prompt(form.prompt) or DEFAULT_DOCUMENT_PROMPT

    result = await gateway.generate(prompt, attachment, operation="document")
    return GenerationResponse(result=result)


@router.post("/generate-from-audio", response_model=GenerationResponse)
async def generate_from_audio(
    form: IngestedForm = Depends(UploadGate(AttachmentCategory.audio)),
    gateway: GenerationGateway = Depends(get_generation_gateway),
) -> GenerationResponse:
    """Multipart ``audio`` (required) + optional ``prompt``; defaults to a transcript."""
    attachment = _require_attachment(form, AttachmentCategory.audio)
    prompt = validate_prompt(form.prompt) or DEFAULT_AUDIO_PROMPT

    result = await gateway.generate(prompt, attachment, operation="audio")
    return GenerationResponse(result=result)
