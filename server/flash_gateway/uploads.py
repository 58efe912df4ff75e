# ─────────────────────────────────────────────────────────────────────────────
# Upload Gate — single-attachment multipart ingestion per category
# ─────────────────────────────────────────────────────────────────────────────
# Runs as a FastAPI dependency, so every rejection (type, size, stray file)
# short-circuits before the route body and its prompt checks.
#
# Order of checks per file part: field → declared type → size.
# Field and type are decided from the part headers, before any file byte is
# accepted. Size is counted as the part streams in and parsing stops the
# moment the ceiling is crossed. Accepted parts never leave memory.
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import AsyncGenerator
from contextlib import aclosing
from dataclasses import dataclass

import structlog
from fastapi import Request
from python_multipart.multipart import parse_options_header
from starlette.datastructures import FormData, Headers, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException, MultiPartParser

from flash_gateway.exceptions import (
    FileTooLargeError,
    UnexpectedFieldError,
    UnsupportedMediaTypeError,
)
from flash_gateway.media import AttachmentCategory, classify, invalid_type_message

logger = structlog.get_logger(__name__)

MAX_UPLOAD_SIZE_MB = 5
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024

_READ_CHUNK_BYTES = 64 * 1024

PROMPT_FIELD = "prompt"


@dataclass(frozen=True)
class IncomingAttachment:
    """An admitted attachment, fully buffered in memory for one request."""

    data: bytes
    content_type: str  # as declared by the client
    size_bytes: int


@dataclass(frozen=True)
class IngestedForm:
    """What the gate hands to a route: the raw prompt value plus the attachment."""

    prompt: object
    attachment: IncomingAttachment | None


def _admit_file(
    category: AttachmentCategory, field_name: str, declared: str, files_seen: int
) -> None:
    """Field and type admission for the ``files_seen``-th file part of a request."""
    if field_name != category.value:
        raise UnexpectedFieldError(field_name)
    if files_seen > 1:
        raise UnexpectedFieldError(field_name)
    if not classify(category, declared).accepted:
        raise UnsupportedMediaTypeError(invalid_type_message(category))


class AttachmentParser(MultiPartParser):
    """Multipart parser that gates file parts while the body streams in.

    A file part is admitted or rejected as soon as its headers are complete,
    and its running size is checked on every chunk, so a rejected upload is
    never read further than the chunk that decided it. The spool threshold
    sits at the upload ceiling, so admitted files stay in memory.
    """

    spool_max_size = MAX_UPLOAD_SIZE_BYTES

    def __init__(
        self,
        category: AttachmentCategory,
        headers: Headers,
        stream: AsyncGenerator[bytes, None],
    ) -> None:
        super().__init__(headers, stream)
        self.category = category
        self._files_seen = 0
        self._current_file_bytes = 0

    def on_headers_finished(self) -> None:
        super().on_headers_finished()
        upload = self._current_part.file
        if upload is None:
            return
        self._files_seen += 1
        self._current_file_bytes = 0
        _admit_file(
            self.category,
            self._current_part.field_name,
            upload.content_type or "",
            self._files_seen,
        )

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._current_part.file is not None:
            self._current_file_bytes += end - start
            if self._current_file_bytes > MAX_UPLOAD_SIZE_BYTES:
                raise FileTooLargeError(MAX_UPLOAD_SIZE_MB)
        super().on_part_data(data, start, end)


async def _buffer_upload(upload: UploadFile) -> bytes:
    """Copy an upload into memory, failing as soon as it crosses the ceiling."""
    if upload.size is not None and upload.size > MAX_UPLOAD_SIZE_BYTES:
        raise FileTooLargeError(MAX_UPLOAD_SIZE_MB)

    buffer = bytearray()
    while chunk := await upload.read(_READ_CHUNK_BYTES):
        buffer.extend(chunk)
        if len(buffer) > MAX_UPLOAD_SIZE_BYTES:
            raise FileTooLargeError(MAX_UPLOAD_SIZE_MB)
    return bytes(buffer)


async def ingest(category: AttachmentCategory, form: FormData) -> IncomingAttachment | None:
    """Admit at most one file for ``category`` from a parsed form.

    Returns None when the category's field carries no file; deciding whether
    that is an error is up to the route.

    Raises:
        UnexpectedFieldError: a file under another field, or several files
            under the category field.
        UnsupportedMediaTypeError: declared type outside the allow-list.
        FileTooLargeError: more than MAX_UPLOAD_SIZE_BYTES of data.
    """
    upload: UploadFile | None = None
    declared = ""
    files_seen = 0
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        files_seen += 1
        declared = value.content_type or ""
        _admit_file(category, key, declared, files_seen)
        upload = value

    if upload is None:
        return None

    data = await _buffer_upload(upload)
    logger.debug(
        "attachment_ingested",
        category=category.value,
        content_type=declared,
        size_bytes=len(data),
    )
    return IncomingAttachment(data=data, content_type=declared, size_bytes=len(data))


def _single_value(form: FormData, key: str) -> object:
    """A field supplied exactly once, else None (repeats count as not supplied)."""
    values = form.getlist(key)
    return values[0] if len(values) == 1 else None


class UploadGate:
    """FastAPI dependency admitting one attachment of a given category.

    Usage: ``form: IngestedForm = Depends(UploadGate(AttachmentCategory.image))``
    """

    def __init__(self, category: AttachmentCategory) -> None:
        self.category = category

    async def _read_form(self, request: Request) -> FormData:
        content_type, _ = parse_options_header(request.headers.get("Content-Type"))
        if content_type != b"multipart/form-data":
            # url-encoded bodies carry no files; anything else parses as empty
            return await request.form()

        try:
            async with aclosing(request.stream()) as stream:
                parser = AttachmentParser(self.category, request.headers, stream)
                return await parser.parse()
        except MultiPartException as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc

    async def __call__(self, request: Request) -> IngestedForm:
        form = await self._read_form(request)
        try:
            attachment = await ingest(self.category, form)
            prompt = _single_value(form, PROMPT_FIELD)
        finally:
            await form.close()
        return IngestedForm(prompt=prompt, attachment=attachment)
