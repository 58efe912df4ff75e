# ─────────────────────────────────────────────────────────────────────────────
# Media Classifier — declared content type → attachment category admission
# ─────────────────────────────────────────────────────────────────────────────
# Allow-lists are declared independently per category (never derived from one
# another). Order matters: it is the order shown in the rejection message.
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum


class AttachmentCategory(StrEnum):
    """Attachment category. The value doubles as the multipart field name."""

    image = "image"
    document = "document"
    audio = "audio"


IMAGE_CONTENT_TYPES: tuple[str, ...] = (
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
)

DOCUMENT_CONTENT_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)

AUDIO_CONTENT_TYPES: tuple[str, ...] = (
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/ogg",
)

ALLOWED_CONTENT_TYPES: Mapping[AttachmentCategory, tuple[str, ...]] = {
    AttachmentCategory.image: IMAGE_CONTENT_TYPES,
    AttachmentCategory.document: DOCUMENT_CONTENT_TYPES,
    AttachmentCategory.audio: AUDIO_CONTENT_TYPES,
}


@dataclass(frozen=True)
class MediaVerdict:
    """Outcome of classifying one declared content type."""

    category: AttachmentCategory
    content_type: str  # normalized (lower-cased)
    accepted: bool
    message: str | None = None


def invalid_type_message(category: AttachmentCategory) -> str:
    """Client-facing rejection message listing the category's allow-list."""
    return f"Invalid file type. Allowed types: {', '.join(ALLOWED_CONTENT_TYPES[category])}"


def classify(category: AttachmentCategory, declared_content_type: str | None) -> MediaVerdict:
    """Admit or reject a declared content type for ``category``.

    Comparison is case-insensitive; a missing type is treated as ``""``
    and therefore always rejected.
    """
    normalized = (declared_content_type or "").lower()
    if normalized in ALLOWED_CONTENT_TYPES[category]:
        return MediaVerdict(category=category, content_type=normalized, accepted=True)
    return MediaVerdict(
        category=category,
        content_type=normalized,
        accepted=False,
        message=invalid_type_message(category),
    )
