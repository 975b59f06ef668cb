"""Media asset references attached to normalized items."""

import hashlib
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from content_importer.core.exceptions import ErrorSet, MediaAlreadyImportedError, ValidationError
from content_importer.utils.serialization import build_model, require_fields
from content_importer.utils.urls import url_extension, url_filename


class MediaType(str, Enum):
    """Broad media categories."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "ico", "bmp"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "mov", "avi", "wmv", "flv", "mkv"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "flac", "m4a", "aac"})
DOCUMENT_EXTENSIONS = frozenset({"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"})

_EXTENSION_TYPES: dict[str, MediaType] = {
    **{ext: MediaType.IMAGE for ext in IMAGE_EXTENSIONS},
    **{ext: MediaType.VIDEO for ext in VIDEO_EXTENSIONS},
    **{ext: MediaType.AUDIO for ext in AUDIO_EXTENSIONS},
    **{ext: MediaType.DOCUMENT for ext in DOCUMENT_EXTENSIONS},
}


def media_id_for_url(url: str) -> str:
    """Stable id for a media URL (MD5 hex digest)."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


class MediaReference(BaseModel):
    """One media asset, from remote URL to imported attachment.

    The reference is built with no attachment. ``mark_imported`` records the
    attachment once the asset has been sideloaded; it is the only change
    made after construction and cannot be repeated. The lifecycle fields
    are frozen against plain assignment.
    """

    id: str = Field(..., min_length=1)
    source_url: str
    type: MediaType = MediaType.IMAGE
    alt_text: str | None = None
    caption: str | None = None
    width: int | None = Field(None, ge=0)
    height: int | None = Field(None, ge=0)
    file_size: int | None = Field(None, ge=0)
    mime_type: str | None = None
    local_path: str | None = Field(None, frozen=True)
    attachment_id: int | None = Field(None, frozen=True)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_dimensions(self) -> "MediaReference":
        if (self.width is None) != (self.height is None):
            raise ValueError("width and height must be given together")
        return self

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_url(cls, url: str) -> "MediaReference":
        """Reference a URL, deriving the id and type from it."""
        return cls(
            id=media_id_for_url(url),
            source_url=url,
            type=cls.detect_type_from_url(url),
        )

    @staticmethod
    def detect_type_from_url(url: str) -> MediaType:
        """Classify a URL by its path extension, defaulting to image."""
        extension = url_extension(url)
        if extension is None:
            return MediaType.IMAGE
        return _EXTENSION_TYPES.get(extension, MediaType.IMAGE)

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "MediaReference":
        """Rebuild a reference from its serialized form.

        Raises:
            MissingRequiredFieldError: If id or source_url is absent.
            ValidationError: If a present value is malformed.
        """
        require_fields("MediaReference", data, ("id", "source_url"))
        return build_model(
            cls,
            {
                "id": data["id"],
                "source_url": data["source_url"],
                "type": data.get("type") or MediaType.IMAGE,
                "alt_text": data.get("alt_text"),
                "caption": data.get("caption"),
                "width": data.get("width"),
                "height": data.get("height"),
                "file_size": data.get("file_size"),
                "mime_type": data.get("mime_type"),
                "local_path": data.get("local_path"),
                "attachment_id": data.get("attachment_id"),
                "metadata": data.get("metadata") or {},
            },
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_image(self) -> bool:
        return self.type == MediaType.IMAGE

    def is_video(self) -> bool:
        return self.type == MediaType.VIDEO

    def is_audio(self) -> bool:
        return self.type == MediaType.AUDIO

    def is_document(self) -> bool:
        return self.type == MediaType.DOCUMENT

    def is_imported(self) -> bool:
        return self.attachment_id is not None

    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    def get_aspect_ratio(self) -> float | None:
        """Width divided by height, or None without usable dimensions."""
        if not self.has_dimensions() or not self.height:
            return None
        return self.width / self.height

    def get_extension(self) -> str | None:
        return url_extension(self.source_url)

    def get_filename(self) -> str | None:
        return url_filename(self.source_url)

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def mark_imported(self, attachment_id: int, local_path: str) -> None:
        """Record the attachment created for this asset.

        Raises:
            MediaAlreadyImportedError: If the reference was already imported.
            ValidationError: If the attachment id or local path is missing.
        """
        errors = ErrorSet()
        if attachment_id is None:
            errors.add("attachment_id", "required_field", "Attachment id is required.")
        if not local_path:
            errors.add("local_path", "required_field", "Local path is required.")
        if errors:
            raise ValidationError(errors)

        if self.is_imported():
            raise MediaAlreadyImportedError(
                f"Media {self.id} is already imported as attachment {self.attachment_id}",
                {"media_id": self.id, "attachment_id": self.attachment_id},
            )
        # Frozen fields are written through __dict__; this is their only writer
        self.__dict__.update(attachment_id=attachment_id, local_path=local_path)
        self.__pydantic_fields_set__.update({"attachment_id", "local_path"})

    def to_array(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_url": self.source_url,
            "type": self.type.value,
            "alt_text": self.alt_text,
            "caption": self.caption,
            "width": self.width,
            "height": self.height,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "local_path": self.local_path,
            "attachment_id": self.attachment_id,
            "metadata": dict(self.metadata),
        }
