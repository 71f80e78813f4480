"""Receipt intake: type and size checks, image recompression, text encoding."""

import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import PurePath

from PIL import Image, ImageOps, UnidentifiedImageError

from club_scheduler.domain.errors import TruncationRisk, ValidationFailure

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
_SUFFIX_TYPES = {
    ".pdf": PDF_TYPE,
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


@dataclass(frozen=True)
class ReceiptUpload:
    """A file submitted for a court receipt."""

    filename: str
    content_type: str | None
    data: bytes


@dataclass
class ReceiptIntake:
    """Turns uploaded receipts into text that fits the store's text field."""

    max_bytes: int = 10 * 1024 * 1024
    max_dimension: int = 1600
    jpeg_quality: int = 80
    text_limit: int = 100_000

    def prepare(self, upload: ReceiptUpload, confirm_truncation: bool = False) -> str:
        """Validate and encode an upload as a ``data:`` URL.

        Raises ``TruncationRisk`` when the encoded text would exceed the
        store's text ceiling and the caller has not confirmed.
        """
        content_type = resolve_content_type(upload)
        if content_type != PDF_TYPE and content_type not in IMAGE_TYPES:
            raise ValidationFailure(
                f"Unsupported file type for {upload.filename}; "
                "upload a PDF or an image"
            )
        if len(upload.data) > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise ValidationFailure(f"Receipt files must be under {limit_mb:.0f} MB")

        data = upload.data
        if content_type in IMAGE_TYPES:
            data = self._recompress(data, upload.filename)
            content_type = "image/jpeg"

        encoded = to_data_url(content_type, data)
        if len(encoded) > self.text_limit and not confirm_truncation:
            raise TruncationRisk(len(encoded), self.text_limit)
        if len(encoded) > self.text_limit:
            logger.warning(
                "Storing %s anyway; %s of %s characters will be kept",
                upload.filename,
                self.text_limit,
                len(encoded),
            )
        return encoded

    def _recompress(self, data: bytes, filename: str) -> bytes:
        try:
            with Image.open(BytesIO(data)) as source:
                image = ImageOps.exif_transpose(source)
                image.thumbnail((self.max_dimension, self.max_dimension))
                if image.mode != "RGB":
                    image = image.convert("RGB")
                buffer = BytesIO()
                image.save(
                    buffer, format="JPEG", quality=self.jpeg_quality, optimize=True
                )
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise ValidationFailure(f"Could not read image {filename}") from exc
        return buffer.getvalue()


def resolve_content_type(upload: ReceiptUpload) -> str:
    """Prefer the declared type; fall back to the file suffix."""
    declared = (upload.content_type or "").split(";")[0].strip().lower()
    if declared == "image/jpg":
        declared = "image/jpeg"
    if declared and declared != "application/octet-stream":
        return declared
    return _SUFFIX_TYPES.get(PurePath(upload.filename).suffix.lower(), declared)


def to_data_url(content_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def decode_upload_text(text: str) -> bytes:
    """Decode client-encoded file text, with or without a data URL prefix."""
    payload = text.partition(",")[2] if text.startswith("data:") else text
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationFailure("File data is not valid base64") from exc
