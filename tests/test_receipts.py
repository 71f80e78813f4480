import base64
from io import BytesIO

import pytest
from PIL import Image

from club_scheduler.domain.errors import TruncationRisk, ValidationFailure
from club_scheduler.services.receipts import (
    ReceiptIntake,
    ReceiptUpload,
    decode_upload_text,
    resolve_content_type,
)

PDF_BYTES = b"%PDF-1.4\n%receipt\n"


def _png(width: int, height: int) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (width, height), (20, 120, 40, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_pdf_is_encoded_unchanged() -> None:
    intake = ReceiptIntake()
    upload = ReceiptUpload("court1.pdf", "application/pdf", PDF_BYTES)

    encoded = intake.prepare(upload)

    prefix, _, payload = encoded.partition(",")
    assert prefix == "data:application/pdf;base64"
    assert base64.b64decode(payload) == PDF_BYTES


def test_image_is_downscaled_to_jpeg() -> None:
    intake = ReceiptIntake(max_dimension=100)
    upload = ReceiptUpload("court2.png", "image/png", _png(400, 200))

    encoded = intake.prepare(upload)

    prefix, _, payload = encoded.partition(",")
    assert prefix == "data:image/jpeg;base64"
    with Image.open(BytesIO(base64.b64decode(payload))) as image:
        assert image.format == "JPEG"
        assert image.size == (100, 50)


def test_unsupported_type_is_rejected() -> None:
    upload = ReceiptUpload("notes.txt", "text/plain", b"hello")

    with pytest.raises(ValidationFailure, match="Unsupported file type"):
        ReceiptIntake().prepare(upload)


def test_oversized_file_is_rejected() -> None:
    intake = ReceiptIntake(max_bytes=10)
    upload = ReceiptUpload("court1.pdf", "application/pdf", PDF_BYTES)

    with pytest.raises(ValidationFailure, match="under"):
        intake.prepare(upload)


def test_unreadable_image_is_rejected() -> None:
    upload = ReceiptUpload("court1.png", "image/png", b"not a png")

    with pytest.raises(ValidationFailure, match="Could not read image"):
        ReceiptIntake().prepare(upload)


def test_long_encoding_requires_confirmation() -> None:
    intake = ReceiptIntake(text_limit=20)
    upload = ReceiptUpload("court1.pdf", "application/pdf", PDF_BYTES)

    with pytest.raises(TruncationRisk) as excinfo:
        intake.prepare(upload)

    assert excinfo.value.limit == 20
    assert excinfo.value.encoded_length > 20
    assert len(intake.prepare(upload, confirm_truncation=True)) > 20


def test_content_type_falls_back_to_suffix() -> None:
    upload = ReceiptUpload("Receipt.JPG", "application/octet-stream", b"")

    assert resolve_content_type(upload) == "image/jpeg"
    assert resolve_content_type(ReceiptUpload("scan.pdf", None, b"")) == (
        "application/pdf"
    )


def test_decode_upload_text_accepts_data_urls() -> None:
    payload = base64.b64encode(PDF_BYTES).decode("ascii")

    assert decode_upload_text(payload) == PDF_BYTES
    assert decode_upload_text(f"data:application/pdf;base64,{payload}") == PDF_BYTES


def test_decode_upload_text_rejects_garbage() -> None:
    with pytest.raises(ValidationFailure):
        decode_upload_text("not base64!")


def test_oversized_image_dimensions_are_rejected(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    upload = ReceiptUpload("court1.png", "image/png", _png(100, 100))

    with pytest.raises(ValidationFailure, match="Could not read image"):
        ReceiptIntake().prepare(upload)
