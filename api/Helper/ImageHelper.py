#region image encoding
import base64
from typing import NamedTuple, Optional

from fastapi import UploadFile

from Helper.ValidationHelper import MAX_IMAGE_BYTES, ReviewValidationError, image_too_large

READ_CHUNK_SIZE = 64 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"

MAGIC_NUMBERS = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


class StoredImage(NamedTuple):
    data: bytes
    mime_type: str


class ImageHelper:
    @staticmethod
    def detect_mime_type(data: bytes, declared: Optional[str] = None) -> str:
        """
        Works out the MIME type of an image from its leading bytes.

        Args:
            data: The raw image bytes.
            declared: The content type the uploader claimed, used when the bytes are not recognised.

        Returns:
            The detected type, the declared ``image/*`` type, or ``application/octet-stream``.
        """
        for magic, mime_type in MAGIC_NUMBERS:
            if data.startswith(magic):
                return mime_type
        if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
            return "image/webp"
        if declared and declared.lower().startswith("image/"):
            return declared.lower()
        return DEFAULT_MIME_TYPE

    @staticmethod
    async def read_upload(upload: Optional[UploadFile], max_bytes: int = MAX_IMAGE_BYTES) -> Optional[StoredImage]:
        """
        Reads an uploaded file part fully into memory.

        Reading stops as soon as the size bound is crossed.

        Returns:
            The stored image, or None when no file (or an empty one) was sent.

        Raises:
            ReviewValidationError: A 413 error when the file is larger than ``max_bytes``.
        """
        if upload is None:
            return None
        chunks = []
        total = 0
        while True:
            chunk = await upload.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise ReviewValidationError({"image": [image_too_large(max_bytes)]}, status_code=413)
            chunks.append(chunk)
        data = b"".join(chunks)
        if not data:
            return None
        return StoredImage(data, ImageHelper.detect_mime_type(data, upload.content_type))

    @staticmethod
    def to_base64(data: Optional[bytes]) -> Optional[str]:
        if data is None:
            return None
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def to_data_url(encoded: Optional[str], mime_type: Optional[str]) -> Optional[str]:
        # displayable image source, as used by <img src=...>
        if not encoded:
            return None
        return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"

#endregion image encoding
