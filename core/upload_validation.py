"""Upload rules shared by the API and the client.

Both sides run the same check so that a bad file is rejected before any bytes
are stored or any network call is made.
"""

from dataclasses import dataclass
from pathlib import PurePath

from core.exceptions import UploadValidationError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB

ALLOWED_CONTENT_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/plain": ".txt",
}

# Used when a client sends no (or a generic) MIME type.
EXTENSION_CONTENT_TYPES: dict[str, str] = {ext: ctype for ctype, ext in ALLOWED_CONTENT_TYPES.items()}


@dataclass(frozen=True)
class UploadSpec:
    """A validated upload."""
    filename: str
    content_type: str
    size: int


def guess_content_type(filename: str) -> str | None:
    """Map a file extension to one of the accepted MIME types."""
    return EXTENSION_CONTENT_TYPES.get(PurePath(filename).suffix.lower())


def validate_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> UploadSpec:
    """Check an upload against the accepted types and size limit.

    Args:
        filename: Original file name.
        content_type: MIME type reported by the client, if any.
        size: File size in bytes.
        max_bytes: Size limit.

    Returns:
        UploadSpec with the resolved content type.

    Raises:
        UploadValidationError: On a missing name, empty or oversized file, or
            an unsupported type.
    """
    if not filename:
        raise UploadValidationError("No filename provided")

    if content_type in (None, "", "application/octet-stream"):
        content_type = guess_content_type(filename)

    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadValidationError("Invalid file type: please upload PDF, DOC, DOCX, or TXT files")

    if size > max_bytes:
        raise UploadValidationError(f"File too large: maximum file size is {max_bytes // (1024 * 1024)}MB")

    if size <= 0:
        raise UploadValidationError("File is empty")

    return UploadSpec(filename=PurePath(filename).name, content_type=content_type, size=size)
