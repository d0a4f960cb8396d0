"""Upload checks shared by the proxy and its client."""

from dataclasses import dataclass
from typing import Optional

from ..config import DEFAULT_MAX_FILE_SIZE_BYTES

PDF_MIME_TYPE = "application/pdf"
PDF_EXTENSION = ".pdf"


@dataclass
class FileValidationResult:
    is_valid: bool
    error: Optional[str] = None


def validate_file(
    file_name: str,
    size: int,
    content_type: Optional[str] = None,
    max_size: int = DEFAULT_MAX_FILE_SIZE_BYTES,
) -> FileValidationResult:
    """
    Check that an upload is a PDF within the size limit.

    Args:
        file_name: Name of the uploaded file; must end in .pdf (any case)
        size: File size in bytes; a file exactly at max_size is accepted
        content_type: Optional MIME type; checked only when given
        max_size: Maximum accepted size in bytes

    Returns:
        FileValidationResult with is_valid set and a user-facing error
        message when invalid.
    """
    if size > max_size:
        limit_mb = max_size / (1024 * 1024)
        return FileValidationResult(
            is_valid=False,
            error=f"File too large. Maximum size is {limit_mb:.1f}MB.",
        )

    if content_type is not None and content_type.lower() != PDF_MIME_TYPE:
        return FileValidationResult(is_valid=False, error="Only PDF files are supported.")

    if not file_name.lower().endswith(PDF_EXTENSION):
        return FileValidationResult(is_valid=False, error="Only PDF files are supported.")

    return FileValidationResult(is_valid=True)
