"""Error types raised by the document AI backends and mapped to HTTP responses."""

from typing import Any, Dict, Optional

from fastapi import HTTPException


class DocumentAIError(Exception):
    """Base error carrying a stable code and the HTTP status it maps to."""

    code = "PROCESSING_FAILED"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ConfigurationError(DocumentAIError):
    """The service is missing configuration it needs (e.g. the API key)."""

    code = "CONFIGURATION_ERROR"
    status_code = 500


class UpstreamError(DocumentAIError):
    """The upstream document AI API failed or returned something unusable."""

    code = "UPSTREAM_ERROR"
    status_code = 502


def error_detail(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def to_http_error(
    code: str,
    message: str,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    return HTTPException(status_code=status_code, detail=error_detail(code, message, details))


def from_document_ai_error(error: DocumentAIError) -> HTTPException:
    return to_http_error(error.code, error.message, error.status_code, error.details)
