"""Mistral document AI backend: upload, sign, OCR and document Q&A over httpx."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import DocumentAIBackend, DocumentAIResult
from ..config import MistralConfig, get_config
from ..errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


def extract_answer(chat_response: Dict[str, Any]) -> Optional[str]:
    """Pull the assistant text out of a chat completion response."""
    choices = chat_response.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None

    message = choices[0].get("message") or {}
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and part.get("type") == "text" and "text" in part:
                return part["text"]
    return None


class MistralBackend(DocumentAIBackend):
    """Backend calling the Mistral REST API with a synchronous httpx client."""

    def __init__(
        self,
        config: Optional[MistralConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or get_config().mistral
        self._transport = transport

    def _client(self) -> httpx.Client:
        if not self.config.api_key:
            raise ConfigurationError("Missing MISTRAL_API_KEY environment variable.")
        return httpx.Client(
            base_url=self.config.api_url,
            timeout=self.config.timeout_seconds,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            transport=self._transport,
        )

    def process(
        self,
        data: bytes,
        file_name: str,
        include_images: bool = False,
        pages: Optional[List[int]] = None,
        query: Optional[str] = None,
    ) -> DocumentAIResult:
        model = self.config.ocr_model
        qa_model = self.config.qa_model

        with self._client() as client:
            try:
                file_id = self._upload(client, data, file_name)
                document_url = self._signed_url(client, file_id)
                ocr = self._ocr(client, model, document_url, include_images, pages)
                answer = None
                if query:
                    answer = self._ask(client, qa_model, document_url, query)
            except httpx.TimeoutException as e:
                logger.error(f"Mistral request timed out: {e}")
                raise UpstreamError(
                    "The document AI service timed out. Please try again.",
                    code="UPSTREAM_TIMEOUT",
                    status_code=504,
                )
            except httpx.HTTPStatusError as e:
                raise self._status_error(e)
            except httpx.TransportError as e:
                logger.error(f"Could not reach Mistral: {e}")
                raise UpstreamError(
                    "Could not reach the document AI service.",
                    code="UPSTREAM_UNAVAILABLE",
                    status_code=502,
                )

        return DocumentAIResult(
            document_url=document_url,
            model=model,
            ocr=ocr,
            answer=answer,
            qa_model=qa_model if query else None,
        )

    def _upload(self, client: httpx.Client, data: bytes, file_name: str) -> str:
        logger.info(f"Uploading {file_name!r} ({len(data)} bytes)")
        resp = client.post(
            "/v1/files",
            data={"purpose": "ocr"},
            files={"file": (file_name, data, "application/pdf")},
        )
        resp.raise_for_status()
        file_id = self._json(resp).get("id")
        if not isinstance(file_id, str) or not file_id:
            raise UpstreamError(
                "Upload response is missing a file id.", code="UPSTREAM_INVALID_RESPONSE"
            )
        return file_id

    def _signed_url(self, client: httpx.Client, file_id: str) -> str:
        resp = client.get(
            f"/v1/files/{file_id}/url",
            params={"expiry": self.config.signed_url_expiry_hours},
        )
        resp.raise_for_status()
        url = self._json(resp).get("url")
        if not isinstance(url, str) or not url:
            raise UpstreamError(
                "Signed URL response is missing a url.", code="UPSTREAM_INVALID_RESPONSE"
            )
        return url

    def _ocr(
        self,
        client: httpx.Client,
        model: str,
        document_url: str,
        include_images: bool,
        pages: Optional[List[int]],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "document": {"type": "document_url", "document_url": document_url},
            "include_image_base64": include_images,
        }
        if pages:
            # Mistral indexes pages from 0
            payload["pages"] = [page - 1 for page in pages]

        logger.info(f"Running OCR: model={model}, pages={pages or 'all'}")
        resp = client.post("/v1/ocr", json=payload)
        resp.raise_for_status()
        return self._json(resp)

    def _ask(self, client: httpx.Client, qa_model: str, document_url: str, query: str) -> Optional[str]:
        logger.info(f"Asking document question: model={qa_model}")
        resp = client.post("/v1/chat/completions", json={
            "model": qa_model,
            "temperature": self.config.qa_temperature,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": query},
                        {"type": "document_url", "document_url": document_url},
                    ],
                }
            ],
        })
        resp.raise_for_status()
        return extract_answer(self._json(resp))

    def _json(self, resp: httpx.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            raise UpstreamError(
                f"Invalid JSON from {resp.request.url.path}", code="UPSTREAM_INVALID_RESPONSE"
            )
        if not isinstance(data, dict):
            raise UpstreamError(
                f"Unexpected response shape from {resp.request.url.path}",
                code="UPSTREAM_INVALID_RESPONSE",
            )
        return data

    def _status_error(self, error: httpx.HTTPStatusError) -> UpstreamError:
        status = error.response.status_code
        path = error.request.url.path
        logger.error(f"Mistral returned {status} for {path}: {error.response.text[:200]}")

        if status in (401, 403):
            return UpstreamError(
                "The document AI service rejected the API key.",
                code="UPSTREAM_AUTH_FAILED",
                status_code=502,
            )
        if status == 429:
            return UpstreamError(
                "Rate limit reached. Please wait and try again.",
                code="RATE_LIMITED",
                status_code=429,
            )
        return UpstreamError(
            f"The document AI service returned status {status}.",
            code="UPSTREAM_ERROR",
            status_code=502,
            details={"upstream_status": status},
        )
