"""Configuration management for the OCR proxy service."""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_MAX_FILE_SIZE_BYTES = 4718592  # 4.5 MiB


@dataclass
class MistralConfig:
    """Configuration for the upstream Mistral document AI API."""
    api_key: str = field(
        default_factory=lambda: os.environ.get("MISTRAL_API_KEY", "")
    )
    api_url: str = field(
        default_factory=lambda: os.environ.get("MISTRAL_API_URL", "https://api.mistral.ai")
    )
    ocr_model: str = field(
        default_factory=lambda: os.environ.get("MISTRAL_OCR_MODEL", "mistral-ocr-latest")
    )
    qa_model: str = field(
        default_factory=lambda: os.environ.get("MISTRAL_QA_MODEL", "mistral-small-latest")
    )
    timeout_seconds: float = field(
        default_factory=lambda: float(os.environ.get("MISTRAL_TIMEOUT_SECONDS", "60"))
    )
    signed_url_expiry_hours: int = field(
        default_factory=lambda: int(os.environ.get("MISTRAL_SIGNED_URL_EXPIRY_HOURS", "24"))
    )
    qa_temperature: float = 0.2


@dataclass
class UploadConfig:
    """Limits applied to uploaded documents."""
    max_file_size_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("MAX_FILE_SIZE_BYTES", str(DEFAULT_MAX_FILE_SIZE_BYTES))
        )
    )


@dataclass
class ServerConfig:
    """Configuration for HTTP server."""
    host: str = field(
        default_factory=lambda: os.environ.get("HTTP_HOST", "0.0.0.0")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("HTTP_PORT", "8089"))
    )


@dataclass
class ClientConfig:
    """Configuration for callers of the proxy."""
    api_base_url: str = field(
        default_factory=lambda: os.environ.get("OCR_API_BASE_URL", "")
    )


@dataclass
class Config:
    """Main configuration container."""
    mistral: MistralConfig = field(default_factory=MistralConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration from environment."""
    global _config
    _config = Config()
    return _config
