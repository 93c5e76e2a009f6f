"""Application configuration loaded from environment variables."""

import os
from typing import Literal

from pydantic import BaseModel, Field

from speech_archiver.exceptions import ConnectionStringError

_TRUE_VALUES = ("1", "true", "yes", "y", "on")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    return value.lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    return int(value) if value else default


class SpeechConfig(BaseModel, frozen=True):
    """Speech recognition service configuration."""

    provider: Literal["azure", "assemblyai"] = "azure"
    api_key: str
    region: str = ""
    language: str = "en-US"
    sample_rate: int = 16000


class StorageConfig(BaseModel, frozen=True):
    """Object storage configuration for the archive step."""

    connection_string: str | None = None
    container_name: str = "transcripts"
    container_mode: Literal["reuse", "fresh"] = "reuse"
    public_read: bool = False
    delete_remote: bool = False
    list_page_size: int = Field(default=100, gt=0)
    download_suffix: str = "_DOWNLOADED"
    work_dir: str = ""


class PipelineConfig(BaseModel, frozen=True):
    """Transcribe-then-archive pipeline configuration."""

    mode: Literal["once", "continuous"] = "once"
    audio_file: str = ""
    separator: str = ""
    wait_for_key: bool = True


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    speech: SpeechConfig
    storage: StorageConfig
    pipeline: PipelineConfig


class StorageConnection(BaseModel, frozen=True):
    """Connection details parsed from a storage connection string."""

    endpoint: str
    access_key: str
    secret_key: str
    secure: bool = True
    region: str | None = None

    @classmethod
    def parse(cls, connection_string: str | None) -> "StorageConnection":
        """
        Parses a ``Key=Value;Key=Value`` connection string.

        Keys are case-insensitive. ``Endpoint``, ``AccessKey`` and ``SecretKey``
        are required; ``Secure`` and ``Region`` are optional.

        Raises:
            ConnectionStringError: If the string is empty or malformed.
        """
        if not connection_string or not connection_string.strip():
            raise ConnectionStringError("connection string is not set")

        parts: dict[str, str] = {}
        for segment in connection_string.split(";"):
            segment = segment.strip()
            if not segment:
                continue
            key, sep, value = segment.partition("=")
            if not sep or not key.strip():
                raise ConnectionStringError(f"malformed segment '{segment}'")
            parts[key.strip().lower()] = value.strip()

        missing = [
            key for key in ("endpoint", "accesskey", "secretkey") if not parts.get(key)
        ]
        if missing:
            raise ConnectionStringError(f"missing keys: {', '.join(missing)}")

        secure = parts.get("secure", "true").lower() in _TRUE_VALUES
        return cls(
            endpoint=parts["endpoint"],
            access_key=parts["accesskey"],
            secret_key=parts["secretkey"],
            secure=secure,
            region=parts.get("region") or None,
        )


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        speech=SpeechConfig(
            provider=os.getenv("SPEECH_PROVIDER", "azure").strip().lower(),
            api_key=os.getenv("SPEECH_KEY", ""),
            region=os.getenv("SPEECH_REGION", ""),
            language=os.getenv("SPEECH_LANGUAGE", "en-US"),
            sample_rate=_env_int("SPEECH_SAMPLE_RATE", 16000),
        ),
        storage=StorageConfig(
            connection_string=os.getenv("STORAGE_CONNECTION_STRING"),
            container_name=os.getenv("STORAGE_CONTAINER_NAME", "transcripts"),
            container_mode=os.getenv("STORAGE_CONTAINER_MODE", "reuse").strip().lower(),
            public_read=_env_bool("STORAGE_PUBLIC_READ", False),
            delete_remote=_env_bool("STORAGE_DELETE_REMOTE", False),
            list_page_size=_env_int("STORAGE_LIST_PAGE_SIZE", 100),
            download_suffix=os.getenv("STORAGE_DOWNLOAD_SUFFIX", "_DOWNLOADED"),
            work_dir=os.getenv("STORAGE_WORK_DIR", ""),
        ),
        pipeline=PipelineConfig(
            mode=os.getenv("PIPELINE_MODE", "once").strip().lower(),
            audio_file=os.getenv("PIPELINE_AUDIO_FILE", ""),
            separator=os.getenv("PIPELINE_SEPARATOR", ""),
            wait_for_key=_env_bool("PIPELINE_WAIT_FOR_KEY", True),
        ),
    )
