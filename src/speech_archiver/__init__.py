from speech_archiver.config import AppConfig, StorageConnection, load_config
from speech_archiver.exceptions import (
    ConfigurationError,
    ConnectionStringError,
    StorageContainerError,
    StorageDeleteError,
    StorageDownloadError,
    StorageError,
    StorageListError,
    StorageUploadError,
)
from speech_archiver.logging import setup_logging

__all__ = [
    "setup_logging",
    "load_config",
    "AppConfig",
    "StorageConnection",
    "ConfigurationError",
    "ConnectionStringError",
    "StorageError",
    "StorageContainerError",
    "StorageUploadError",
    "StorageListError",
    "StorageDownloadError",
    "StorageDeleteError",
]
