"""Custom exceptions for the speech archiver."""


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration for '{setting}': {reason}")


class ConnectionStringError(ConfigurationError):
    """Raised when the storage connection string is missing or cannot be parsed."""

    def __init__(self, reason: str):
        super().__init__("STORAGE_CONNECTION_STRING", reason)


class StorageError(Exception):
    """Base class for failures reported by the object storage backend."""

    action = "access"

    def __init__(self, name: str, cause: Exception | None = None):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to {self.action} '{name}' in storage")


class StorageContainerError(StorageError):
    """Raised when a container cannot be checked, created or configured."""

    action = "prepare container"


class StorageUploadError(StorageError):
    """Raised when uploading a file to storage fails."""

    action = "upload"


class StorageListError(StorageError):
    """Raised when listing the objects of a container fails."""

    action = "list objects of"


class StorageDownloadError(StorageError):
    """Raised when downloading a file from storage fails."""

    action = "download"


class StorageDeleteError(StorageError):
    """Raised when deleting an object or container fails."""

    action = "delete"
