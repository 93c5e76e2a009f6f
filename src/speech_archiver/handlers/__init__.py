"""Handler exports."""

from .archive_uploader import ArchiveUploader
from .recognition_session import RecognitionSession

__all__ = ["ArchiveUploader", "RecognitionSession"]
