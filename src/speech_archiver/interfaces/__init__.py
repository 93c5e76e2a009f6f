"""Interface exports."""

from .speech_recognizer import EventCallback, SpeechRecognizer
from .storage import StorageClient

__all__ = ["EventCallback", "SpeechRecognizer", "StorageClient"]
