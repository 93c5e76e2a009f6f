"""Infrastructure layer exports."""

from .assemblyai_recognizer import AssemblyAIRecognizer
from .azure_recognizer import AzureSpeechRecognizer
from .minio_storage import MinioStorageClient

__all__ = ["AssemblyAIRecognizer", "AzureSpeechRecognizer", "MinioStorageClient"]
