"""Core business logic for transcript building."""

from .models import TranscriptResult


class TranscriptBuilder:
    """Builds one transcript from the results of a recognition session."""

    def __init__(self, separator: str = ""):
        self._separator = separator

    def build(self, results: list[TranscriptResult]) -> str:
        """
        Concatenates the text of recognized results in arrival order.

        Args:
            results: Final results of a session, oldest first.

        Returns:
            The accumulated transcript; empty when nothing was recognized.
        """
        return self._separator.join(r.text for r in results if r.is_recognized)

    def derive_download_name(self, object_name: str, suffix: str) -> str:
        """Converts an uploaded file name into its verification copy name."""
        stem, dot, extension = object_name.rpartition(".")
        if not dot:
            return object_name + suffix
        return f"{stem}{suffix}.{extension}"
