"""Abstract interface for object storage operations."""

from abc import ABC, abstractmethod

from speech_archiver.domain.models import ObjectPage


class StorageClient(ABC):
    """Abstract base class for object storage backends."""

    @abstractmethod
    def ensure_container_exists(self, container_name: str) -> bool:
        """
        Ensures a container exists, creating it if necessary.

        Returns:
            True if the container was created by this call.

        Raises:
            StorageContainerError: If the check or creation fails.
        """

    @abstractmethod
    def set_public_read(self, container_name: str) -> None:
        """
        Grants anonymous read access to the objects of a container.

        Raises:
            StorageContainerError: If the policy cannot be applied.
        """

    @abstractmethod
    def upload_file(
        self,
        container_name: str,
        object_name: str,
        file_path: str,
        content_type: str,
    ) -> None:
        """
        Uploads a local file to storage.

        Raises:
            StorageUploadError: If the upload fails.
        """

    @abstractmethod
    def list_page(
        self,
        container_name: str,
        continuation_token: str | None,
        page_size: int,
    ) -> ObjectPage:
        """
        Fetches one page of a container listing.

        Args:
            container_name: The container to list.
            continuation_token: Token returned by the previous page, or None
                for the first page.
            page_size: Maximum number of objects in the page.

        Returns:
            The page; its continuation token is None on the last page.

        Raises:
            StorageListError: If the listing fails.
        """

    @abstractmethod
    def download_file(self, container_name: str, object_name: str, file_path: str) -> None:
        """
        Downloads an object to a local file.

        Raises:
            StorageDownloadError: If the download fails.
        """

    @abstractmethod
    def delete_object(self, container_name: str, object_name: str) -> None:
        """
        Deletes an object.

        Raises:
            StorageDeleteError: If the deletion fails.
        """

    @abstractmethod
    def delete_container(self, container_name: str) -> None:
        """
        Deletes an empty container.

        Raises:
            StorageDeleteError: If the deletion fails.
        """
