"""
Abstract base class for blob storage repositories.
Defines the contract for storing uploaded label PDFs.
"""
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Optional

ProgressCallback = Callable[[int], None]


class BlobRepository(ABC):
    """Abstract repository interface for label file storage."""
    
    @abstractmethod
    def upload_file(
        self,
        file: BinaryIO,
        storage_path: str,
        content_type: str,
        progress_callback: Optional[ProgressCallback] = None
    ) -> dict:
        """Upload a file, reporting integer progress 0-100, and return its metadata."""
        pass
    
    @abstractmethod
    def resolve_download_url(self, storage_path: str) -> str:
        """Publicly fetchable URL of a stored file."""
        pass
    
    @abstractmethod
    def generate_download_link(self, storage_path: str, file_name: str) -> str:
        """URL that makes the browser save the file instead of opening it."""
        pass
