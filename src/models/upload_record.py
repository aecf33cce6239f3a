"""
Upload record domain model.
One record per submitted batch of PDF labels.
"""
from datetime import datetime
from typing import List, Optional
from src.models.label_status import LabelStatus


class LabelFile:
    """A PDF stored in the blob store and attached to a record."""
    
    def __init__(self, file_name: str, download_url: str, storage_path: str, size_bytes: int):
        self.file_name = file_name
        self.download_url = download_url
        self.storage_path = storage_path
        self.size_bytes = size_bytes
    
    def __eq__(self, other):
        if not isinstance(other, LabelFile):
            return NotImplemented
        return (
            self.file_name == other.file_name
            and self.download_url == other.download_url
            and self.storage_path == other.storage_path
            and self.size_bytes == other.size_bytes
        )
    
    def __repr__(self):
        return f"LabelFile(file_name={self.file_name}, storage_path={self.storage_path})"


class UploadRecord:
    """Domain model for an uploaded batch of shipping labels."""
    
    def __init__(
        self,
        product: str,
        quantity: int,
        files: List[LabelFile],
        display_name: str = "",
        record_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        status: LabelStatus = LabelStatus.PENDING,
        printed_at: Optional[datetime] = None,
        shipped_at: Optional[datetime] = None,
        dispatched_at: Optional[datetime] = None,
        legacy_type: Optional[str] = None
    ):
        self.record_id = record_id
        self.product = product
        self.display_name = display_name
        self.quantity = quantity
        self.files = list(files)
        self.created_at = created_at
        self.status = status
        self.printed_at = printed_at
        self.shipped_at = shipped_at
        self.dispatched_at = dispatched_at
        self.legacy_type = legacy_type
    
    @property
    def product_label(self) -> str:
        """Product shown in listings; older records only carry the legacy type."""
        return self.product or self.legacy_type or "-"
    
    def __eq__(self, other):
        if not isinstance(other, UploadRecord):
            return NotImplemented
        return vars(self) == vars(other)
    
    def __repr__(self):
        return f"UploadRecord(record_id={self.record_id}, product={self.product}, status={self.status.value})"


class PendingFile:
    """A file attached to a submission that has not been uploaded yet."""
    
    def __init__(self, file_name: str, content_type: Optional[str], stream, size_bytes: Optional[int] = None):
        self.file_name = file_name
        self.content_type = content_type
        self.stream = stream
        self.size_bytes = size_bytes
    
    def __repr__(self):
        return f"PendingFile(file_name={self.file_name}, content_type={self.content_type})"
