"""
Abstract base class for upload record repositories.
Defines the contract for storing and watching upload records.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from src.models.label_status import LabelStatus
from src.models.upload_record import UploadRecord


class _ServerTimestamp:
    """Placeholder replaced by the store's current time when a write is applied."""
    
    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class RecordRepository(ABC):
    """Abstract repository interface for upload records."""
    
    @abstractmethod
    def create(self, record: UploadRecord) -> str:
        """Persist a new record, assigning its id and creation time. Returns the id."""
        pass
    
    @abstractmethod
    def get_by_id(self, record_id: str) -> Optional[UploadRecord]:
        """Fetch one record, or None if it does not exist."""
        pass
    
    @abstractmethod
    def find_recent(self, limit: int = 50) -> List[UploadRecord]:
        """Most recently created records, newest first."""
        pass
    
    @abstractmethod
    def update(self, record_id: str, updates: dict, expected_status: Optional[LabelStatus] = None) -> UploadRecord:
        """Apply a partial update, optionally only if the record still has expected_status."""
        pass
