"""
Status Service for the label lifecycle.
Moves records forward: pendiente -> impreso -> enviado.
"""
import logging
import threading
from typing import Set, Union
from src.core import messages
from src.core.exceptions import (
    RecordNotFoundException,
    TransitionNotAllowedException,
    UpdateInProgressException,
    ValidationException
)
from src.models.label_status import LabelStatus
from src.models.upload_record import UploadRecord
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.record_repository import RecordRepository, SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

ADVANCE_TARGETS = (LabelStatus.PRINTED, LabelStatus.SHIPPED)


class StatusService:
    """Service for forward-only status transitions."""
    
    def __init__(self, record_repository: RecordRepository = None):
        self.record_repository = record_repository or DynamoRepository()
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()
    
    def mark_printed(self, record_id: str) -> UploadRecord:
        return self.advance(record_id, LabelStatus.PRINTED)
    
    def mark_shipped(self, record_id: str) -> UploadRecord:
        return self.advance(record_id, LabelStatus.SHIPPED)
    
    def advance(self, record_id: str, target: Union[LabelStatus, str]) -> UploadRecord:
        """
        Move a record to the next status and stamp the matching timestamp.
        
        Args:
            record_id: Record identifier
            target: impreso or enviado
            
        Returns:
            The updated record
            
        Raises:
            ValidationException: If target is not impreso or enviado
            RecordNotFoundException: If the record does not exist
            TransitionNotAllowedException: If target is not the next status
            UpdateInProgressException: If this record is already being updated
            PersistenceException: If the update fails
        """
        try:
            target = LabelStatus(target)
        except ValueError:
            raise ValidationException(messages.INVALID_TARGET_STATUS)
        if target not in ADVANCE_TARGETS:
            raise ValidationException(messages.INVALID_TARGET_STATUS)
        
        self._claim(record_id)
        try:
            record = self.record_repository.get_by_id(record_id)
            if record is None:
                raise RecordNotFoundException(f"Upload record '{record_id}' not found")
            
            if record.status.next_status is not target:
                raise TransitionNotAllowedException(
                    f"Cannot move record '{record_id}' from {record.status.value} to {target.value}"
                )
            
            updated = self.record_repository.update(
                record_id,
                {'status': target, target.timestamp_field: SERVER_TIMESTAMP},
                expected_status=record.status
            )
            logger.info(f"Status changed: record_id={record_id}, {record.status.value} -> {target.value}")
            return updated
        finally:
            self._release(record_id)
    
    def _claim(self, record_id: str) -> None:
        with self._lock:
            if record_id in self._in_flight:
                raise UpdateInProgressException(f"Update already in flight for record '{record_id}'")
            self._in_flight.add(record_id)
    
    def _release(self, record_id: str) -> None:
        with self._lock:
            self._in_flight.discard(record_id)
