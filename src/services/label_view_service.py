"""
Recent uploads view.
Derives per-status counts, applies the status filter and expands records
into one table row per attached file.
"""
import json
import logging
import queue
from datetime import datetime
from typing import Iterator, List, Optional, Union
from src.core import config, messages
from src.core.exceptions import PersistenceException, RecordNotFoundException, SubscriptionException
from src.models.dto.label_dto import LabelListResponse, LabelRow, StatusCounts
from src.models.label_status import LabelStatus, StatusFilter
from src.models.upload_record import LabelFile, UploadRecord
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.record_repository import RecordRepository
from src.services.subscription_service import RecordSnapshot, RecordSubscription

logger = logging.getLogger(__name__)

ACTION_OPEN = 'open'
ACTION_DOWNLOAD = 'download'
ACTION_COPY_LINK = 'copy_link'
ACTION_MARK_PRINTED = 'mark_printed'
ACTION_MARK_SHIPPED = 'mark_shipped'

_STATUS_ACTIONS = {
    LabelStatus.PRINTED: ACTION_MARK_PRINTED,
    LabelStatus.SHIPPED: ACTION_MARK_SHIPPED,
}


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%d %b %Y, %H:%M") if value else "-"


def bytes_to_kb(size_bytes: Optional[int]) -> str:
    return f"{size_bytes / 1024:.1f} KB" if isinstance(size_bytes, int) else ""


class LabelViewService:
    """Service building the recent uploads table."""
    
    def __init__(self, record_repository: RecordRepository = None):
        self.record_repository = record_repository or DynamoRepository()
    
    def build(
        self,
        records: List[UploadRecord],
        status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
        error_message: Optional[str] = None
    ) -> LabelListResponse:
        """
        Project records into counts and rows. Never queries the store.
        
        Args:
            records: Records ordered newest first
            status_filter: Selected tab
            error_message: Banner to show alongside the (possibly empty) table
        """
        status_filter = StatusFilter(status_filter)
        visible = [r for r in records if status_filter.matches(r.status)]
        rows = self.expand_rows(visible)
        
        return LabelListResponse(
            status_filter=status_filter,
            counts=self.count(records),
            rows=rows,
            empty_message=None if rows else messages.EMPTY_FILTER,
            error_message=error_message
        )
    
    def count(self, records: List[UploadRecord]) -> StatusCounts:
        effective = [r.status.effective for r in records]
        return StatusCounts(
            total=len(records),
            pendiente=effective.count(LabelStatus.PENDING),
            impreso=effective.count(LabelStatus.PRINTED),
            enviado=effective.count(LabelStatus.SHIPPED)
        )
    
    def expand_rows(self, records: List[UploadRecord]) -> List[LabelRow]:
        rows = []
        for record in records:
            status = record.status.effective
            actions = [ACTION_OPEN, ACTION_DOWNLOAD, ACTION_COPY_LINK]
            if status.next_status is not None:
                actions.append(_STATUS_ACTIONS[status.next_status])
            
            for index, label_file in enumerate(record.files):
                rows.append(LabelRow(
                    record_id=record.record_id,
                    file_index=index,
                    created_at=record.created_at,
                    created_at_display=format_date(record.created_at),
                    product=record.product_label,
                    display_name=record.display_name or "-",
                    quantity=record.quantity,
                    status=status,
                    file_name=label_file.file_name,
                    size_display=bytes_to_kb(label_file.size_bytes),
                    download_url=label_file.download_url,
                    actions=list(actions)
                ))
        return rows
    
    def get_record(self, record_id: str) -> UploadRecord:
        """
        Raises:
            RecordNotFoundException: If the record does not exist
        """
        record = self.record_repository.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundException(f"Upload record '{record_id}' not found")
        return record
    
    def get_file(self, record_id: str, file_index: int) -> LabelFile:
        """
        Raises:
            RecordNotFoundException: If the record or the file index does not exist
        """
        record = self.get_record(record_id)
        if not 0 <= file_index < len(record.files):
            raise RecordNotFoundException(
                f"Upload record '{record_id}' has no file at index {file_index}",
                user_message=messages.FILE_NOT_FOUND
            )
        return record.files[file_index]
    
    def load_recent(self, status_filter: Union[StatusFilter, str] = StatusFilter.ALL) -> LabelListResponse:
        """
        Query the most recent records once and build the view.
        
        A failed read shows the banner over an empty table.
        """
        try:
            records = self.record_repository.find_recent(config.settings.recent_uploads_limit)
        except SubscriptionException as e:
            logger.error(f"Recent uploads read denied: {e.message}")
            return self.build([], status_filter, messages.READ_DENIED)
        except PersistenceException as e:
            logger.error(f"Recent uploads read failed: {e.message}")
            return self.build([], status_filter, messages.READ_FAILED)
        return self.build(records, status_filter)
    
    def subscribe(self) -> RecordSubscription:
        """Start a live subscription to the recent records."""
        return RecordSubscription(
            self.record_repository,
            limit=config.settings.recent_uploads_limit,
            poll_seconds=config.settings.subscription_poll_seconds
        ).start()
    
    def stream_events(
        self,
        subscription: RecordSubscription,
        status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
        keepalive_seconds: float = 15.0
    ) -> Iterator[str]:
        """
        Server-sent events for a subscription: one `data:` view per snapshot.
        
        The subscription is closed when the consumer stops iterating.
        """
        status_filter = StatusFilter(status_filter)
        try:
            while True:
                try:
                    snapshot = subscription.get(timeout=keepalive_seconds)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                if snapshot is None:
                    return
                yield self._to_event(snapshot, status_filter)
        finally:
            subscription.close()
    
    def _to_event(self, snapshot: RecordSnapshot, status_filter: StatusFilter) -> str:
        view = self.build(snapshot.records, status_filter, snapshot.error_message)
        return f"data: {json.dumps(view.model_dump(mode='json'))}\n\n"
