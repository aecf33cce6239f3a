"""
Live subscription to the most recent upload records.

DynamoDB has no push channel for query results, so a background thread polls
the recent-records query and publishes a full snapshot whenever the result
changes. Consumers read snapshots from a queue and close the subscription
when their view goes away.
"""
import logging
import queue
import threading
from typing import Iterator, List, Optional
from src.core import messages
from src.core.exceptions import PersistenceException, SubscriptionException
from src.models.upload_record import UploadRecord
from src.repositories.record_repository import RecordRepository

logger = logging.getLogger(__name__)

_CLOSED = object()


class RecordSnapshot:
    """Complete ordered result of the recent-records query at one point in time."""
    
    def __init__(self, records: List[UploadRecord], error_message: Optional[str] = None):
        self.records = records
        self.error_message = error_message
    
    def __repr__(self):
        return f"RecordSnapshot(records={len(self.records)}, error_message={self.error_message})"


class RecordSubscription:
    """Cancellable handle yielding snapshots of the recent records."""
    
    def __init__(self, record_repository: RecordRepository, limit: int = 50, poll_seconds: float = 2.0):
        self.record_repository = record_repository
        self.limit = limit
        self.poll_seconds = poll_seconds
        self._queue: "queue.Queue" = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="record-subscription", daemon=True)
        self._last_records: Optional[List[UploadRecord]] = None
    
    def start(self) -> "RecordSubscription":
        self._thread.start()
        return self
    
    def close(self) -> None:
        """Stop polling. Pending snapshots can still be read; iteration then ends."""
        self._stop.set()
    
    @property
    def closed(self) -> bool:
        return self._stop.is_set()
    
    def get(self, timeout: Optional[float] = None) -> Optional[RecordSnapshot]:
        """
        Next snapshot.
        
        Returns:
            RecordSnapshot, or None once the subscription has ended
            
        Raises:
            queue.Empty: If no snapshot arrived within timeout
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker for any other reader
            self._queue.put(_CLOSED)
            return None
        return item
    
    def __iter__(self) -> Iterator[RecordSnapshot]:
        while True:
            snapshot = self.get()
            if snapshot is None:
                return
            yield snapshot
    
    def __enter__(self) -> "RecordSubscription":
        if not self._thread.is_alive() and not self.closed:
            self.start()
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    def _run(self) -> None:
        try:
            while not self._stop.is_set():
                try:
                    records = self.record_repository.find_recent(self.limit)
                except SubscriptionException as e:
                    logger.error(f"Recent uploads listener error: {e.message}")
                    self._queue.put(RecordSnapshot([], messages.READ_DENIED))
                    return
                except PersistenceException as e:
                    logger.error(f"Recent uploads listener error: {e.message}")
                    self._queue.put(RecordSnapshot([], messages.READ_FAILED))
                    return
                except Exception:
                    logger.exception("Unexpected recent uploads listener error")
                    self._queue.put(RecordSnapshot([], messages.READ_FAILED))
                    return
                
                if records != self._last_records:
                    self._last_records = records
                    self._queue.put(RecordSnapshot(records))
                
                self._stop.wait(self.poll_seconds)
        finally:
            self._stop.set()
            self._queue.put(_CLOSED)
