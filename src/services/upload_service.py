"""
Upload Service for label submissions.
Validates a submission, uploads its PDFs one after another and records the batch.
"""
import logging
import os
import time
from typing import Callable, List, Optional
from src.core import config, messages
from src.core.exceptions import (
    LabelTrackerException,
    SubmissionInProgressException,
    UploadFailedException,
    ValidationException
)
from src.models.label_status import LabelStatus
from src.models.upload_record import LabelFile, PendingFile, UploadRecord
from src.models.upload_session import UploadSession
from src.repositories.blob_repository import BlobRepository
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.record_repository import RecordRepository
from src.repositories.s3_repository import S3Repository

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'

# (file index starting at 1, file name, percent 0-100)
UploadProgressCallback = Callable[[int, str, int], None]


class UploadService:
    """Service for the upload-and-record workflow."""
    
    def __init__(
        self,
        blob_repository: BlobRepository = None,
        record_repository: RecordRepository = None
    ):
        self.blob_repository = blob_repository or S3Repository()
        self.record_repository = record_repository or DynamoRepository()
    
    def submit(
        self,
        product: str,
        display_name: str,
        quantity: int,
        files: List[PendingFile],
        session: Optional[UploadSession] = None,
        progress_callback: Optional[UploadProgressCallback] = None
    ) -> UploadRecord:
        """
        Upload every file in order, then create one record for the batch.
        
        Args:
            product: Label of the sold item (required)
            display_name: Customer or internal reference (optional)
            quantity: Units sold, at least 1
            files: PDFs in attachment order
            session: Form state updated with progress and the final message
            progress_callback: Receives (index, file_name, percent) for the file uploading
            
        Returns:
            The created UploadRecord
            
        Raises:
            ValidationException: If the submission is rejected before any upload
            SubmissionInProgressException: If the session is already uploading
            UploadFailedException: If a transfer or the record write fails
        """
        session = session or UploadSession()
        product = (product or '').strip()
        display_name = (display_name or '').strip()
        
        try:
            self.validate_submission(product, quantity, files)
        except ValidationException as e:
            session.set_message(e.message)
            raise
        
        if not session.begin(product, display_name, quantity, [f.file_name for f in files]):
            raise SubmissionInProgressException(
                f"Session {session.session_id} already has an upload in flight"
            )
        
        try:
            uploaded = []
            for index, pending in enumerate(files, start=1):
                uploaded.append(self._upload_one(index, pending, session, progress_callback))
            
            record = UploadRecord(
                product=product,
                display_name=display_name,
                quantity=int(quantity),
                files=uploaded,
                status=LabelStatus.PENDING
            )
            self.record_repository.create(record)
            
        except LabelTrackerException as e:
            # Files already in the bucket stay there; nothing is recorded
            logger.error(f"Upload failed: product={product}, error={e.message}")
            session.fail(messages.UPLOAD_FAILED)
            raise UploadFailedException(e.message) from e
        except Exception as e:
            logger.exception(f"Unexpected error during upload: product={product}")
            session.fail(messages.UPLOAD_FAILED)
            raise UploadFailedException(str(e)) from e
        
        logger.info(f"Upload recorded: record_id={record.record_id}, files={len(uploaded)}")
        session.complete(messages.UPLOAD_COMPLETED)
        return record
    
    def validate_submission(self, product: str, quantity: int, files: List[PendingFile]) -> None:
        """
        Check a submission before anything is sent.
        
        Raises:
            ValidationException: If a required field is missing, the quantity
                is below 1, a file is not a PDF or a file
                exceeds the size limit
        """
        if not product or not files:
            raise ValidationException(messages.MISSING_FIELDS)
        
        try:
            valid_quantity = int(quantity) >= 1
        except (TypeError, ValueError):
            valid_quantity = False
        if not valid_quantity:
            raise ValidationException(messages.INVALID_QUANTITY)
        
        for pending in files:
            if pending.content_type != PDF_CONTENT_TYPE:
                raise ValidationException(messages.PDF_ONLY)
        
        max_size_bytes = config.settings.max_file_size_mb * 1024 * 1024
        for pending in files:
            if pending.size_bytes is not None and pending.size_bytes > max_size_bytes:
                raise ValidationException(
                    messages.FILE_TOO_LARGE.format(max_mb=config.settings.max_file_size_mb)
                )
    
    def build_storage_path(self, file_name: str) -> str:
        """
        Destination key for an upload.
        
        Format: <prefix>/<epoch millis>_<file name>
        """
        timestamp = int(time.time() * 1000)
        return f"{config.settings.storage_prefix}/{timestamp}_{os.path.basename(file_name)}"
    
    def _upload_one(
        self,
        index: int,
        pending: PendingFile,
        session: UploadSession,
        progress_callback: Optional[UploadProgressCallback]
    ) -> LabelFile:
        def on_progress(percent: int) -> None:
            session.report_progress(index, pending.file_name, percent)
            if progress_callback:
                progress_callback(index, pending.file_name, percent)
        
        storage_path = self.build_storage_path(pending.file_name)
        result = self.blob_repository.upload_file(
            pending.stream,
            storage_path,
            PDF_CONTENT_TYPE,
            progress_callback=on_progress
        )
        
        return LabelFile(
            file_name=pending.file_name,
            download_url=result['download_url'],
            storage_path=result['storage_path'],
            size_bytes=pending.size_bytes if pending.size_bytes is not None else result['size_bytes']
        )
