"""
S3 Repository for label file storage.
Handles PDF uploads to Amazon S3 with progress reporting.
"""
import io
import logging
import threading
from typing import BinaryIO, Optional
from urllib.parse import quote
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import TransferException
from src.repositories.blob_repository import BlobRepository, ProgressCallback

logger = logging.getLogger(__name__)


class TransferProgress:
    """
    Accumulates byte counts from boto3 transfer callbacks and reports
    integer percentages to the caller.
    
    boto3 may invoke the callback from several transfer threads.
    """
    
    def __init__(self, total_bytes: int, callback: Optional[ProgressCallback]):
        self.total_bytes = total_bytes
        self.callback = callback
        self.transferred = 0
        self.last_reported: Optional[int] = None
        self._lock = threading.Lock()
    
    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            self.transferred += bytes_amount
            self._report(self._percent())
    
    def start(self) -> None:
        with self._lock:
            self._report(0)
    
    def finish(self) -> None:
        with self._lock:
            self._report(100)
    
    def _percent(self) -> int:
        if self.total_bytes <= 0:
            return 100
        percent = round(self.transferred / self.total_bytes * 100)
        return max(0, min(100, percent))
    
    def _report(self, percent: int) -> None:
        if self.callback is None or percent == self.last_reported:
            return
        self.last_reported = percent
        self.callback(percent)


class S3Repository(BlobRepository):
    """Repository for S3 file operations."""
    
    def __init__(self):
        self.s3_client = boto3.client('s3', region_name=config.settings.aws_region)
        self.bucket_name = config.settings.s3_bucket_name
        self.region = config.settings.aws_region
        self.public_base_url = config.settings.public_base_url
        self.link_expiration = config.settings.download_link_expiration_seconds
    
    def upload_file(
        self,
        file: BinaryIO,
        storage_path: str,
        content_type: str = 'application/pdf',
        progress_callback: Optional[ProgressCallback] = None
    ) -> dict:
        """
        Upload a file to S3.
        
        Args:
            file: File object to upload
            storage_path: Destination key inside the bucket
            content_type: MIME type stored with the object
            progress_callback: Receives integer percentages 0-100 for this file
            
        Returns:
            dict: Upload metadata including storage_path, download_url and size_bytes
            
        Raises:
            TransferException: If upload fails
        """
        try:
            size_bytes = self._measure(file)
            progress = TransferProgress(size_bytes, progress_callback)
            progress.start()
            
            self.s3_client.upload_fileobj(
                file,
                self.bucket_name,
                storage_path,
                ExtraArgs={'ContentType': content_type},
                Callback=progress
            )
            progress.finish()
            
            return {
                'storage_path': storage_path,
                'download_url': self.resolve_download_url(storage_path),
                'bucket': self.bucket_name,
                'size_bytes': size_bytes
            }
            
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed: key={storage_path}, error={e}")
            raise TransferException(f"Failed to upload file to S3: {str(e)}") from e
        except Exception as e:
            logger.exception(f"Unexpected error during S3 upload: key={storage_path}")
            raise TransferException(f"Unexpected error during S3 upload: {str(e)}") from e
    
    def resolve_download_url(self, storage_path: str) -> str:
        """
        Build the public URL of an object.
        
        Uses PUBLIC_BASE_URL (e.g. a CDN in front of the bucket) when set,
        otherwise the bucket's virtual-hosted S3 endpoint.
        """
        key = quote(storage_path, safe="/")
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"
    
    def generate_download_link(self, storage_path: str, file_name: str) -> str:
        """
        Generate a presigned URL that forces a download.
        
        Raises:
            TransferException: If URL generation fails
        """
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': storage_path,
                    'ResponseContentDisposition': f'attachment; filename="{file_name}"'
                },
                ExpiresIn=self.link_expiration
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Presigned URL generation failed: key={storage_path}, error={e}")
            raise TransferException(f"Failed to generate download link: {str(e)}") from e
    
    def _measure(self, file: BinaryIO) -> int:
        """Size of a seekable file object, leaving it positioned at the start."""
        file.seek(0, io.SEEK_END)
        size = file.tell()
        file.seek(0)
        return size
