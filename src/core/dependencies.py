"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories.
"""
from functools import lru_cache
from src.models.upload_session import UploadSessionRegistry
from src.repositories.blob_repository import BlobRepository
from src.repositories.dynamo_repository import DynamoRepository
from src.repositories.record_repository import RecordRepository
from src.repositories.s3_repository import S3Repository
from src.services.label_view_service import LabelViewService
from src.services.status_service import StatusService
from src.services.upload_service import UploadService


@lru_cache()
def get_s3_repository() -> BlobRepository:
    """Get S3Repository singleton instance."""
    return S3Repository()


@lru_cache()
def get_dynamo_repository() -> RecordRepository:
    """Get DynamoRepository singleton instance."""
    return DynamoRepository()


@lru_cache()
def get_session_registry() -> UploadSessionRegistry:
    """Get the process-wide upload session registry."""
    return UploadSessionRegistry()


@lru_cache()
def get_upload_service() -> UploadService:
    """Get UploadService singleton instance with injected dependencies."""
    return UploadService(
        blob_repository=get_s3_repository(),
        record_repository=get_dynamo_repository()
    )


@lru_cache()
def get_status_service() -> StatusService:
    """Get StatusService singleton instance. The in-flight guard lives on this instance."""
    return StatusService(record_repository=get_dynamo_repository())


@lru_cache()
def get_label_view_service() -> LabelViewService:
    """Get LabelViewService singleton instance."""
    return LabelViewService(record_repository=get_dynamo_repository())


def clear_caches() -> None:
    """Drop cached instances so the next request picks up fresh settings."""
    for provider in (
        get_s3_repository,
        get_dynamo_repository,
        get_session_registry,
        get_upload_service,
        get_status_service,
        get_label_view_service,
    ):
        provider.cache_clear()
