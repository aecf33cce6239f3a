"""
Data Transfer Objects for the Label Tracker API.
Defines request and response schemas for API endpoints.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from src.models.label_status import LabelStatus, StatusFilter
from src.models.upload_record import UploadRecord


class LabelFileResponse(BaseModel):
    """A PDF attached to an upload record."""
    file_name: str
    download_url: str
    storage_path: str
    size_bytes: int


class UploadRecordResponse(BaseModel):
    """Response schema for a single upload record."""
    record_id: str = Field(..., description="Identifier assigned by the record store")
    product: str
    display_name: str = ""
    quantity: int
    files: List[LabelFileResponse]
    status: LabelStatus = Field(..., description="Stored status (may be the legacy 'despachado')")
    created_at: Optional[datetime] = None
    printed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    dispatched_at: Optional[datetime] = None
    
    @classmethod
    def from_record(cls, record: UploadRecord) -> "UploadRecordResponse":
        return cls(
            record_id=record.record_id,
            product=record.product_label,
            display_name=record.display_name or "",
            quantity=record.quantity,
            files=[
                LabelFileResponse(
                    file_name=f.file_name,
                    download_url=f.download_url,
                    storage_path=f.storage_path,
                    size_bytes=f.size_bytes
                )
                for f in record.files
            ],
            status=record.status,
            created_at=record.created_at,
            printed_at=record.printed_at,
            shipped_at=record.shipped_at,
            dispatched_at=record.dispatched_at
        )


class UploadCreatedResponse(BaseModel):
    """Response schema for a successful upload submission."""
    session_id: str = Field(..., description="Upload session the submission ran in")
    message: str = Field(..., description="Status message")
    record: UploadRecordResponse


class StatusCounts(BaseModel):
    """Per-status counts shown on the filter tabs."""
    total: int = 0
    pendiente: int = 0
    impreso: int = 0
    enviado: int = 0


class LabelRow(BaseModel):
    """One table row: a single file of a record."""
    record_id: str
    file_index: int
    created_at: Optional[datetime] = None
    created_at_display: str
    product: str
    display_name: str
    quantity: int
    status: LabelStatus = Field(..., description="Effective status ('despachado' shown as 'enviado')")
    file_name: str
    size_display: str
    download_url: str
    actions: List[str]


class LabelListResponse(BaseModel):
    """Recent uploads view: counts, selected filter and table rows."""
    status_filter: StatusFilter
    counts: StatusCounts
    rows: List[LabelRow]
    empty_message: Optional[str] = None
    error_message: Optional[str] = None


class FileLinkResponse(BaseModel):
    """Response schema for the copy-link action."""
    url: str
    message: str


class UploadSessionResponse(BaseModel):
    """Current state of an upload form session."""
    session_id: str
    product: str
    display_name: str
    quantity: int
    file_names: List[str]
    uploading: bool
    progress: int = Field(..., ge=0, le=100, description="Progress of the file currently uploading")
    current_file: Optional[str] = None
    current_index: int
    total_files: int
    message: str
    
    @classmethod
    def from_session(cls, session) -> "UploadSessionResponse":
        return cls(
            session_id=session.session_id,
            product=session.product,
            display_name=session.display_name,
            quantity=session.quantity,
            file_names=session.file_names,
            uploading=session.uploading,
            progress=session.progress,
            current_file=session.current_file,
            current_index=session.current_index,
            total_files=session.total_files,
            message=session.message
        )
