"""
Label API routes.
Handles HTTP endpoints for label uploads, the recent uploads view and status changes.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import RedirectResponse, StreamingResponse
from starlette.background import BackgroundTask
from src.core import messages
from src.core.exceptions import RecordNotFoundException
from src.core.dependencies import (
    get_label_view_service,
    get_s3_repository,
    get_session_registry,
    get_status_service,
    get_upload_service
)
from src.models.dto.label_dto import (
    FileLinkResponse,
    LabelListResponse,
    UploadCreatedResponse,
    UploadRecordResponse,
    UploadSessionResponse
)
from src.models.label_status import StatusFilter
from src.models.upload_record import PendingFile
from src.models.upload_session import UploadSession, UploadSessionRegistry
from src.repositories.blob_repository import BlobRepository
from src.services.label_view_service import LabelViewService
from src.services.status_service import StatusService
from src.services.upload_service import UploadService

router = APIRouter(prefix="/v1/api")


@router.post("/uploads", tags=["Uploads"], response_model=UploadCreatedResponse, status_code=status.HTTP_201_CREATED)
def upload_labels(
    product: str = Form("", description="Sold item, e.g. 'Fuxion - Thermo T3'"),
    display_name: str = Form("", description="Customer or internal reference"),
    quantity: int = Form(1, description="Units sold"),
    files: Optional[List[UploadFile]] = File(None, description="One or more PDF labels"),
    session_id: Optional[str] = Form(None, description="Upload session to report progress to"),
    upload_service: UploadService = Depends(get_upload_service),
    sessions: UploadSessionRegistry = Depends(get_session_registry)
):
    """
    Upload PDF labels and record the batch.
    
    Files are uploaded one after another; poll `GET /sessions/{session_id}`
    for the progress of the file currently uploading.
    """
    # Without a session id the form state only lives for this request
    session = sessions.get_or_create(session_id) if session_id else UploadSession()
    pending = [
        PendingFile(f.filename, f.content_type, f.file, f.size)
        for f in files or []
    ]
    
    record = upload_service.submit(product, display_name, quantity, pending, session=session)
    
    return UploadCreatedResponse(
        session_id=session.session_id,
        message=session.message,
        record=UploadRecordResponse.from_record(record)
    )


@router.get("/uploads", tags=["Uploads"], response_model=LabelListResponse)
async def list_recent_uploads(
    estado: StatusFilter = Query(default=StatusFilter.ALL, description="Status tab"),
    view_service: LabelViewService = Depends(get_label_view_service)
):
    """
    Retrieve the most recent uploads with per-status counts.
    """
    return view_service.load_recent(estado)


@router.get("/uploads/stream", tags=["Uploads"])
def stream_recent_uploads(
    estado: StatusFilter = Query(default=StatusFilter.ALL, description="Status tab"),
    view_service: LabelViewService = Depends(get_label_view_service)
):
    """
    Live view of the most recent uploads as server-sent events.
    
    A complete view is sent on connect and whenever the uploads change.
    """
    subscription = view_service.subscribe()
    return StreamingResponse(
        view_service.stream_events(subscription, estado),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
        background=BackgroundTask(subscription.close)
    )


@router.get("/uploads/{record_id}", tags=["Uploads"], response_model=UploadRecordResponse)
async def get_upload(
    record_id: str,
    view_service: LabelViewService = Depends(get_label_view_service)
):
    """
    Retrieve a single upload record.
    """
    return UploadRecordResponse.from_record(view_service.get_record(record_id))


@router.post("/uploads/{record_id}/printed", tags=["Status"], response_model=UploadRecordResponse)
def mark_printed(
    record_id: str,
    status_service: StatusService = Depends(get_status_service)
):
    """
    Mark a pending upload as printed.
    """
    return UploadRecordResponse.from_record(status_service.mark_printed(record_id))


@router.post("/uploads/{record_id}/shipped", tags=["Status"], response_model=UploadRecordResponse)
def mark_shipped(
    record_id: str,
    status_service: StatusService = Depends(get_status_service)
):
    """
    Mark a printed upload as shipped.
    """
    return UploadRecordResponse.from_record(status_service.mark_shipped(record_id))


@router.get("/uploads/{record_id}/files/{file_index}/open", tags=["Files"])
async def open_file(
    record_id: str,
    file_index: int,
    view_service: LabelViewService = Depends(get_label_view_service)
):
    """
    Redirect to the public URL of a file.
    """
    label_file = view_service.get_file(record_id, file_index)
    return RedirectResponse(label_file.download_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/uploads/{record_id}/files/{file_index}/download", tags=["Files"])
async def download_file(
    record_id: str,
    file_index: int,
    view_service: LabelViewService = Depends(get_label_view_service),
    blob_repository: BlobRepository = Depends(get_s3_repository)
):
    """
    Redirect to a link that saves the file instead of opening it.
    """
    label_file = view_service.get_file(record_id, file_index)
    url = blob_repository.generate_download_link(label_file.storage_path, label_file.file_name)
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/uploads/{record_id}/files/{file_index}/link", tags=["Files"], response_model=FileLinkResponse)
async def copy_file_link(
    record_id: str,
    file_index: int,
    view_service: LabelViewService = Depends(get_label_view_service)
):
    """
    Return the public URL of a file for the clipboard.
    """
    label_file = view_service.get_file(record_id, file_index)
    return FileLinkResponse(url=label_file.download_url, message=messages.LINK_COPIED)


@router.post("/sessions", tags=["Sessions"], response_model=UploadSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(sessions: UploadSessionRegistry = Depends(get_session_registry)):
    """
    Start an upload form session.
    """
    return UploadSessionResponse.from_session(sessions.create())


@router.get("/sessions/{session_id}", tags=["Sessions"], response_model=UploadSessionResponse)
async def get_session(session_id: str, sessions: UploadSessionRegistry = Depends(get_session_registry)):
    """
    Current form state: uploading flag, progress of the active file and last message.
    """
    session = sessions.get(session_id)
    if session is None:
        raise RecordNotFoundException(f"Upload session '{session_id}' not found", user_message=messages.SESSION_NOT_FOUND)
    return UploadSessionResponse.from_session(session)


@router.delete("/sessions/{session_id}", tags=["Sessions"], status_code=status.HTTP_204_NO_CONTENT)
async def discard_session(session_id: str, sessions: UploadSessionRegistry = Depends(get_session_registry)):
    """
    Discard an upload form session.
    """
    if not sessions.discard(session_id):
        raise RecordNotFoundException(f"Upload session '{session_id}' not found", user_message=messages.SESSION_NOT_FOUND)
