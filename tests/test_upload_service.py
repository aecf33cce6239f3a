"""
Unit tests for UploadService.
Tests the upload workflow with mocked repositories.
"""
import io
import re
from unittest.mock import Mock
import pytest
from src.services.upload_service import UploadService
from src.models.label_status import LabelStatus
from src.models.upload_record import PendingFile
from src.models.upload_session import UploadSession
from src.core import messages
from src.core.exceptions import (
    PersistenceException,
    SubmissionInProgressException,
    TransferException,
    UploadFailedException,
    ValidationException
)


def pdf(name, content=b"%PDF-1.4"):
    return PendingFile(name, "application/pdf", io.BytesIO(content), len(content))


def fake_upload(file, storage_path, content_type, progress_callback=None):
    for percent in (0, 50, 100):
        progress_callback(percent)
    return {
        'storage_path': storage_path,
        'download_url': f"https://cdn.example.com/{storage_path}",
        'bucket': 'test-bucket',
        'size_bytes': len(file.getvalue())
    }


def fake_create(record):
    record.record_id = "rec-1"
    return "rec-1"


class TestUploadService:
    """Test suite for UploadService."""
    
    @pytest.fixture
    def mock_blob_repo(self):
        repo = Mock()
        repo.upload_file.side_effect = fake_upload
        return repo
    
    @pytest.fixture
    def mock_record_repo(self):
        repo = Mock()
        repo.create.side_effect = fake_create
        return repo
    
    @pytest.fixture
    def upload_service(self, mock_blob_repo, mock_record_repo):
        return UploadService(blob_repository=mock_blob_repo, record_repository=mock_record_repo)
    
    def test_submit_creates_one_record_in_file_order(self, upload_service, mock_blob_repo, mock_record_repo):
        """Example: two PDFs for 'Fuxion - Thermo T3' give one pending record."""
        record = upload_service.submit("Fuxion - Thermo T3", "", 2, [pdf("a.pdf"), pdf("b.pdf")])
        
        assert record.record_id == "rec-1"
        assert record.quantity == 2
        assert record.status is LabelStatus.PENDING
        assert [f.file_name for f in record.files] == ["a.pdf", "b.pdf"]
        assert record.printed_at is None and record.shipped_at is None and record.dispatched_at is None
        assert mock_blob_repo.upload_file.call_count == 2
        mock_record_repo.create.assert_called_once_with(record)
    
    def test_submit_uses_timestamped_storage_paths(self, upload_service, mock_blob_repo):
        record = upload_service.submit("Thermo", "", 1, [pdf("a.pdf")])
        
        storage_path = mock_blob_repo.upload_file.call_args[0][1]
        assert re.fullmatch(r"etiquetas/\d{13}_a\.pdf", storage_path)
        assert record.files[0].storage_path == storage_path
        assert record.files[0].download_url == f"https://cdn.example.com/{storage_path}"
    
    def test_progress_resets_for_each_file(self, upload_service):
        reported = []
        
        upload_service.submit(
            "Thermo", "", 1, [pdf("a.pdf"), pdf("b.pdf")],
            progress_callback=lambda index, name, percent: reported.append((index, name, percent))
        )
        
        assert reported == [
            (1, "a.pdf", 0), (1, "a.pdf", 50), (1, "a.pdf", 100),
            (2, "b.pdf", 0), (2, "b.pdf", 50), (2, "b.pdf", 100)
        ]
    
    def test_non_pdf_rejected_before_any_call(self, upload_service, mock_blob_repo, mock_record_repo):
        session = UploadSession()
        files = [pdf("a.pdf"), PendingFile("b.png", "image/png", io.BytesIO(b"png"), 3)]
        
        with pytest.raises(ValidationException) as exc_info:
            upload_service.submit("Thermo", "", 1, files, session=session)
        
        assert exc_info.value.message == messages.PDF_ONLY
        assert session.message == messages.PDF_ONLY
        assert not session.uploading
        mock_blob_repo.upload_file.assert_not_called()
        mock_record_repo.create.assert_not_called()
    
    @pytest.mark.parametrize("product,files", [("", [pdf("a.pdf")]), ("   ", [pdf("a.pdf")]), ("Thermo", [])])
    def test_missing_fields_rejected(self, upload_service, mock_blob_repo, product, files):
        with pytest.raises(ValidationException) as exc_info:
            upload_service.submit(product, "", 1, files)
        
        assert exc_info.value.message == messages.MISSING_FIELDS
        mock_blob_repo.upload_file.assert_not_called()
    
    def test_oversized_file_rejected(self, upload_service, mock_blob_repo, monkeypatch):
        from src.core import config
        monkeypatch.setattr(config.settings, "max_file_size_mb", 1)
        oversized = PendingFile("big.pdf", "application/pdf", io.BytesIO(b""), 2 * 1024 * 1024)
        
        with pytest.raises(ValidationException) as exc_info:
            upload_service.submit("Thermo", "", 1, [pdf("a.pdf"), oversized])
        
        assert exc_info.value.message == messages.FILE_TOO_LARGE.format(max_mb=1)
        mock_blob_repo.upload_file.assert_not_called()
    
    @pytest.mark.parametrize("quantity", [0, -1, "abc", None])
    def test_invalid_quantity_rejected(self, upload_service, mock_blob_repo, quantity):
        with pytest.raises(ValidationException) as exc_info:
            upload_service.submit("Thermo", "", quantity, [pdf("a.pdf")])
        
        assert exc_info.value.message == messages.INVALID_QUANTITY
        mock_blob_repo.upload_file.assert_not_called()
    
    def test_transfer_failure_aborts_remaining_files(self, upload_service, mock_blob_repo, mock_record_repo):
        calls = []
        
        def upload_then_fail(file, storage_path, content_type, progress_callback=None):
            calls.append(storage_path)
            if len(calls) == 2:
                raise TransferException("connection reset")
            return fake_upload(file, storage_path, content_type, progress_callback)
        
        mock_blob_repo.upload_file.side_effect = upload_then_fail
        session = UploadSession()
        
        with pytest.raises(UploadFailedException) as exc_info:
            upload_service.submit("Thermo", "Maria", 1, [pdf("a.pdf"), pdf("b.pdf"), pdf("c.pdf")], session=session)
        
        assert isinstance(exc_info.value.__cause__, TransferException)
        assert exc_info.value.user_message == messages.UPLOAD_FAILED
        assert len(calls) == 2
        mock_record_repo.create.assert_not_called()
        assert not session.uploading
        assert session.message == messages.UPLOAD_FAILED
        assert session.product == "Thermo"
    
    def test_record_failure_reports_upload_failed(self, upload_service, mock_record_repo):
        mock_record_repo.create.side_effect = PersistenceException("throttled")
        
        with pytest.raises(UploadFailedException):
            upload_service.submit("Thermo", "", 1, [pdf("a.pdf")])
    
    def test_success_resets_session(self, upload_service):
        session = UploadSession()
        
        upload_service.submit("Thermo", "Maria", 3, [pdf("a.pdf")], session=session)
        
        assert session.message == messages.UPLOAD_COMPLETED
        assert session.product == ""
        assert session.display_name == ""
        assert session.quantity == 1
        assert session.file_names == []
        assert session.progress == 0
        assert not session.uploading
    
    def test_session_tracks_current_file(self, upload_service, mock_blob_repo):
        session = UploadSession()
        seen = []
        
        def record_session(file, storage_path, content_type, progress_callback=None):
            progress_callback(40)
            seen.append((session.uploading, session.current_index, session.current_file, session.progress, session.total_files))
            return fake_upload(file, storage_path, content_type, progress_callback)
        
        mock_blob_repo.upload_file.side_effect = record_session
        upload_service.submit("Thermo", "", 1, [pdf("a.pdf"), pdf("b.pdf")], session=session)
        
        assert seen == [(True, 1, "a.pdf", 40, 2), (True, 2, "b.pdf", 40, 2)]
    
    def test_busy_session_rejected(self, upload_service, mock_blob_repo):
        session = UploadSession()
        session.begin("Other", "", 1, ["x.pdf"])
        
        with pytest.raises(SubmissionInProgressException):
            upload_service.submit("Thermo", "", 1, [pdf("a.pdf")], session=session)
        mock_blob_repo.upload_file.assert_not_called()
