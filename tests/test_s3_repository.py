"""
Unit tests for S3Repository.
Uses moto to mock AWS S3 service.
"""
import io
import pytest
from moto import mock_aws
from src.repositories.s3_repository import S3Repository, TransferProgress
from src.core import config
from src.core.exceptions import TransferException
from tests.conftest import TEST_BUCKET, create_bucket


class TestS3Repository:
    """Test suite for S3Repository."""
    
    @mock_aws
    def test_upload_file_success(self, aws_env):
        """Test successful PDF upload to S3."""
        s3 = create_bucket()
        repo = S3Repository()
        
        content = b"%PDF-1.4 label"
        result = repo.upload_file(io.BytesIO(content), "etiquetas/1700000000000_a.pdf", "application/pdf")
        
        assert result['storage_path'] == "etiquetas/1700000000000_a.pdf"
        assert result['size_bytes'] == len(content)
        assert result['bucket'] == TEST_BUCKET
        stored = s3.get_object(Bucket=TEST_BUCKET, Key="etiquetas/1700000000000_a.pdf")
        assert stored['Body'].read() == content
        assert stored['ContentType'] == "application/pdf"
    
    @mock_aws
    def test_upload_file_reports_progress(self, aws_env):
        """Progress starts at 0, ends at 100 and stays within bounds."""
        create_bucket()
        repo = S3Repository()
        reported = []
        
        repo.upload_file(io.BytesIO(b"x" * 4096), "etiquetas/1_a.pdf", "application/pdf", progress_callback=reported.append)
        
        assert reported[0] == 0
        assert reported[-1] == 100
        assert all(0 <= p <= 100 for p in reported)
    
    @mock_aws
    def test_download_url_uses_bucket_endpoint(self, aws_env):
        """Without PUBLIC_BASE_URL the virtual-hosted S3 URL is used."""
        create_bucket()
        repo = S3Repository()
        
        result = repo.upload_file(io.BytesIO(b"pdf"), "etiquetas/1_my label.pdf", "application/pdf")
        
        assert result['download_url'] == (
            "https://test-bucket.s3.us-east-1.amazonaws.com/etiquetas/1_my%20label.pdf"
        )
    
    @mock_aws
    def test_download_url_uses_public_base_url(self, aws_env, monkeypatch):
        monkeypatch.setenv("PUBLIC_BASE_URL", "https://labels.example.com/")
        config.settings = config.Settings()
        repo = S3Repository()
        
        assert repo.resolve_download_url("etiquetas/1_a.pdf") == "https://labels.example.com/etiquetas/1_a.pdf"
    
    @mock_aws
    def test_upload_file_missing_bucket(self, aws_env):
        """Upload fails with TransferException when the bucket does not exist."""
        repo = S3Repository()
        
        with pytest.raises(TransferException):
            repo.upload_file(io.BytesIO(b"pdf"), "etiquetas/1_a.pdf", "application/pdf")
    
    @mock_aws
    def test_generate_download_link_forces_attachment(self, aws_env):
        create_bucket()
        repo = S3Repository()
        
        url = repo.generate_download_link("etiquetas/1_a.pdf", "a.pdf")
        
        assert "etiquetas/1_a.pdf" in url
        assert "response-content-disposition=attachment" in url


class TestTransferProgress:
    """Test suite for byte-count to percentage conversion."""
    
    def test_rounds_fraction_to_percent(self):
        reported = []
        progress = TransferProgress(200, reported.append)
        
        progress.start()
        progress(2)
        progress(98)
        progress(100)
        
        assert reported == [0, 1, 50, 100]
    
    def test_clamps_and_skips_repeats(self):
        reported = []
        progress = TransferProgress(10, reported.append)
        
        progress(20)
        progress.finish()
        
        assert reported == [100]
    
    def test_empty_file_is_complete(self):
        reported = []
        progress = TransferProgress(0, reported.append)
        
        progress.start()
        progress.finish()
        
        assert reported == [0, 100]
