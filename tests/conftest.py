"""
Shared test fixtures and utilities.
"""
import pytest
import boto3
from datetime import datetime, timezone
from src.core import config
from src.models.label_status import LabelStatus
from src.models.upload_record import LabelFile, UploadRecord

TEST_REGION = "us-east-1"
TEST_BUCKET = "test-bucket"
TEST_TABLE = "Labels-test"


@pytest.fixture
def aws_env(monkeypatch):
    """Point settings at the mocked AWS resources."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.setenv("AWS_REGION", TEST_REGION)
    monkeypatch.setenv("S3_BUCKET_NAME", TEST_BUCKET)
    monkeypatch.setenv("LABELS_TABLE_NAME", TEST_TABLE)
    monkeypatch.setenv("LABELS_COLLECTION", "subidas")
    monkeypatch.setenv("STORAGE_PREFIX", "etiquetas")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.delenv("PUBLIC_BASE_URL", raising=False)
    config.settings = config.Settings()
    yield
    config.settings = config.Settings()


def create_bucket():
    s3 = boto3.client("s3", region_name=TEST_REGION)
    s3.create_bucket(Bucket=TEST_BUCKET)
    return s3


def create_labels_table():
    """Create the labels table with the creation-time index."""
    dynamodb = boto3.resource("dynamodb", region_name=TEST_REGION)
    return dynamodb.create_table(
        TableName=TEST_TABLE,
        KeySchema=[{"AttributeName": "record_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "record_id", "AttributeType": "S"},
            {"AttributeName": "coleccion", "AttributeType": "S"},
            {"AttributeName": "creadoEn", "AttributeType": "S"}
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "CreatedAtIndex",
                "KeySchema": [
                    {"AttributeName": "coleccion", "KeyType": "HASH"},
                    {"AttributeName": "creadoEn", "KeyType": "RANGE"}
                ],
                "Projection": {"ProjectionType": "ALL"}
            }
        ],
        BillingMode="PAY_PER_REQUEST"
    )


def make_record(record_id="rec-1", status=LabelStatus.PENDING, files=1, product="Fuxion - Thermo T3", **kwargs):
    """Build an UploadRecord with `files` attached PDFs."""
    return UploadRecord(
        record_id=record_id,
        product=product,
        display_name=kwargs.pop("display_name", "Maria"),
        quantity=kwargs.pop("quantity", 1),
        files=[
            LabelFile(
                file_name=f"label-{i}.pdf",
                download_url=f"https://cdn.example.com/etiquetas/{record_id}_{i}.pdf",
                storage_path=f"etiquetas/{record_id}_{i}.pdf",
                size_bytes=2048
            )
            for i in range(files)
        ],
        created_at=kwargs.pop("created_at", datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)),
        status=status,
        **kwargs
    )
