"""
Core configuration for the Label Tracker API.
Manages environment variables and AWS service settings.
"""
import os
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""
    
    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "")
    labels_table_name: str = os.getenv("LABELS_TABLE_NAME", "")
    labels_collection: str = os.getenv("LABELS_COLLECTION", "subidas")
    storage_prefix: str = os.getenv("STORAGE_PREFIX", "etiquetas")
    public_base_url: Optional[str] = os.getenv("PUBLIC_BASE_URL") or None
    
    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Label Tracker API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    
    # Uploads
    download_link_expiration_seconds: int = int(os.getenv("DOWNLOAD_LINK_EXPIRATION_SECONDS", "3600"))
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
    
    # Recent uploads view
    recent_uploads_limit: int = int(os.getenv("RECENT_UPLOADS_LIMIT", "50"))
    subscription_poll_seconds: float = float(os.getenv("SUBSCRIPTION_POLL_SECONDS", "2"))
    
    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "false").lower() == "true"
    
    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")
    
    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
