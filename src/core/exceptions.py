"""
Custom exceptions for the Label Tracker API.
Provides specific error types for different failure scenarios.

`message` carries the underlying detail and is only logged; `user_message`
is the short text returned to the client.
"""
from typing import Optional
from src.core import messages


class LabelTrackerException(Exception):
    """Base exception for all application errors."""
    user_message = messages.UNEXPECTED_ERROR
    
    def __init__(self, message: str, user_message: Optional[str] = None):
        self.message = message
        if user_message:
            self.user_message = user_message
        super().__init__(self.message)


class ValidationException(LabelTrackerException):
    """Raised when a submission fails validation. The message is shown to the user."""
    def __init__(self, message: str):
        super().__init__(message, user_message=message)


class RecordNotFoundException(LabelTrackerException):
    """Raised when an upload record or one of its files does not exist."""
    user_message = messages.RECORD_NOT_FOUND


class TransitionNotAllowedException(LabelTrackerException):
    """Raised when a status change is not a legal forward transition."""
    user_message = messages.TRANSITION_NOT_ALLOWED


class SubmissionInProgressException(LabelTrackerException):
    """Raised when an upload session already has a submission in flight."""
    user_message = messages.UPLOAD_IN_PROGRESS


class UpdateInProgressException(LabelTrackerException):
    """Raised when a status change for the same record is already in flight."""
    user_message = messages.UPDATE_IN_PROGRESS


class TransferException(LabelTrackerException):
    """Raised when a blob storage (S3) operation fails."""
    user_message = messages.TRANSFER_FAILED


class PersistenceException(LabelTrackerException):
    """Raised when a record store (DynamoDB) operation fails."""
    user_message = messages.UPDATE_FAILED


class SubscriptionException(PersistenceException):
    """Raised when read permission on the upload records is denied."""
    user_message = messages.READ_DENIED


class UploadFailedException(LabelTrackerException):
    """Raised by the upload workflow when a file transfer or the record write fails."""
    user_message = messages.UPLOAD_FAILED
