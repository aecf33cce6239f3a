"""
Global exception handler for the Label Tracker API.
Turns every failure into a short human-readable message; causes are logged only.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from src.core import messages
from .exceptions import (
    LabelTrackerException,
    PersistenceException,
    RecordNotFoundException,
    SubmissionInProgressException,
    SubscriptionException,
    TransferException,
    TransitionNotAllowedException,
    UpdateInProgressException,
    UploadFailedException,
    ValidationException
)

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, exc: LabelTrackerException) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": exc.user_message}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    
    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        return _error(400, "Validation Error", exc)
    
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={"error": "Validation Error", "message": messages.INVALID_REQUEST}
        )
    
    @app.exception_handler(RecordNotFoundException)
    async def handle_not_found(request: Request, exc: RecordNotFoundException):
        return _error(404, "Not Found", exc)
    
    @app.exception_handler(TransitionNotAllowedException)
    async def handle_transition_error(request: Request, exc: TransitionNotAllowedException):
        logger.warning(f"Rejected status change: {exc.message}")
        return _error(409, "Transition Not Allowed", exc)
    
    @app.exception_handler(SubmissionInProgressException)
    async def handle_submission_in_progress(request: Request, exc: SubmissionInProgressException):
        return _error(409, "Upload In Progress", exc)
    
    @app.exception_handler(UpdateInProgressException)
    async def handle_update_in_progress(request: Request, exc: UpdateInProgressException):
        return _error(409, "Update In Progress", exc)
    
    @app.exception_handler(UploadFailedException)
    async def handle_upload_failed(request: Request, exc: UploadFailedException):
        return _error(502, "Upload Failed", exc)
    
    @app.exception_handler(TransferException)
    async def handle_transfer_error(request: Request, exc: TransferException):
        logger.error(f"Storage error: {exc.message}")
        return _error(502, "Storage Error", exc)
    
    @app.exception_handler(SubscriptionException)
    async def handle_subscription_error(request: Request, exc: SubscriptionException):
        logger.error(f"Read permission denied: {exc.message}")
        return _error(403, "Permission Denied", exc)
    
    @app.exception_handler(PersistenceException)
    async def handle_persistence_error(request: Request, exc: PersistenceException):
        logger.error(f"Database error: {exc.message}")
        return _error(502, "Database Error", exc)
    
    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": messages.UNEXPECTED_ERROR}
        )
