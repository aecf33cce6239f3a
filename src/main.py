"""
Main FastAPI application entry point.
Configures and initializes the Label Tracker API.
"""
import logging
from fastapi import FastAPI, Request
from mangum import Mangum
from src.core.config import settings
from src.core.exception_handler import register_exception_handlers
from src.core.logging_config import configure_logging
from src.api.routes import health_routes, label_routes

configure_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Upload PDF shipping labels and track them from pending to shipped",
    root_path=f"/{settings.environment}"
)

# Register exception handlers
register_exception_handlers(app)

# Register routes
app.include_router(health_routes.router)
app.include_router(label_routes.router)

# Middleware to log request paths
@app.middleware("http")
async def log_request(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    return response

# Lambda handler for AWS
handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
