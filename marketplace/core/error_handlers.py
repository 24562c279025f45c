from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    """Database errors that escaped the service layer"""
    logger.error(f"Store error: {type(exc).__name__}: {exc} - Path: {request.url.path}")
    return JSONResponse(
        status_code=503,
        content={
            "detail": {
                "error": "Store Error",
                "message": "The request could not be completed. Please try again.",
                "retryable": True,
            }
        }
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - Path: {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "Internal server error", "type": "InternalError"}}
    )
