from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
import logging
import time

from .core.config import settings
from .core.database import close_db_connections
from .core.error_handlers import store_exception_handler, general_exception_handler
from .core.logging import setup_logging

from .routers import health, profiles, catalog, enrollments, certificates, events
from .routers.admin import payments, stats

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} ({settings.environment})")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await close_db_connections()
    logger.info("Shutdown complete")

app = FastAPI(
    title="JU10 Marketplace API",
    description="Courses, mentorships, class groups and events with manual payment-reference confirmation",
    version=settings.app_version,
    lifespan=lifespan
)

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {process_time:.3f}s")
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

app.add_exception_handler(SQLAlchemyError, store_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include all routers
app.include_router(health.router)
app.include_router(profiles.router)
app.include_router(catalog.router)
app.include_router(enrollments.router)
app.include_router(certificates.router)
app.include_router(events.router)
app.include_router(payments.router)
app.include_router(stats.router)

@app.get("/")
async def root():
    return {
        "message": "JU10 Marketplace API",
        "version": settings.app_version,
        "status": "active"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
