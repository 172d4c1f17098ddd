"""
AeroJob - Main Application

FastAPI backend with:
- PostgreSQL for structured data (users, companies, jobs)
- MongoDB for documents (surveys, survey responses, search logs)
- JWT authentication
- Email notifications

Run: uvicorn aerojob.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aerojob.api.routes import api_router
from aerojob.core.config import get_settings
from aerojob.core.errors import AeroJobError
from aerojob.core.logging import setup_logging
from aerojob.db.mongodb import init_mongo_indexes

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="AeroJob",
    description="""
    Job board backend for students and alumni.

    ## Features
    - **Authentication**: JWT-based auth for students, alumni and admins
    - **Companies & Jobs**: Admin-managed listings, public search
    - **Surveys**: Audience-targeted surveys, one response per participant,
      CSV export of responses
    - **Analytics**: Search term logging

    ## Databases
    - PostgreSQL: Structured data (users, companies, jobs)
    - MongoDB: Documents (surveys, responses, search logs)
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors -> {"detail": ...} with the error's status code
@app.exception_handler(AeroJobError)
async def aerojob_error_handler(request: Request, exc: AeroJobError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """
    Migrate legacy survey responses and build MongoDB indexes.
    Startup fails if uniq_survey_participant cannot be built.
    """
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.error("MongoDB index initialization failed: %s", e)
        raise


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "AeroJob"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from aerojob.db import test_postgres_connection, test_mongo_connection

    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
