"""
FormSink - Main entry point.

FastAPI application receiving form and chat-widget submissions and
saving them to Supabase and Google Sheets.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.router import router
from src.utils.config import get_settings
from src.utils.logger import logger, setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(settings.log_level, json_logs=not settings.debug)
    logger.info("application_starting", version=settings.version)

    yield

    # Shutdown
    logger.info("application_stopping")


app = FastAPI(
    title=settings.app_name,
    description="Form submissions to Supabase and Google Sheets",
    version=settings.version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Routes
app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Render 405 as JSON, keeping the Allow header."""
    if exc.status_code == 405:
        return JSONResponse(
            {"error": f"Method {request.method} Not Allowed"},
            status_code=405,
            headers=exc.headers,
        )
    return await http_exception_handler(request, exc)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.version,
        "checks": {
            "supabase": "configured" if settings.supabase_url and settings.supabase_key else "missing",
            "google_sheets": "configured" if settings.spreadsheet_id else "missing",
            "google_credentials": (
                "configured"
                if settings.google_service_account_credentials or settings.google_credentials_file
                else "missing"
            ),
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
