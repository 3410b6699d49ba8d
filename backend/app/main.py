"""
FastAPI application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.config import get_settings
from app.routes import auth, drafts, health, sheets, template, user
from app.utils.errors import AppError
from app.utils.logger import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Gmail Drafter",
    description="Create personalized Gmail drafts from Google Sheets rows",
    version="1.0.0",
)

# Get settings
settings = get_settings()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Known errors carry a message meant for direct display."""
    logger.error(f"{request.method} {request.url.path} [{exc.code}]: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    """Keep HTTPException bodies in the same { error, code } shape."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": str(exc.detail), "code": "HTTP_ERROR"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Something went wrong. Please try again.", "code": "INTERNAL_ERROR"},
    )


# Include routers
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/api", tags=["User"])
app.include_router(sheets.router, prefix="/api", tags=["Sheets"])
app.include_router(template.router, prefix="/api", tags=["Template"])
app.include_router(drafts.router, prefix="/api", tags=["Drafts"])


@app.get("/")
async def root():
    """Root endpoint - points at docs."""
    return {
        "message": "Gmail Drafter API",
        "docs": "/docs",
        "health": "/api/health",
    }
