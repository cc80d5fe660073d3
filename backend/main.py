from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
import logging

from config.logging import setup_logging
from config.env import settings
from database import init_db
from routers import cards, card_sets, generation
from utils.errors import AppError

# Set up logging
setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version
)

HTTP_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "DUPLICATE_ENTRY",
    429: "RATE_LIMIT_EXCEEDED",
}

@app.on_event("startup")
async def startup_event():
    """Create database tables on startup."""
    try:
        logger.info("Initializing database...")
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize server: {str(e)}")
        # Re-raise to prevent server from starting without its tables
        raise

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Translate application errors into the shared error shape."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures field by field."""
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.info(f"Validation error on {request.method} {request.url.path}: {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data", "code": "VALIDATION_ERROR", "details": {"fields": fields}},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": HTTP_ERROR_CODES.get(exc.status_code, "UNKNOWN_ERROR")},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and hide their details from the client."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "UNKNOWN_ERROR"},
    )

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(cards.router, prefix="/api/cards", tags=["cards"])
app.include_router(card_sets.router, prefix="/api/card-sets", tags=["card-sets"])
app.include_router(generation.router, prefix="/api/generation", tags=["generation"])

@app.get("/")
async def root():
    return {"message": "Welcome to the 10xCards API"}

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    logger.info("Starting 10xCards API server")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
