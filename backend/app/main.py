from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.routers import admin, bookings, chat, ferries, finance, inventory, suppliers
from app.config import settings
from app.errors import AppError, StoreError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Log startup information
logger.info("="*60)
logger.info("Starting Ferry Logistics API")
logger.info("="*60)
logger.info(f"Database: {settings.database_url.split('@')[-1]}")
logger.info(f"Token algorithm: {settings.jwt_algorithm}, expiry {settings.access_token_expire_minutes} min")
logger.info("="*60)

# Create tables (in production, use migrations)
# Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Ferry Logistics API",
    description="Ferry bookings and supplier/inventory order workflow",
    version="1.0.0"
)


# Parse CORS origins from config
def parse_cors_origins(origins_str: str) -> list:
    """Parse CORS origins string into a list, dropping blanks."""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


all_origins = parse_cors_origins(settings.cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=all_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include routers
app.include_router(suppliers.router)
app.include_router(finance.router)
app.include_router(inventory.router)
app.include_router(bookings.router)
app.include_router(ferries.router)
app.include_router(admin.router)
app.include_router(chat.router)  # REST history + websocket relay


@app.get("/")
def root():
    return {"message": "Ferry Logistics API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


def _cors_headers(request: Request) -> dict:
    origin = request.headers.get("origin")
    if not origin or origin not in all_origins:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
    }


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Typed service errors become {"detail": ...} with their status code"""
    if isinstance(exc, StoreError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.internal_detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=_cors_headers(request)
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": StoreError.default_detail},
        headers=_cors_headers(request)
    )


# Exception handler to ensure CORS headers are always sent
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to ensure CORS headers are sent even on errors"""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=_cors_headers(request)
    )
