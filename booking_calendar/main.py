"""
Main FastAPI application
"""
import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking_calendar.config.settings import settings
from booking_calendar.routes import bookings
from booking_calendar.services.booking_source import BookingSourceError, booking_source

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    print(f"🚀 {settings.APP_NAME} v{settings.VERSION} started")
    if booking_source.data_source == "beds24":
        print("✓ Beds24 API credentials configured")
        for room in booking_source.rooms:
            print(f"    - {room.name.upper()}: Property {room.property_id or 'not set'}, Room {room.room_id or 'n/a'}")
    elif booking_source.data_source == "ics":
        print("✓ ICS feeds configured")
        for room in booking_source.rooms:
            print(f"    - {room.name.upper()}: {room.ics_url or 'no feed'}")
    else:
        print("✗ No Beds24 API credentials found, serving sample data")
        print("  Set BEDS24_API_TOKEN and <ROOM>_PROPERTY_ID / <ROOM>_ROOM_ID to use Beds24")
    yield
    print("👋 Application shutdown")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Round-trip through json with default=str to handle non-serializable objects (e.g. ValueError)
    safe_errors = json.loads(json.dumps(exc.errors(), default=str))
    logger.warning("❌ 422 VALIDATION ERROR on %s %s: %s", request.method, request.url.path, safe_errors)
    return JSONResponse(status_code=422, content={"success": False, "detail": safe_errors})


@app.exception_handler(BookingSourceError)
async def booking_source_exception_handler(request: Request, exc: BookingSourceError):
    logger.error("❌ Error fetching bookings on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={
        "success": False,
        "error": "Failed to fetch bookings",
        "message": str(exc),
    })


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info("🌐 %s %s - %s (%.2fs)", request.method, request.url.path, response.status_code, duration)
    return response


# Include routers
app.include_router(bookings.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running",
        "dataSource": booking_source.data_source,
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
