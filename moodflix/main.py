from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from moodflix.database import SessionLocal, init_db
from moodflix.routes import auth, functions, admin
from moodflix.middleware.security import SecurityHeadersMiddleware
from moodflix.services.background_jobs import background_jobs
import os
import logging

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
DEV_ORIGINS = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and run the scheduler for the app's lifetime"""
    logger.info(f"MoodFlix API {API_VERSION} starting (environment: {os.getenv('ENVIRONMENT', 'development')})")
    init_db()

    try:
        background_jobs.start()
    except Exception as e:
        logger.error(f"Failed to start background jobs: {str(e)}")

    yield

    try:
        background_jobs.shutdown()
    except Exception as e:
        logger.error(f"Error stopping background jobs: {str(e)}")
    logger.info("MoodFlix API stopped")


app = FastAPI(
    title="MoodFlix API",
    description="Mood based movie discovery: AI recommendations, watchlists, collections, reviews and follows",
    version=API_VERSION,
    lifespan=lifespan
)


# ============================================
# Middleware
# ============================================

def _allowed_origins() -> List[str]:
    """Local dev servers, FRONTEND_URL, and any extra CORS_ORIGINS (comma separated)"""
    origins = list(DEV_ORIGINS)
    extra = [os.getenv("FRONTEND_URL", "")] + os.getenv("CORS_ORIGINS", "").split(",")
    origins.extend(o.strip() for o in extra if o.strip() and o.strip() not in origins)
    return origins


allowed_origins = _allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)

if os.getenv("ENVIRONMENT") == "production":
    trusted_hosts = [h.strip() for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h.strip()]
    if trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers
# ============================================

def _error_response(request: Request, status_code: int, detail, headers=None) -> JSONResponse:
    """
    JSON error body that keeps the CORS headers, so the browser sees the
    real status (401 session expired, 429 rate limited) instead of a CORS failure.
    """
    response = JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)
    origin = request.headers.get("origin")
    if origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return _error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 422, jsonable_encoder(exc.errors()))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return _error_response(request, 500, "Internal server error")


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    return {"message": "MoodFlix API", "version": API_VERSION, "docs": "/docs"}


@app.get("/health", tags=["Health"])
def health_check():
    """Database reachability and which upstream services are configured"""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {str(e)}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "api_version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
        "ai_recommendations": bool(os.getenv("LLM_API_KEY")),
        "catalog": bool(os.getenv("TMDB_API_KEY")),
        "background_jobs": background_jobs.scheduler.running,
    }


app.include_router(auth.router)
app.include_router(functions.router)
app.include_router(admin.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
