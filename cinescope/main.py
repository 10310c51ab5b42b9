from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from cinescope.database import init_db
from cinescope.exceptions import NotFoundError, UpstreamFetchError, ValidationError
from cinescope.middleware.security import SecurityHeadersMiddleware
from cinescope.routes import admin, auth, favorites, genres, movies, search, tv
from cinescope.services.background_jobs import background_jobs
import os
import logging

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# ============================================
# Application Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create missing tables, start background jobs.
    Shutdown: stop background jobs.
    """
    logger.info("CineScope API starting (environment: %s)", os.getenv("ENVIRONMENT", "development"))
    init_db()

    try:
        background_jobs.start()
    except Exception as e:
        logger.error(f"Failed to start background jobs: {str(e)}")

    yield

    logger.info("CineScope API shutting down")
    try:
        background_jobs.shutdown()
    except Exception as e:
        logger.error(f"Error stopping background jobs: {str(e)}")


app = FastAPI(
    title="CineScope API",
    description="Movie and TV browsing backed by TMDB, with accounts and favorites",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ============================================
# Security Configuration
# ============================================

allowed_origins = [
    "https://cinescope-kappa.vercel.app",
    "http://localhost:5173",
    "http://localhost:3000",
]
if production_url := os.getenv("FRONTEND_URL"):
    allowed_origins.append(production_url)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Origin", "X-Requested-With", "Accept"],
)

# Trusted Hosts - Production only
if os.getenv("ENVIRONMENT") == "production":
    if trusted_hosts := [h for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h]:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


# ============================================
# Exception Handlers
# ============================================

def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _failure(400, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _failure(404, exc.message)


@app.exception_handler(UpstreamFetchError)
async def upstream_error_handler(request: Request, exc: UpstreamFetchError):
    logger.error(f"Upstream failure on {request.url.path}: {exc.message}")
    return _failure(502, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _failure(422, "Invalid request")
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return _failure(422, f"Invalid request: {location} - {first.get('msg', 'invalid value')}")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    response = _failure(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return _failure(500, "Internal server error")


# ============================================
# Routes
# ============================================

@app.get("/", tags=["Health"])
async def root():
    return {"message": "Welcome to CINESCOPE API"}


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Server is running"}


@app.get("/api/test/ping", tags=["Health"])
async def ping():
    return {"message": "Backend is connected!", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(auth.router)
app.include_router(movies.router)
app.include_router(tv.router)
app.include_router(search.router)
app.include_router(genres.router)
app.include_router(favorites.router)
app.include_router(admin.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        log_level="info"
    )
