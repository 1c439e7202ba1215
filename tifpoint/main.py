from dotenv import load_dotenv
import os
import logging

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tifpoint.core.config import settings
from tifpoint.core.logging import setup_logging

# ───────────────── ROUTER IMPORTS ─────────────────
from tifpoint.routes.auth import router as auth_router
from tifpoint.routes.activities import router as activities_router
from tifpoint.routes.dashboard import router as dashboard_router
from tifpoint.routes.reference import router as reference_router
from tifpoint.routes.users import router as users_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TIFPoint API",
    description="Backend API for student competency point tracking",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# ───────── SAFE VALIDATION HANDLER ─────────

def _sanitize(obj):
    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, Exception):
        return str(obj)
    return obj


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    safe_errors = _sanitize(exc.errors())
    return JSONResponse(
        status_code=422,
        content={"detail": safe_errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Server error"},
    )

# ───────────────── CORS ─────────────────

origins = settings.origins_list or [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────── ROUTES ─────────────────

app.include_router(auth_router, prefix="/api")
app.include_router(activities_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(reference_router, prefix="/api")
app.include_router(users_router, prefix="/api")

# ───────────────── HEALTH ─────────────────

@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "ok",
        "app": "TIFPoint API",
        "env": settings.APP_ENV,
        "target_points": settings.TARGET_POINTS,
    }


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy"}
