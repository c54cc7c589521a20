import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fittrack.api import auth, chat, dashboard, foods, meals, profile, realtime, webhooks
from fittrack.core.config import settings
from fittrack.core.errors import GENERIC_ERROR_MESSAGE, FitTrackError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="FitTrack API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth, profile, meals, foods, dashboard, chat, webhooks, realtime):
    app.include_router(module.router)


# ---------- ERRORS ----------


@app.exception_handler(FitTrackError)
async def fittrack_error_handler(request: Request, exc: FitTrackError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc} ({exc.details})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc), "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # ("body", "email") -> "email"
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=422,
        content={"error": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"[API] Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE, "retry": True},
    )


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "app": "FitTrack",
        "db_url_present": bool(settings.database_url),
    }
