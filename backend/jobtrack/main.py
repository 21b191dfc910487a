import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobtrack.core.config import settings, require_jwt_secret
from jobtrack.core.errors import AppError, ErrorKind
from jobtrack.core.logging import configure_logging
from jobtrack.core.security import get_token_config
from jobtrack.dependencies.auth import get_identity
from jobtrack.routes.auth import router as auth_router
from jobtrack.routes.job_applications import router as jobs_router

logger = logging.getLogger(__name__)

configure_logging()
require_jwt_secret()
# Built once here; the gate and the token issuer share this immutable config.
get_token_config()

app = FastAPI(title="Job Application Tracker")
logger.info("Startup config: ENV=%s db_backend=%s", settings.ENV, settings.database_url.split(":", 1)[0])

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: ErrorKind.INVALID_INPUT.code,
    401: "UNAUTHORIZED",
    404: ErrorKind.NOT_FOUND.code,
    405: "METHOD_NOT_ALLOWED",
    422: ErrorKind.INVALID_INPUT.code,
    500: ErrorKind.INTERNAL_FAULT.code,
}


def _error_code(status_code: int) -> str:
    return _ERROR_CODE_BY_STATUS.get(int(status_code), "HTTP_ERROR")


def _field_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        key = ".".join(loc) or "body"
        errors.setdefault(key, str(err.get("msg") or "Invalid value"))
    return errors


@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):  # noqa: ARG001
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind.is_unauthorized else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):  # noqa: ARG001
    detail = exc.detail
    message = detail if isinstance(detail, str) and detail else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": _error_code(exc.status_code), "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    error = AppError(ErrorKind.INVALID_INPUT, "Invalid request payload", errors=_field_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(SQLAlchemyError)
def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(
        "Database error on %s %s (user_id=%s)",
        request.method,
        request.url.path,
        get_identity(request).user_id,
    )
    error = AppError(ErrorKind.INTERNAL_FAULT)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):  # noqa: ARG001
    # Starlette re-raises after this response, so the server still logs the traceback.
    error = AppError(ErrorKind.INTERNAL_FAULT)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(jobs_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
