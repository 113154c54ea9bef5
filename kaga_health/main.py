# kaga_health/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from kaga_health import __version__
from kaga_health.core.config import settings
from kaga_health.core.errors import ServiceError
from kaga_health.core.logging import configure_logging
from kaga_health.db.sql import engine, init_db
from kaga_health.routers import (
    appointments,
    auth,
    bookings,
    health,
    notes,
    patients,
    schedules,
    staff,
    users,
)

logger = logging.getLogger("kaga_health.startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Configure logging and make sure every table exists before serving.
    """
    configure_logging()
    await init_db()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(kind: str, message: str, status_code: int, details=None) -> dict:
    body = {"error": kind, "message": message, "status": status_code}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.kind, exc.code, exc.status_code),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(
        status_code=code,
        content=_error_body("validation_error", "invalid_request", code, exc.errors()),
    )


@app.exception_handler(PydanticValidationError)
async def model_validation_handler(request: Request, exc: PydanticValidationError):
    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(
        status_code=code,
        content=_error_body(
            "validation_error",
            "invalid_request",
            code,
            exc.errors(include_url=False, include_context=False),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error on %s %s", request.method, request.url.path)
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=_error_body("internal_error", "internal_error", code))


# Routing
app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["auth"])
app.include_router(users.router, prefix=settings.API_PREFIX, tags=["users"])
app.include_router(patients.router, prefix=settings.API_PREFIX, tags=["patients"])
app.include_router(staff.router, prefix=settings.API_PREFIX, tags=["medical-staff"])
app.include_router(schedules.router, prefix=settings.API_PREFIX, tags=["work-schedules"])
app.include_router(appointments.router, prefix=settings.API_PREFIX, tags=["appointments"])
app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["bookings"])
app.include_router(notes.router, prefix=settings.API_PREFIX, tags=["doctor-notes"])


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} running"}
