import logging

import socketio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware

from seva_manager.core.config import settings
from seva_manager.core.exceptions import ServiceError
from seva_manager.routers import admin, donors, profiles, sevas
from seva_manager.schemas import ErrorResponse
from seva_manager.socket_handlers import register_socketio_handlers
from seva_manager.socket_instance import sio

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app, but name it 'fastapi_app' to avoid conflict
fastapi_app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

fastapi_app.state.sio = sio

# Set all CORS enabled origins
if settings.ALLOWED_ORIGINS:
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip() for origin in settings.ALLOWED_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@fastapi_app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    body = ErrorResponse(detail=exc.message, error=exc.kind)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@fastapi_app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors()), "error": "validation_error"},
    )


@fastapi_app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail="The data store could not complete the request.", error="store_error").model_dump(),
    )


fastapi_app.include_router(profiles.router, prefix=f"{settings.API_V1_STR}/profiles", tags=["profiles"])
fastapi_app.include_router(sevas.router, prefix=f"{settings.API_V1_STR}/sevas", tags=["sevas"])
fastapi_app.include_router(donors.router, prefix=f"{settings.API_V1_STR}/donors", tags=["donors"])
fastapi_app.include_router(admin.router, prefix=f"{settings.API_V1_STR}/admin")


@fastapi_app.get("/health", tags=["health"])
def read_root():
    return {"status": "ok"}

# Create the final ASGI app that wraps FastAPI and Socket.IO.
# This 'app' is what uvicorn will run.
app = socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
register_socketio_handlers(sio)
