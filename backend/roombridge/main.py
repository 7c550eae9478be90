"""
RoomBridge Chat Backend - ASGI entry point.

`app` is the FastAPI application (HTTP API); `asgi_app` wraps it with the
Socket.IO server and is what uvicorn serves:

    uvicorn roombridge.main:asgi_app --app-dir backend
"""
import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roombridge.dependencies import sio
from roombridge.modules.contacts.api import contact_endpoints
from roombridge.modules.messages.api import router as messages_router
from roombridge.modules.responses.api import response_endpoints
from roombridge.modules.rooms.api import room_endpoints
from roombridge.modules.users.api import user_endpoints
from roombridge.modules.workspace_settings.api import settings_endpoints
from roombridge.shared.core.config import settings
from roombridge.shared.core.logging import setup_logging
from roombridge.shared.db.session import engine
from roombridge.shared.middleware.correlation import CorrelationIdMiddleware
from roombridge.shared.utils.exceptions import ChatBackendError
from roombridge.shared.utils.time_utils import isoformat_utc, utc_now

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("main")

DEV_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.PROJECT_NAME} starting (environment={settings.ENVIRONMENT})")
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# ============================================
# MIDDLEWARE
# ============================================

if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=DEV_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(CorrelationIdMiddleware)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(ChatBackendError)
async def chat_backend_error_handler(request: Request, exc: ChatBackendError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    missing = [str(e["loc"][-1]) for e in errors if e.get("type") == "missing"]
    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    elif errors:
        message = str(errors[0].get("msg", "Invalid request")).removeprefix("Value error, ")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ============================================
# ROUTERS
# ============================================

app.include_router(room_endpoints.router, prefix="/api/rooms", tags=["Rooms"])
app.include_router(messages_router, prefix="/api")
app.include_router(contact_endpoints.router, prefix="/api/contact", tags=["Contacts"])
app.include_router(response_endpoints.router, prefix="/api/responses", tags=["Canned Responses"])
app.include_router(settings_endpoints.router, prefix="/api/settings", tags=["Settings"])
app.include_router(user_endpoints.router, prefix="/api/users", tags=["Users"])


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "OK", "timestamp": isoformat_utc(utc_now())}


# HTTP + Socket.IO on one port
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app, socketio_path="socket.io")
