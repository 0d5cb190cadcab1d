# technurture/main.py

import asyncio
import multiprocessing
import os
import time
import traceback
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.sessions import SessionMiddleware

from technurture.config import settings
from technurture.middleware.auth import login_limiter
from technurture.middleware.security_middleware import (
    BodySizeLimitMiddleware,
    PayloadTooLargeError,
    SecurityHeadersMiddleware,
    payload_too_large_response,
)
from technurture.middleware.storage_middleware import StorageMiddleware
from technurture.services.auth import load_secret
from technurture.storage import DuplicateError, NotFoundError, close_storage, get_storage
from technurture.utils.log import Log, boot_log

# --- environment ---
load_dotenv()

if os.environ.get("RUN_MAIN") == "true" or multiprocessing.current_process().name == "MainProcess":
    boot_log.log_info_sync(target="startup", message="main.py imports done")


async def sweep_login_attempts(log: Log, interval: float):
    """Evict stale rate-limit entries for the life of the process."""
    while True:
        await asyncio.sleep(interval)
        removed = login_limiter.sweep()
        if removed:
            await log.log_info("auth", "Swept stale login attempts", {"removed": removed})


# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_log.log_info_sync(target="startup", message="lifespan: startup")

    storage = await get_storage()
    boot_log.log_info_sync(target="startup", message="Storage ready", data={"backend": storage.name})

    app.state.log = Log()
    await app.state.log.log_info(target="startup", message="Async Log ready")

    sweeper = asyncio.create_task(sweep_login_attempts(app.state.log, settings.LOGIN_SWEEP_SECONDS))

    yield

    # shutdown
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    await close_storage()
    await app.state.log.log_info(target="shutdown", message="Application stopped")
    await app.state.log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log closed")


# ────────────── Error responses ──────────────
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "errors": errors})


async def http_error_handler(request: Request, exc: HTTPException):
    content = {"success": False}
    if isinstance(exc.detail, dict):
        content.update(exc.detail)
    else:
        content["message"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"success": False, "message": str(exc)})


async def duplicate_handler(request: Request, exc: DuplicateError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "message": str(exc)})


async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
    return payload_too_large_response()


async def unhandled_error_handler(request: Request, exc: Exception):
    await request.app.state.log.log_error("error", f"Unhandled error: {exc}", {
        "method": request.method,
        "url": str(request.url),
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    })
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


# ────────────── Application ──────────────
def create_app() -> FastAPI:
    app = FastAPI(title="TechNurture API", lifespan=lifespan)

    # last added runs first: CORS, then body limit, headers, session, storage
    app.add_middleware(StorageMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=load_secret(settings.SESSION_SECRET, "SESSION_SECRET", 32),
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = round((time.perf_counter() - start) * 1000)
            await request.app.state.log.log_info(
                "request", f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
            )
        return response

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(PayloadTooLargeError, payload_too_large_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DuplicateError, duplicate_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/api/health", tags=["health"])
    async def health(request: Request):
        return {"status": "ok", "storage": request.state.storage.name}

    # ────────────── Routers ──────────────
    from technurture.routes import auth, blog, forms, lead, upload, users

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(lead.router, prefix="/api", tags=["lead"])
    app.include_router(blog.router, prefix="/api/blog", tags=["blog"])
    app.include_router(forms.router, prefix="/api", tags=["forms"])
    app.include_router(upload.router, prefix="/api", tags=["upload"])

    return app


app = create_app()

# ────────────── uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Starting uvicorn")
    uvicorn.run(
        "technurture.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
    )
