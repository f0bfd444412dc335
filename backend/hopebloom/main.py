# hopebloom/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hopebloom.config import settings
from hopebloom.core.db import init_db, close_db
from hopebloom.core.bootstrap import ensure_default_superuser
from hopebloom.core.errors import ServiceError
from hopebloom.api.v1.routers import auth

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    # Refuse to start without JWT_SECRET / DATABASE_URL
    settings.require()
    await init_db()
    # Ensure there's a superuser on first run so admins can be appointed
    await ensure_default_superuser()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()


# ===== Error envelope: {"success": false, "message": ...} =====
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Only reached when the body isn't a JSON object at all
    errors = [str(e.get("msg", "Invalid request")) for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Invalid request body", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


# REST
app.include_router(auth.router, prefix="/api/v1")


@app.get("/api/health")
def health():
    return {"success": True, "ok": True, "message": "HopeBloom API is running"}


def run() -> None:
    """Console entry point: validate configuration, then serve with uvicorn."""
    import uvicorn

    settings.require()
    uvicorn.run("hopebloom.main:app", host=settings.host, port=settings.port)
