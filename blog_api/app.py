import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from blog_api.core.config import get_settings
from blog_api.core.exceptions import AuthenticationError, BlogApiError
from blog_api.core.responses import error_response, internal_error_response, validation_error_response
from blog_api.resources import configure_resources
from blog_api.routers import auth as auth_router
from blog_api.routers import posts as posts_router
from blog_api.routers import weather as weather_router

logger = logging.getLogger(__name__)

UNAUTHENTICATED_BODY = {"status": 401, "message": AuthenticationError.default_message}
MISSING_ROUTE_BODY = {"status": 404, "message": "The requested API endpoint does not exist."}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; img-src 'self'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class CachedStaticFiles(StaticFiles):
    def set_headers(self, scope, resp, path, stat_result):
        # Stored names are random and never reused.
        resp.headers["Cache-Control"] = "public, max-age=31536000, immutable"


def _allowed_origins(settings) -> list[str]:
    origins = {settings.public_base_url}
    if settings.app_env != "prod":
        origins.update(
            {
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    return sorted(origin for origin in origins if origin)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def unauthenticated(request: Request, exc: AuthenticationError):
        return JSONResponse(UNAUTHENTICATED_BODY, status_code=401)

    @app.exception_handler(BlogApiError)
    async def application_error(request: Request, exc: BlogApiError):
        return error_response(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(MISSING_ROUTE_BODY, status_code=404)
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
            errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
        return validation_error_response(errors=errors)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return internal_error_response()


def create_app() -> FastAPI:
    """Build the FastAPI application (also used by uvicorn through ``app``)."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    os.makedirs(settings.storage_root, exist_ok=True)
    app.mount(
        settings.storage_url_prefix,
        CachedStaticFiles(directory=settings.storage_root, check_dir=False),
        name="storage",
    )

    _register_exception_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(posts_router.router)
    app.include_router(weather_router.router)
    configure_resources()
    return app


app = create_app()
