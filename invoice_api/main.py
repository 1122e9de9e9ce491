from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime, timezone

from . import __version__
from .config import get_settings
from .errors import InvoiceAPIError
from .logs import logger
from .models import ErrorResponse
from .ratelimit import RateLimiter
from .routers.invoices import router as invoices_router

log = logger(__file__)

SERVICE_NAME = "crown-interiors-api"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def _error(status_code: int, error: str, details=None, headers=None) -> JSONResponse:
    # Responses from the catch-all handler never pass back through the middleware
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(exclude_none=True),
        headers={**SECURITY_HEADERS, **(headers or {})},
    )


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Invoice API",
        description="Invoices and estimates: CRUD, duplication, dashboard stats and PDF export",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window)

    @app.middleware("http")
    async def rate_limit_and_headers(request: Request, call_next):
        client_ip = request.client.host if request.client else "unknown"
        retry_after = app.state.rate_limiter.hit(client_ip)
        if retry_after is not None:
            response = _error(
                429,
                "Too many requests, please try again later",
                headers={"Retry-After": str(retry_after)},
            )
        else:
            response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.include_router(invoices_router)

    @app.get("/health")
    async def health_check():
        """Uptime check, no authentication"""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Error handlers
    @app.exception_handler(InvoiceAPIError)
    async def invoice_api_error_handler(request: Request, exc: InvoiceAPIError):
        if exc.status_code >= 500:
            log.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.error, exc.details)
            if settings.is_production:
                return _error(exc.status_code, exc.error)
        return _error(exc.status_code, exc.error, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"] if part != "body"),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        return _error(400, "Validation error", details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return _error(404, f"Route {request.method} {request.url.path} not found")
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            500,
            "Internal server error" if settings.is_production else str(exc),
        )

    return app


app = create_app()
