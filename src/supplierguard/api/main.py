"""FastAPI application for SupplierGuard."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from supplierguard import __version__
from supplierguard.data.factory import get_default_supplier_store, load_config
from supplierguard.data.seed import sample_suppliers
from supplierguard.exceptions import (
    Conflict,
    NotFound,
    RequestRejected,
    SupplierGuardError,
    ValidationFailed,
)
from supplierguard.infrastructure import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    get_logger,
    record_request,
    set_correlation_id,
)

from .dependencies import close_screening_client
from .routes import health_router, screening_router, suppliers_router
from .schemas import ApiResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("api_startup", version=__version__)

    store_config = load_config()
    store = get_default_supplier_store()
    if store_config.seed and await store.count() == 0:
        added = await store.add_many(sample_suppliers())
        logger.info("supplier_store_seeded", suppliers=added)

    yield

    await close_screening_client()
    logger.info("api_shutdown")


def _error(status_code: int, errors: list[str], headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.fail(errors).model_dump(mode="json"),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map caller-facing errors to HTTP status codes."""

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
        logger.info("validation_failed", path=request.url.path, errors=exc.errors)
        return _error(400, exc.messages())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = [
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
            for err in exc.errors()
        ]
        return _error(400, messages)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return _error(404, [str(exc)])

    @app.exception_handler(Conflict)
    async def conflict_handler(request: Request, exc: Conflict) -> JSONResponse:
        return _error(409, [str(exc)])

    @app.exception_handler(RequestRejected)
    async def rejected_handler(request: Request, exc: RequestRejected) -> JSONResponse:
        if exc.retry_after_seconds is not None:
            return _error(429, [str(exc)], headers={"Retry-After": str(exc.retry_after_seconds)})
        return _error(400, [str(exc)])

    @app.exception_handler(SupplierGuardError)
    async def supplierguard_error_handler(
        request: Request, exc: SupplierGuardError
    ) -> JSONResponse:
        logger.error("unmapped_error", path=request.url.path, error=str(exc), exc_info=True)
        return _error(500, ["An internal server error occurred."])

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "unhandled_exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=True,
        )
        return _error(500, ["An internal server error occurred."])


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SupplierGuard API",
        description="""
## Supplier master data with high-risk list screening

### Features
- **Suppliers**: create, update, delete, filter, sort and paginate suppliers
- **Screening**: check a supplier's legal name against OffshoreLeaks,
  World Bank debarment and OFAC lists
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        """Propagate or assign a correlation ID and record request metrics."""
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        response.headers[CORRELATION_ID_HEADER] = correlation_id

        # /metrics and /health are scraped too often to be worth recording
        if not request.url.path.startswith(("/metrics", "/health")):
            record_request(
                endpoint=request.url.path,
                method=request.method,
                status=response.status_code,
                duration=duration,
            )
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )

        return response

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(suppliers_router)
    app.include_router(screening_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": "SupplierGuard API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("supplierguard.api.main:app", host="0.0.0.0", port=8000, reload=True)
