from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from tortoise.contrib.fastapi import RegisterTortoise

from futsal import settings
from futsal.errors import DomainError
from futsal.routers import (
    admin_auth,
    admin_bookings,
    admin_fields,
    admin_roles,
    admin_venues,
    auth,
    bookings,
    mobile_fields,
)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    async with RegisterTortoise(
        app,
        config=settings.tortoise_config(),
        generate_schemas=settings.GENERATE_SCHEMAS,
    ):
        logger.info("Futsal booking API started (timezone {})", settings.APP_TIMEZONE)
        yield


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
            headers=exc.headers,
        )

    @app.middleware("http")
    async def log_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.opt(exception=True).error(
                "Unhandled error on {} {}", request.method, request.url.path
            )
            raise


def create_app() -> FastAPI:
    app = FastAPI(title="Futsal Booking API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    for module in (
        auth,
        admin_auth,
        admin_roles,
        admin_venues,
        admin_fields,
        admin_bookings,
        bookings,
        mobile_fields,
    ):
        app.include_router(module.router, prefix=API_PREFIX)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
