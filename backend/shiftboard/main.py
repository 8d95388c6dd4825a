from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import Engine
from starlette.middleware.cors import CORSMiddleware

from shiftboard import __version__
from shiftboard.api.errors import domain_error_handler, request_validation_handler
from shiftboard.api.main import api_router
from shiftboard.application.services import JobService
from shiftboard.core.config import Settings, get_settings
from shiftboard.core.db import engine_from_settings, init_db
from shiftboard.core.observability import (
    ObservabilityMiddleware,
    get_logger,
    setup_structured_logging,
)
from shiftboard.domain.scheduling.repositories import JobRepository
from shiftboard.domain.shared import DomainError
from shiftboard.infrastructure.database.repositories import SqlJobRepository

logger = get_logger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    tag = route.tags[0] if route.tags else "default"
    return f"{tag}-{route.name}"


def create_app(
    settings: Settings | None = None,
    repository: JobRepository | None = None,
) -> FastAPI:
    """
    Build the application.

    Without an explicit repository the jobs are stored in the database named
    by ``DATABASE_URL``; its tables are created on startup.
    """
    settings = settings or get_settings()
    engine: Engine | None = None
    if repository is None:
        engine = engine_from_settings(settings)
        repository = SqlJobRepository(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_structured_logging(settings)
        logger.info("Starting application initialization")

        try:
            if engine is not None:
                init_db(engine, settings.MACHINES)
                logger.info("Database initialized", url=engine.url.render_as_string())

            logger.info(
                "Application started successfully",
                project_name=settings.PROJECT_NAME,
                environment=settings.ENVIRONMENT,
                api_version=settings.API_V1_STR,
                slot_count=settings.slot_calendar.size,
                machine_count=len(settings.MACHINES),
                metrics_enabled=settings.ENABLE_METRICS,
            )

            yield

        except Exception as e:
            logger.error("Application startup failed", error=str(e), exc_info=True)
            raise

        finally:
            logger.info("Shutting down application")
            if engine is not None:
                engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="""
        Shiftboard - Slot-Based Shift Scheduling API

        Places production jobs on machines across a fixed shift divided into
        time slots, prevents overlapping placements and tracks each job from
        pending to completion.
        """,
        version=__version__,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.job_service = JobService(
        repository, settings.MACHINES, settings.slot_calendar
    )

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.add_middleware(ObservabilityMiddleware)

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    if settings.ENABLE_METRICS:

        @app.get("/metrics", tags=["metrics"], include_in_schema=False)
        def metrics() -> Response:
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
