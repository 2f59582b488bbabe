import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from .api.api import router as api_router
from .core.config import Settings, get_settings
from .core.errors import register_exception_handlers
from .db.session import create_db_and_tables, create_db_engine
from .services.mailer import Mailer, build_mailer

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables on startup
        logger.info("Starting %s", settings.PROJECT_NAME)
        create_db_and_tables(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Multi-user task tracking API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine or create_db_engine(settings)
    app.state.mailer = mailer or build_mailer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.ALLOWED_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def read_root():
        return {"message": settings.PROJECT_NAME}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
