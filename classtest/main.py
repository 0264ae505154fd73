import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classtest.api.v1.auth.router import router as auth_router
from classtest.api.v1.class_settings.router import router as class_settings_router
from classtest.api.v1.live.router import router as live_router
from classtest.api.v1.scores.router import router as scores_router
from classtest.api.v1.sessions.router import router as sessions_router
from classtest.api.v1.students.router import router as students_router
from classtest.api.v1.submissions.router import router as submissions_router
from classtest.core.config import settings
from classtest.core.error_handlers import add_error_handlers
from classtest.db.session import init_db

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.missing_store_config()
    if missing:
        logger.warning("Store is not configured (%s); requests will fail until it is", ", ".join(missing))
    else:
        await init_db()
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Classroom Test Backend", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_error_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(students_router)
    app.include_router(sessions_router)
    app.include_router(class_settings_router)
    app.include_router(submissions_router)
    app.include_router(scores_router)
    app.include_router(live_router)

    return app


app = create_app()
