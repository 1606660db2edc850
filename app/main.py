import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.employees.router import router as employees_router
from app.api.v1.leave_blackouts.router import router as leave_blackouts_router
from app.api.v1.leaves.router import router as leaves_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.session import Base, engine

# Register every model on Base.metadata before create_all
import app.core.models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(title="HR Leave Platform", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Persistence and fallback errors never leak stack traces
    register_exception_handlers(app)

    # Routers
    app.include_router(leaves_router)
    app.include_router(leave_blackouts_router)
    app.include_router(employees_router)

    return app


app = create_app()
