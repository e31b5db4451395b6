# medistore/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from medistore.api import include_routers
from medistore.api.errors import register_exception_handlers
from medistore.data.database import Base, engine
from medistore.data import models  # noqa: F401  registers every table on Base.metadata
from medistore.utils.logging import get_logger
from medistore.utils.retry import db_connect_retry

logger = get_logger(__name__)


@db_connect_retry()
def init_db() -> None:
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="MediStore",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    include_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
