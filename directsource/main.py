# directsource/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from directsource.data.database import Base, engine
from directsource.api.routers import users, carts, orders, manufacturers, health
from directsource.utils.logging import get_logger

# import wszystkich modeli, zeby byly w Base.metadata przed create_all
import directsource.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db(bind=engine):
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=bind)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables created")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="DirectSource Cart Service",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(manufacturers.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
