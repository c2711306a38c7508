from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.config.settings_env import settings
from src.infrastructure.api.errors import register_exception_handlers
from src.infrastructure.api.routers import parking, payments, vehicles
from src.infrastructure.persistence.database import init_db
from src.shared.utils import initialize_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Parking API ready")
    yield


def create_app(init_database: bool = True) -> FastAPI:
    initialize_logger()

    app = FastAPI(
        title="Parking Management API",
        lifespan=lifespan if init_database else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(parking.router)
    app.include_router(vehicles.router)
    app.include_router(payments.router)

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Parking Management API"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("src.main:app", host=settings.FASTAPI_HOST, port=settings.FASTAPI_PORT, reload=settings.DEV_MODE)
