# clientkeeper/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from clientkeeper.config import LOG_LEVEL
from clientkeeper.db import create_db_and_tables
from clientkeeper.routers import (
    appointments_routes,
    auth_routes,
    customers_routes,
    dogs_routes,
    users_routes,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    create_db_and_tables()
    logger.info("Database tables ready")
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Client Keeper API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(SQLAlchemyError)
async def persistence_exception_handler(request: Request, exc: SQLAlchemyError):
    # store failures are opaque to clients
    logger.exception(f"Persistence failure on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(customers_routes.router)
app.include_router(dogs_routes.router)
app.include_router(appointments_routes.router)
