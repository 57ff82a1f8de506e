from contextlib import asynccontextmanager

from fastapi import FastAPI
from settlegraph.core.config import settings
from settlegraph.core.logging import configure_logging
from settlegraph.db.mongo import connect_to_mongo, close_mongo_connection
from settlegraph.api.v1.api import api_router

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

@app.get("/")
async def root():
    return {"message": "Welcome to SettleGraph API"}

app.include_router(api_router, prefix=settings.API_V1_STR)
