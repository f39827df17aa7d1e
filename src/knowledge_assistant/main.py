"""FastAPI application for the knowledge assistant."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from knowledge_assistant import __version__
from knowledge_assistant.api.admin import router as admin_router
from knowledge_assistant.api.health import router as health_router
from knowledge_assistant.api.resolve import router as resolve_router
from knowledge_assistant.config import settings
from knowledge_assistant.db.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Question answering assistant that learns from its users",
    version=__version__,
    lifespan=lifespan,
)

# Browser clients may call the API from any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(resolve_router)
app.include_router(admin_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Service name, version and where the API docs live."""
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs",
    }
