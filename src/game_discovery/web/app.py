"""Minimal FastAPI app entry."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from game_discovery.scheduler import start_scheduler, stop_scheduler
from game_discovery.web.routes import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="Game Discovery", version="0.1.0", lifespan=lifespan)
app.include_router(api_router, prefix="/api", tags=["api"])


@app.get("/")
async def root():
    return {"message": "Game Discovery", "docs": "/docs"}
