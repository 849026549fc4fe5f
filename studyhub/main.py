import logging
from contextlib import asynccontextmanager

from studyhub import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.get_log_level(),
    format=config.LOG_FORMAT,
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from studyhub.api.base import api_router  # noqa: E402
from studyhub.api.study_timer import shutdown_timer_registry  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cancel every live countdown before the loop goes away
    await shutdown_timer_registry()


app = FastAPI(
    title="StudyHub Backend API",
    description="Backend API for StudyHub - study timer sessions and stats",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "StudyHub Backend API",
        "docs": "/docs",
        "version": "1.0.0"
    }
