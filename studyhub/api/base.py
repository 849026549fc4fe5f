from fastapi import APIRouter
from studyhub.api import health, study_timer

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(study_timer.router)
