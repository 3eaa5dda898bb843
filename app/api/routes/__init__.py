from fastapi import APIRouter
from app.api.routes import code_insertions, health, projects

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router)
api_router.include_router(projects.router)
api_router.include_router(code_insertions.router)
