# API Routes
from .projects import router as projects_router
from .idea import router as idea_router
from .build import router as build_router
from .deploy import router as deploy_router
from .memory import router as memory_router

__all__ = [
    "projects_router",
    "idea_router",
    "build_router",
    "deploy_router",
    "memory_router",
]
