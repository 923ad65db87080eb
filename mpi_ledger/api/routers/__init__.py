"""
API routers module.
"""
from api.routers.health import router as health_router
from api.routers.invoke import router as invoke_router

__all__ = ["health_router", "invoke_router"]
