"""
HTTP API routers.
"""

from routrauth.api.auth import get_user_repository, router as auth_router

__all__ = ["auth_router", "get_user_repository"]
