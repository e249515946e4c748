"""API routers for provenanced daemon.

This module contains FastAPI routers for all API endpoints.
"""

from .c2pa import router as c2pa_router
from .status import router as status_router
from .trust import router as trust_router

__all__ = [
    "c2pa_router",
    "status_router",
    "trust_router",
]
