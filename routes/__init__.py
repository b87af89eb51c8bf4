"""
API route modules.

Each module defines routes for one area of the API.
"""

from routes.files import router as files_router
from routes.pages import router as pages_router

__all__ = [
    "files_router",
    "pages_router",
]
