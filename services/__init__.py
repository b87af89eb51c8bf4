"""
Business logic services.

Each service handles one domain area.
"""

from services.file_service import FileService, get_file_service
from services.sweep_service import SweepService, SweepScheduler, get_sweep_service

__all__ = [
    "FileService",
    "get_file_service",
    "SweepService",
    "SweepScheduler",
    "get_sweep_service",
]
