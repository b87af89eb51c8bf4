"""
Sweep models.

Outcome counters for one cleanup pass over the namespace.
"""

from datetime import datetime
from typing import Optional
from pydantic import Field

from models.base import CamelSchema


class SweepReport(CamelSchema):
    """
    Result of a single sweep.

    Undecodable entries are never deleted; they are counted and named here
    so files that will be retained forever show up on /health.
    """

    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool = Field(default=False, description="Sweep did not run (store not configured)")
    error: Optional[str] = Field(None, description="Listing failure that ended the sweep early")

    scanned: int = Field(default=0, ge=0, description="File entries examined")
    retained: int = Field(default=0, ge=0, description="Decodable entries not yet expired")
    deleted: int = Field(default=0, ge=0)
    already_gone: int = Field(default=0, ge=0, description="Expired entries removed by someone else first")
    failed: int = Field(default=0, ge=0)
    undecodable: int = Field(default=0, ge=0)
    undecodable_names: list[str] = Field(default_factory=list)

    @property
    def expired(self) -> int:
        return self.deleted + self.already_gone + self.failed
