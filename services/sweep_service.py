"""
Sweep service for purging expired uploads.

Lists the storage namespace, decodes each leaf name, and deletes every
entry older than the retention window. One bad entry never stops the
sweep: failures are logged and counted per entry, and the next scheduled
sweep is the only retry.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional
import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

from config import Settings, get_content_store, get_settings
from exceptions import (
    AppError,
    DeleteConflictError,
    RemoteUnavailableError,
    StoreNotFoundError,
)
from integrations.github_store import GitHubContentStore
from models.file import StoredEntry
from models.sweep import SweepReport
from utils.expiry import (
    RETENTION_MILLIS,
    is_expired,
    now_millis,
    within_calendar_range,
)
from utils.naming import DecodedEntry, decode_name

logger = structlog.get_logger(__name__)


class SweepService:
    """
    Cleanup sweep over the managed namespace.

    The store's sha check on delete is the only guard against two sweeps
    racing on one file; the loser sees a conflict and records it as
    already gone.
    """

    def __init__(
        self,
        store: GitHubContentStore,
        settings: Settings,
        clock: Callable[[], int] = now_millis,
        retention_millis: int = RETENTION_MILLIS
    ):
        self.store = store
        self.settings = settings
        self.namespace = settings.storage_namespace
        self.clock = clock
        self.retention_millis = retention_millis
        self.last_report: Optional[SweepReport] = None

    async def run_sweep(self) -> SweepReport:
        """
        Run one sweep over the namespace.

        Never raises for store failures; the outcome is in the report.

        Returns:
            SweepReport with per-outcome counts
        """
        report = SweepReport(started_at=datetime.now(timezone.utc))

        if not self.store.configured:
            logger.warning(
                "sweep_skipped_not_configured",
                missing=self.settings.missing_store_settings
            )
            report.skipped = True
            return self._finish(report)

        logger.info("sweep_started", namespace=self.namespace)

        try:
            entries = await self._list_namespace()
        except AppError as e:
            logger.error(
                "sweep_listing_failed",
                namespace=self.namespace,
                error=e.message,
                error_code=e.code
            )
            report.error = e.message
            return self._finish(report)

        # One reference instant for the whole pass
        now = self.clock()

        expired: list[DecodedEntry] = []
        for entry in entries:
            if not entry.is_file:
                continue

            report.scanned += 1
            decoded = decode_name(entry.name, path=entry.path)

            if decoded is None or not within_calendar_range(
                decoded.upload_timestamp_millis, self.retention_millis
            ):
                report.undecodable += 1
                report.undecodable_names.append(entry.name)
                continue

            if is_expired(decoded.upload_timestamp_millis, now, self.retention_millis):
                expired.append(decoded)
            else:
                report.retained += 1

        for decoded in expired:
            await self._delete_expired(decoded, report)

        if report.undecodable:
            logger.warning(
                "sweep_found_undecodable_entries",
                count=report.undecodable,
                names=report.undecodable_names[:20]
            )

        return self._finish(report)

    async def _list_namespace(self) -> list[StoredEntry]:
        """List the namespace; a namespace that does not exist yet is empty."""
        try:
            return await self.store.list_entries(self.namespace)
        except StoreNotFoundError:
            logger.debug("sweep_namespace_missing", namespace=self.namespace)
            return []

    async def _delete_expired(self, decoded: DecodedEntry, report: SweepReport) -> None:
        """
        Delete one expired entry at its current version.

        The sha is fetched fresh because the listing may be stale by the
        time we get here.
        """
        path = decoded.path

        try:
            current = await self.store.get_entry(path)
            await self.store.delete(
                path,
                current.sha,
                f"Auto-delete expired file: {path}"
            )
        except (StoreNotFoundError, DeleteConflictError):
            # Removed by another sweep between listing and delete
            report.already_gone += 1
            logger.info("expired_file_already_gone", path=path)
            return
        except RemoteUnavailableError as e:
            report.failed += 1
            logger.error(
                "expired_file_delete_failed",
                path=path,
                error=e.message,
                upstream_status=e.status
            )
            return
        except AppError as e:
            report.failed += 1
            logger.error(
                "expired_file_delete_failed",
                path=path,
                error=e.message,
                error_code=e.code
            )
            return
        except Exception as e:
            # Anything else is counted against this entry only
            report.failed += 1
            logger.error(
                "expired_file_delete_failed",
                path=path,
                error=str(e),
                error_type=type(e).__name__
            )
            return

        report.deleted += 1
        logger.info(
            "expired_file_deleted",
            path=path,
            original_name=decoded.original_name,
            uploaded_at_millis=decoded.upload_timestamp_millis
        )

    def _finish(self, report: SweepReport) -> SweepReport:
        report.finished_at = datetime.now(timezone.utc)
        self.last_report = report

        if not report.skipped and report.error is None:
            logger.info(
                "sweep_completed",
                scanned=report.scanned,
                deleted=report.deleted,
                already_gone=report.already_gone,
                failed=report.failed,
                retained=report.retained,
                undecodable=report.undecodable
            )

        return report


class SweepScheduler:
    """
    Runs sweeps once at startup and then on an APScheduler trigger.

    The scheduled job only starts the sweep as a separate task, so a slow
    sweep never delays or blocks the next firing; overlapping sweeps are
    tolerated.

    Usage:
        scheduler = SweepScheduler(sweep_service, settings.sweep_trigger)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    JOB_ID = "cleanup_sweep"

    def __init__(
        self,
        sweep_service: SweepService,
        schedule: BaseTrigger,
        run_immediately: bool = True
    ):
        self.sweep_service = sweep_service
        self.schedule = schedule
        self.run_immediately = run_immediately
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._sweeps: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def next_run_time(self) -> Optional[datetime]:
        """When the next scheduled sweep fires, or None when stopped."""
        if not self.running:
            return None
        job = self._scheduler.get_job(self.JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        """Start the schedule; must be called from the running event loop."""
        if self.running:
            return

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self._fire,
            self.schedule,
            id=self.JOB_ID,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()

        if self.run_immediately:
            self.trigger()

        logger.info(
            "sweep_scheduler_started",
            schedule=str(self.schedule),
            next_run_time=str(self.next_run_time),
            run_immediately=self.run_immediately
        )

    def trigger(self) -> asyncio.Task:
        """Start a sweep in the background and return its task."""
        task = asyncio.create_task(self._safe_sweep())
        self._sweeps.add(task)
        task.add_done_callback(self._sweeps.discard)
        return task

    async def _fire(self) -> None:
        self.trigger()

    async def _safe_sweep(self) -> None:
        try:
            await self.sweep_service.run_sweep()
        except Exception as e:
            # Keeps the scheduler alive for the next firing
            logger.error(
                "sweep_crashed",
                error=str(e),
                error_type=type(e).__name__
            )

    async def stop(self) -> None:
        """Stop scheduling new sweeps and wait for in-flight ones."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            # AsyncIOScheduler applies the shutdown on the next loop iteration
            await asyncio.sleep(0)

        if self._sweeps:
            await asyncio.gather(*self._sweeps, return_exceptions=True)

        logger.info("sweep_scheduler_stopped")


# Singleton instance
_sweep_service: Optional[SweepService] = None


def get_sweep_service() -> SweepService:
    """Get or create SweepService instance."""
    global _sweep_service
    if _sweep_service is None:
        _sweep_service = SweepService(get_content_store(), get_settings())
    return _sweep_service
