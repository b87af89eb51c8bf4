"""
Content store connection management.

Provides the shared GitHubContentStore used by services and the
health check.
"""

from functools import lru_cache
import structlog

from config.settings import get_settings
from integrations.github_store import GitHubContentStore

logger = structlog.get_logger(__name__)


@lru_cache()
def get_content_store() -> GitHubContentStore:
    """
    Get cached content store instance.

    Uses lru_cache to ensure only one HTTP client is created.
    Call reset_content_store() to rebuild it after config changes.

    Returns:
        GitHubContentStore: Store bound to the configured repository
    """
    settings = get_settings()

    if settings.store_configured:
        logger.info(
            "content_store_ready",
            owner=settings.github_owner,
            repo=settings.github_repo,
            branch=settings.github_branch,
            namespace=settings.storage_namespace
        )
    else:
        logger.warning(
            "store_not_configured",
            missing=settings.missing_store_settings
        )

    return GitHubContentStore(settings)


async def check_store() -> dict:
    """
    Check content store health.

    Returns:
        dict: Connection status with details
    """
    return await get_content_store().check()


async def close_content_store() -> None:
    """Close the shared HTTP client if one was created."""
    if get_content_store.cache_info().currsize:
        await get_content_store().aclose()
        get_content_store.cache_clear()
        logger.info("content_store_closed")


def reset_content_store():
    """
    Drop the cached store.

    The next get_content_store() call builds a new one from current settings.
    """
    get_content_store.cache_clear()
    logger.info("content_store_reset")
