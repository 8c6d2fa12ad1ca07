"""Process-wide service instances (scoring config store, PostHog client)."""

import logging

from posthog import Posthog

from config.settings import Settings, get_settings
from scoring.config import ScoringConfigStore

logger = logging.getLogger(__name__)

# Module-level instances for lifecycle management
_config_store: ScoringConfigStore | None = None
_posthog_client: Posthog | None = None


def get_config_store(settings: Settings | None = None) -> ScoringConfigStore:
    """Get the shared scoring config store.

    The store reads the override document named by ``SCORING_CONFIG_PATH``
    the first time a configuration is requested.

    Args:
        settings: Application settings (defaults to the cached settings)

    Returns:
        ScoringConfigStore: Shared store instance
    """
    global _config_store

    if _config_store is None:
        settings = settings or get_settings()
        _config_store = ScoringConfigStore(config_path=settings.resolved_scoring_config_path)
        logger.debug(f"Scoring config store created for {_config_store.config_path}")

    return _config_store


def reset_config_store() -> None:
    """Drop the shared store; the next lookup re-reads the override document."""
    global _config_store
    _config_store = None


def get_posthog_client(settings: Settings | None = None) -> Posthog | None:
    """Get PostHog client instance.

    Args:
        settings: Application settings (defaults to the cached settings)

    Returns:
        Optional[Posthog]: PostHog client if configured and enabled, None otherwise
    """
    global _posthog_client

    settings = settings or get_settings()

    if not settings.enable_telemetry:
        logger.debug("Telemetry disabled")
        return None

    if not settings.posthog_api_key:
        logger.debug("POSTHOG_API_KEY not set - telemetry disabled")
        return None

    if _posthog_client is None:
        _posthog_client = Posthog(
            project_api_key=settings.posthog_api_key,
            host=settings.posthog_host,
        )
        logger.info(f"PostHog client initialized (host: {settings.posthog_host})")

    return _posthog_client


def flush_posthog() -> None:
    """Flush any buffered PostHog events."""
    if _posthog_client:
        _posthog_client.flush()


def shutdown_posthog() -> None:
    """Shutdown PostHog client gracefully."""
    global _posthog_client
    if _posthog_client:
        _posthog_client.shutdown()
        _posthog_client = None
        logger.info("PostHog client shutdown")
