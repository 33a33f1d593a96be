"""Shared helpers for the job layer."""

from arq.connections import RedisSettings

from thermio.config import Settings, get_settings


def get_redis_settings(app_settings: Settings | None = None) -> RedisSettings:
    """ARQ Redis settings from the configured ``REDIS_URL``.

    Host, port, password and database index are all taken from the DSN.
    """
    app_settings = app_settings or get_settings()
    return RedisSettings.from_dsn(str(app_settings.redis_url))
