"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from thermio.config import Settings
from thermio.core.constants import DEFAULT_INSECURE_SECRET


pytestmark = pytest.mark.unit


def test_compliance_defaults():
    settings = Settings()

    assert settings.default_timezone == "Australia/Perth"
    assert settings.default_sign_off_weekday == 5
    assert settings.default_overdue_minutes == 120
    assert settings.live_window_minutes == 180
    assert settings.force_sign_off_day is False


def test_async_database_url():
    settings = Settings(database_url="postgresql://u:p@db:5432/thermio")

    assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/thermio"


def test_unknown_default_timezone_rejected():
    with pytest.raises(ValidationError, match="Unknown IANA time zone"):
        Settings(default_timezone="Mars/Olympus_Mons")


@pytest.mark.parametrize("weekday", [-1, 7])
def test_sign_off_weekday_bounds(weekday):
    with pytest.raises(ValidationError):
        Settings(default_sign_off_weekday=weekday)


def test_short_secret_rejected():
    with pytest.raises(ValidationError, match="SECRET_KEY must be at least"):
        Settings(secret_key="short")


def test_production_requires_real_secret():
    settings = Settings(environment="production", secret_key=DEFAULT_INSECURE_SECRET)

    with pytest.raises(ValueError, match="secure value in production"):
        _ = settings.is_production
