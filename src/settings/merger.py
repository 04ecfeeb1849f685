"""Validation and merging of settings updates."""

from typing import Optional, Sequence

import structlog

from ..captcha.interfaces import CaptchaService
from ..captcha.resolver import CaptchaServiceResolver
from .models import (
    DEFAULT_DISPLAY_GOOGLE_SEARCH,
    DEFAULT_DISPLAY_GOOGLE_TARGET,
    DEFAULT_DISPLAY_HOME,
    VALID_DISPLAY_GOOGLE_SEARCH,
    VALID_DISPLAY_GOOGLE_TARGET,
    VALID_DISPLAY_HOME,
    ConfigRecord,
    PartialUpdate,
    parse_cron_time,
)

logger = structlog.get_logger()


def _display_value(submitted: Optional[str], default: str, allowed: Sequence[str], current: str) -> str:
    # Missing, default-equal and unknown values are ignored, not rejected
    if submitted is None or submitted == default or submitted not in allowed:
        return current
    return submitted


class ConfigMerger:
    """Merges a partial update into the current configuration.

    The merge is all-or-nothing: it either returns a complete new record or
    raises before anything is built. The current record is never modified.
    """

    def __init__(self, resolver: Optional[CaptchaServiceResolver] = None):
        self.resolver = resolver or CaptchaServiceResolver()

    def apply(self, current: ConfigRecord, update: PartialUpdate) -> ConfigRecord:
        """Validate ``update`` and merge it into ``current``.

        Args:
            current: The configuration in effect.
            update: What the administrator submitted.

        Returns:
            The new configuration record.

        Raises:
            CronTimeFormatError: If a non-empty cron time does not parse.
        """
        service = self.resolver.resolve(update.service)

        user = update.captcha_user or ""
        password = update.captcha_pass or ""
        api_key = update.captcha_api_key or ""
        if service is CaptchaService.DISABLED:
            user = password = api_key = ""
        elif service.uses_login:
            api_key = ""
        else:
            user = password = ""

        cron_time = parse_cron_time(update.cron_time)

        merged = ConfigRecord(
            cron_time=cron_time,
            captcha_service=service,
            captcha_user=user,
            captcha_pass=password,
            captcha_api_key=api_key,
            display_home=_display_value(
                update.display_home, DEFAULT_DISPLAY_HOME, VALID_DISPLAY_HOME, current.display_home
            ),
            display_google_target=_display_value(
                update.display_google_target,
                DEFAULT_DISPLAY_GOOGLE_TARGET,
                VALID_DISPLAY_GOOGLE_TARGET,
                current.display_google_target
            ),
            display_google_search=_display_value(
                update.display_google_search,
                DEFAULT_DISPLAY_GOOGLE_SEARCH,
                VALID_DISPLAY_GOOGLE_SEARCH,
                current.display_google_search
            ),
        )
        logger.debug("settings_merged", captcha_service=service.value, cron_enabled=cron_time is not None)
        return merged

    def reset(self) -> ConfigRecord:
        """Return the default configuration."""
        return ConfigRecord()
