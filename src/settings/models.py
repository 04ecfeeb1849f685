"""Data structures of the system settings.

ConfigRecord is the single persisted configuration of a running instance.
PartialUpdate carries what an administrator submitted from the settings form,
where any field may be absent.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, time
from typing import Any, Dict, Mapping, Optional, Tuple

from ..captcha.interfaces import CaptchaService
from ..captcha.resolver import resolve_service
from .errors import CronTimeFormatError


CRON_TIME_FORMAT = "%H:%M"

# HH:MM with optional seconds and fraction, never the compact ISO forms
_CRON_TIME_INPUT_FORMATS: Tuple[str, ...] = ("%H:%M", "%H:%M:%S", "%H:%M:%S.%f")

DEFAULT_DISPLAY_HOME = "table"
VALID_DISPLAY_HOME: Tuple[str, ...] = ("table", "summary")

DEFAULT_DISPLAY_GOOGLE_TARGET = "table"
VALID_DISPLAY_GOOGLE_TARGET: Tuple[str, ...] = ("table", "variation", "chart")

DEFAULT_DISPLAY_GOOGLE_SEARCH = "chart"
VALID_DISPLAY_GOOGLE_SEARCH: Tuple[str, ...] = ("chart", "table")


def parse_cron_time(value: Optional[str]) -> Optional[time]:
    """Parse a cron time of day.

    Args:
        value: Submitted value, e.g. "04:30". Empty or None disables the job.

    Returns:
        The time truncated to hour and minute, or None when disabled.

    Raises:
        CronTimeFormatError: If the value is not an HH:MM[:SS[.fff]] time.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise CronTimeFormatError(value)
    for fmt in _CRON_TIME_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt).time()
        except ValueError:
            continue
        # strptime also takes single digit fields such as "4:30"
        if value.startswith(parsed.strftime(fmt[:8])):
            return parsed.replace(second=0, microsecond=0)
    raise CronTimeFormatError(value)


def format_cron_time(value: Optional[time]) -> str:
    """Format a cron time as HH:MM, or "" when disabled."""
    if value is None:
        return ""
    return value.strftime(CRON_TIME_FORMAT)


@dataclass(frozen=True)
class ConfigRecord:
    """Persisted system configuration.

    Attributes:
        cron_time: Daily run time of the background job, None when disabled.
        captcha_service: Selected captcha-solving service.
        captcha_user: Service login, only for login based services.
        captcha_pass: Service password, only for login based services.
        captcha_api_key: Service key, only for key based services.
        display_home: Layout of the home page.
        display_google_target: Layout of the Google target page.
        display_google_search: Layout of the Google search page.
    """
    cron_time: Optional[time] = None
    captcha_service: CaptchaService = CaptchaService.DISABLED
    captcha_user: str = ""
    captcha_pass: str = ""
    captcha_api_key: str = ""
    display_home: str = DEFAULT_DISPLAY_HOME
    display_google_target: str = DEFAULT_DISPLAY_GOOGLE_TARGET
    display_google_search: str = DEFAULT_DISPLAY_GOOGLE_SEARCH

    def to_dict(self, include_secrets: bool = True) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        Args:
            include_secrets: When False the password and API key are masked,
                for output that leaves the process.
        """
        data = asdict(self)
        data["cron_time"] = format_cron_time(self.cron_time)
        data["captcha_service"] = self.captcha_service.value
        if not include_secrets:
            for key in ("captcha_pass", "captcha_api_key"):
                if data[key]:
                    data[key] = "********"
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigRecord":
        """Rebuild a record from ``to_dict`` output.

        Missing keys take their defaults and unknown services resolve to
        DISABLED.

        Raises:
            CronTimeFormatError: If the stored cron time is corrupted.
        """
        defaults = cls()
        return cls(
            cron_time=parse_cron_time(data.get("cron_time") or ""),
            captcha_service=resolve_service(data.get("captcha_service")),
            captcha_user=data.get("captcha_user") or "",
            captcha_pass=data.get("captcha_pass") or "",
            captcha_api_key=data.get("captcha_api_key") or "",
            display_home=data.get("display_home") or defaults.display_home,
            display_google_target=data.get("display_google_target") or defaults.display_google_target,
            display_google_search=data.get("display_google_search") or defaults.display_google_search,
        )


# Form field names used by the admin page, mapped to PartialUpdate fields
_FORM_ALIASES = {
    "displayHome": "display_home",
    "displayGoogleTarget": "display_google_target",
    "displayGoogleSearch": "display_google_search",
    "cronTime": "cron_time",
    "captchaService": "service",
    "captchaUser": "captcha_user",
    "captchaPass": "captcha_pass",
    "captchaApiKey": "captcha_api_key",
}


@dataclass(frozen=True)
class PartialUpdate:
    """Settings submitted by an administrator. None means "not submitted"."""
    display_home: Optional[str] = None
    display_google_target: Optional[str] = None
    display_google_search: Optional[str] = None
    cron_time: Optional[str] = None
    service: Optional[str] = None
    captcha_user: Optional[str] = None
    captcha_pass: Optional[str] = None
    captcha_api_key: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PartialUpdate":
        """Build an update from form data, ignoring unknown keys."""
        fields = {}
        for key, value in data.items():
            name = _FORM_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                fields[name] = None if value is None else str(value)
        return cls(**fields)
