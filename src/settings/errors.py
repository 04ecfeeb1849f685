"""Exceptions raised by the settings package."""


class SettingsError(Exception):
    """Base class of settings errors."""


class CronTimeFormatError(SettingsError, ValueError):
    """The submitted cron time is not a valid time of day.

    Attributes:
        value: The rejected input.
    """

    def __init__(self, value: str):
        super().__init__(f"Invalid cron time {value!r}, expected HH:MM")
        self.value = value


class ConfigStoreError(SettingsError):
    """The configuration could not be written to the store."""
