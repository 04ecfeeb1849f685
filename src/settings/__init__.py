"""System settings module.

Holds the persisted system configuration and the rules for changing it.

Main components:
- ConfigRecord / PartialUpdate: The stored configuration and a submitted update
- ConfigMerger: Validates and merges updates, all-or-nothing
- IConfigStore: Storage backends (in-memory, encrypted file)
- SettingsService: Read / update / reset / captcha verification operations
"""

from .errors import ConfigStoreError, CronTimeFormatError, SettingsError
from .merger import ConfigMerger
from .models import ConfigRecord, PartialUpdate, format_cron_time, parse_cron_time
from .service import SettingsService
from .storage import EncryptedConfigStore, IConfigStore, InMemoryConfigStore

__all__ = [
    "ConfigStoreError",
    "CronTimeFormatError",
    "SettingsError",
    "ConfigMerger",
    "ConfigRecord",
    "PartialUpdate",
    "format_cron_time",
    "parse_cron_time",
    "SettingsService",
    "EncryptedConfigStore",
    "IConfigStore",
    "InMemoryConfigStore",
]
