"""Settings operations exposed to the admin surface.

SettingsService ties the configuration store, the merger and the captcha
verification workflow together. The store is an explicit handle passed in by
the caller; there is no module level configuration singleton.
"""

from typing import Optional

from ..captcha.resolver import CaptchaServiceResolver
from ..captcha.verification import CaptchaVerificationWorkflow, VerificationOutcome
from ..config.mcp_logger import logger
from .errors import CronTimeFormatError
from .merger import ConfigMerger
from .models import ConfigRecord, PartialUpdate
from .storage import IConfigStore


class SettingsService:
    """Read, update, reset and captcha verification operations.

    Attributes:
        store: Handle of the persisted configuration.
        merger: Validates and merges partial updates.
        workflow: Verifies captcha service accounts.
    """

    def __init__(
        self,
        store: IConfigStore,
        resolver: Optional[CaptchaServiceResolver] = None,
        merger: Optional[ConfigMerger] = None,
        workflow: Optional[CaptchaVerificationWorkflow] = None
    ):
        resolver = resolver or CaptchaServiceResolver()
        self.store = store
        self.merger = merger or ConfigMerger(resolver)
        self.workflow = workflow or CaptchaVerificationWorkflow(resolver)
        self.logger = logger.bind(component="settings")

    async def get_current_config(self) -> ConfigRecord:
        """Return the configuration in effect."""
        return await self.store.load()

    async def update_config(self, update: PartialUpdate) -> ConfigRecord:
        """Merge ``update`` into the current configuration and persist it.

        The record is read, merged and replaced as a whole. Concurrent
        updates are last-writer-wins.

        Raises:
            CronTimeFormatError: If the submitted cron time is invalid. The
                stored configuration is left untouched.
            ConfigStoreError: If the new record could not be written.
        """
        current = await self.store.load()
        try:
            merged = self.merger.apply(current, update)
        except CronTimeFormatError as e:
            self.logger.info("settings_update_rejected", reason=str(e))
            raise
        await self.store.save(merged)
        self.logger.info(
            "settings_updated",
            captcha_service=merged.captcha_service.value,
            cron_time=merged.to_dict()["cron_time"]
        )
        return merged

    async def reset_config(self) -> ConfigRecord:
        """Replace the configuration with the defaults."""
        record = self.merger.reset()
        await self.store.save(record)
        self.logger.info("settings_reset")
        return record

    async def verify_captcha_service(
        self,
        service_id: Optional[str],
        user: Optional[str] = "",
        password: Optional[str] = "",
        api_key: Optional[str] = ""
    ) -> VerificationOutcome:
        """Check a captcha service account without touching the stored config."""
        return await self.workflow.verify(service_id, user, password, api_key)
