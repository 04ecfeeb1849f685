"""Settings tools for MCP server.

This module provides MCP tools for reading and changing the system settings
and for checking a captcha service account before it is saved.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ...captcha.verification import CredentialsRejected, InitializationFailed, Verified
from ...config.mcp_logger import logger
from ...settings.errors import ConfigStoreError, CronTimeFormatError
from ...settings.models import CRON_TIME_FORMAT, PartialUpdate
from ...settings.service import SettingsService

SETTINGS_UPDATED = "Settings updated"


def register_settings_tools(mcp: FastMCP, service: SettingsService) -> None:
    """Register settings tools with the MCP server.

    Args:
        mcp: Server the tools are added to.
        service: Settings operations, bound to the configuration store.
    """

    @mcp.tool()
    async def get_settings() -> Dict[str, Any]:
        """Get the current system settings.

        The server clock is included so a cron time can be chosen in server
        local time.

        Returns:
            Dictionary with the settings and the current server time (HH:MM)
        """
        try:
            config = await service.get_current_config()
        except ConfigStoreError as e:
            logger.error("get_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "store",
                "message": f"Error reading settings: {str(e)}"
            }
        except Exception as e:
            logger.error("get_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "unexpected",
                "message": f"Error reading settings: {str(e)}"
            }

        return {
            "success": True,
            "config": config.to_dict(include_secrets=False),
            "server_time": datetime.now().strftime(CRON_TIME_FORMAT)
        }

    @mcp.tool()
    async def update_settings(
        service_name: str = "",
        cron_time: str = "",
        captcha_user: str = "",
        captcha_pass: str = "",
        captcha_api_key: str = "",
        display_home: Optional[str] = None,
        display_google_target: Optional[str] = None,
        display_google_search: Optional[str] = None
    ) -> Dict[str, Any]:
        """Update the system settings.

        Args:
            service_name: Captcha service (disabled, deathbycaptcha, decaptcher, anticaptcha)
            cron_time: Daily run time in HH:MM, empty to disable the job
            captcha_user: Login for deathbycaptcha / decaptcher
            captcha_pass: Password for deathbycaptcha / decaptcher
            captcha_api_key: Key for anticaptcha
            display_home: Home page layout (table, summary)
            display_google_target: Google target page layout (table, variation, chart)
            display_google_search: Google search page layout (chart, table)

        Returns:
            Dictionary with the update status and the stored settings
        """
        update = PartialUpdate.from_mapping({
            "displayHome": display_home,
            "displayGoogleTarget": display_google_target,
            "displayGoogleSearch": display_google_search,
            "cronTime": cron_time,
            "captchaService": service_name,
            "captchaUser": captcha_user,
            "captchaPass": captcha_pass,
            "captchaApiKey": captcha_api_key
        })
        try:
            config = await service.update_config(update)
        except CronTimeFormatError as e:
            return {
                "success": False,
                "error": "cron_time_format",
                "message": str(e)
            }
        except ConfigStoreError as e:
            logger.error("update_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "store",
                "message": f"Error saving settings: {str(e)}"
            }
        except Exception as e:
            logger.error("update_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "unexpected",
                "message": f"Error saving settings: {str(e)}"
            }

        return {
            "success": True,
            "message": SETTINGS_UPDATED,
            "config": config.to_dict(include_secrets=False)
        }

    @mcp.tool()
    async def reset_settings() -> Dict[str, Any]:
        """Reset the system settings to their defaults.

        Returns:
            Dictionary with the reset status and the default settings
        """
        try:
            config = await service.reset_config()
        except ConfigStoreError as e:
            logger.error("reset_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "store",
                "message": f"Error saving settings: {str(e)}"
            }
        except Exception as e:
            logger.error("reset_settings_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "unexpected",
                "message": f"Error saving settings: {str(e)}"
            }

        return {
            "success": True,
            "message": SETTINGS_UPDATED,
            "config": config.to_dict(include_secrets=False)
        }

    @mcp.tool()
    async def test_captcha_service(
        service_name: str,
        user: str = "",
        password: str = "",
        api_key: str = ""
    ) -> Dict[str, Any]:
        """Check a captcha service account: reachability, credentials and balance.

        Nothing is saved; use update_settings to store the account.

        Args:
            service_name: Captcha service (deathbycaptcha, decaptcher, anticaptcha)
            user: Login for deathbycaptcha / decaptcher
            password: Password for deathbycaptcha / decaptcher
            api_key: Key for anticaptcha

        Returns:
            Dictionary with the verification outcome and a readable message
        """
        try:
            outcome = await service.verify_captcha_service(service_name, user, password, api_key)
        except Exception as e:
            logger.error("test_captcha_service_error", error=str(e), exc_info=True)
            return {
                "success": False,
                "error": "unexpected",
                "message": f"Error checking captcha service: {str(e)}"
            }

        result: Dict[str, Any] = {
            "success": outcome.success,
            "outcome": outcome.kind,
            "message": outcome.message
        }
        if isinstance(outcome, Verified):
            result["balance"] = outcome.balance
        elif isinstance(outcome, (InitializationFailed, CredentialsRejected)):
            result["service_name"] = outcome.service_name
        return result
