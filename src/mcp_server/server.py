"""
MCP server assembly
Wires the configuration store, the captcha resolver and the settings tools
Design Pattern: Composition Root (dependency injection by hand)
"""
from typing import Optional

import structlog
from mcp.server.fastmcp import FastMCP

from ..captcha.resolver import CaptchaServiceResolver
from ..config.settings import AppConfig
from ..settings.service import SettingsService
from ..settings.storage import EncryptedConfigStore, IConfigStore, InMemoryConfigStore
from .tools.settings_tools import register_settings_tools

logger = structlog.get_logger()


def create_store(config: AppConfig) -> IConfigStore:
    """Create the configuration store selected by the app config"""
    if config.store_backend == "memory":
        logger.warning("settings_store_in_memory")
        return InMemoryConfigStore()
    return EncryptedConfigStore(config.store_path, config.encryption_key)


def create_settings_service(config: AppConfig, store: Optional[IConfigStore] = None) -> SettingsService:
    """Build the settings service with its collaborators"""
    resolver = CaptchaServiceResolver(
        timeout=config.http_timeout,
        deathbycaptcha_url=config.deathbycaptcha_url,
        decaptcher_url=config.decaptcher_url,
        anticaptcha_url=config.anticaptcha_url
    )
    return SettingsService(store or create_store(config), resolver=resolver)


def create_server(config: AppConfig, service: Optional[SettingsService] = None) -> FastMCP:
    """Create the MCP server exposing the settings tools"""
    mcp = FastMCP(config.server_name)
    register_settings_tools(mcp, service or create_settings_service(config))
    logger.info("mcp_server_created", name=config.server_name, store=config.store_backend)
    return mcp
