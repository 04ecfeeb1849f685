"""Captcha service resolver.

Maps free-form service identifiers to a CaptchaService variant and builds the
matching client when enough credentials were supplied.
Design Pattern: Factory Method + fixed Registry
"""

from typing import Callable, Dict, Mapping, Optional

import structlog

from ..config.settings import ANTICAPTCHA_URL, DEATHBYCAPTCHA_URL, DECAPTCHER_URL, DEFAULT_HTTP_TIMEOUT
from .clients import AntiCaptchaClient, DeathByCaptchaClient, DecaptcherClient
from .interfaces import CaptchaCredentials, CaptchaService, ICaptchaServiceClient

logger = structlog.get_logger()

ClientFactory = Callable[[CaptchaCredentials], ICaptchaServiceClient]

_SERVICES_BY_ID: Dict[str, CaptchaService] = {service.value: service for service in CaptchaService}


def resolve_service(service_id: Optional[str]) -> CaptchaService:
    """Resolve a service identifier, case-insensitively.

    Unknown, empty or missing identifiers resolve to DISABLED.
    """
    if not service_id or not isinstance(service_id, str):
        return CaptchaService.DISABLED
    return _SERVICES_BY_ID.get(service_id.strip().lower(), CaptchaService.DISABLED)


def has_required_credentials(service: CaptchaService, credentials: CaptchaCredentials) -> bool:
    """Check that every credential the service needs is non-empty."""
    if service.uses_login:
        return bool(credentials.user) and bool(credentials.password)
    if service.uses_api_key:
        return bool(credentials.api_key)
    return False


class CaptchaServiceResolver:
    """Resolver and factory for captcha service clients.

    The registry covers exactly the services that have a client. DISABLED is
    never registered, so it can never be built or initialized.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        deathbycaptcha_url: str = DEATHBYCAPTCHA_URL,
        decaptcher_url: str = DECAPTCHER_URL,
        anticaptcha_url: str = ANTICAPTCHA_URL,
        factories: Optional[Mapping[CaptchaService, ClientFactory]] = None
    ):
        """Initialize the resolver.

        Args:
            timeout: HTTP timeout handed to every client.
            deathbycaptcha_url: DeathByCaptcha API root.
            decaptcher_url: Decaptcher endpoint.
            anticaptcha_url: Anti-Captcha API root.
            factories: Optional constructors replacing the default ones,
                keyed by service. Entries for DISABLED are ignored.
        """
        self._factories: Dict[CaptchaService, ClientFactory] = {
            CaptchaService.DEATHBYCAPTCHA: lambda c: DeathByCaptchaClient(
                c.user, c.password, base_url=deathbycaptcha_url, timeout=timeout
            ),
            CaptchaService.DECAPTCHER: lambda c: DecaptcherClient(
                c.user, c.password, base_url=decaptcher_url, timeout=timeout
            ),
            CaptchaService.ANTICAPTCHA: lambda c: AntiCaptchaClient(
                c.api_key, base_url=anticaptcha_url, timeout=timeout
            ),
        }
        for service, factory in (factories or {}).items():
            if service is not CaptchaService.DISABLED:
                self._factories[service] = factory

    def resolve(self, service_id: Optional[str]) -> CaptchaService:
        """Resolve a service identifier to a variant. Never raises."""
        return resolve_service(service_id)

    def build_client(
        self,
        service: CaptchaService,
        credentials: CaptchaCredentials
    ) -> Optional[ICaptchaServiceClient]:
        """Build a client for the service.

        Args:
            service: Resolved service variant.
            credentials: Submitted account credentials.

        Returns:
            A fresh, uninitialized client, or None when the service is
            DISABLED or a required credential is empty.
        """
        if not has_required_credentials(service, credentials):
            logger.debug("captcha_client_not_built", service=service.value)
            return None
        return self._factories[service](credentials)
