"""Captcha service verification workflow.

Checks that a captcha service account is usable: the service answers, the
credentials are accepted and the account balance can be read. Every failure
is reported as a VerificationOutcome; nothing raised by a client escapes.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from ..config.mcp_logger import logger
from .interfaces import CaptchaCredentials, CaptchaService, ICaptchaServiceClient
from .resolver import CaptchaServiceResolver


@dataclass(frozen=True)
class VerificationOutcome:
    """Base class of every verification result."""

    kind = "outcome"

    @property
    def success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class UnknownService(VerificationOutcome):
    kind = "unknown_service"

    @property
    def message(self) -> str:
        return "Invalid captcha service"


@dataclass(frozen=True)
class InsufficientCredentials(VerificationOutcome):
    kind = "insufficient_credentials"

    @property
    def message(self) -> str:
        return "Missing credentials for the captcha service"


@dataclass(frozen=True)
class InitializationFailed(VerificationOutcome):
    """The service could not be reached or answered badly."""
    service_name: str
    kind = "initialization_failed"

    @property
    def message(self) -> str:
        return f"Failed to initialize {self.service_name}"


@dataclass(frozen=True)
class CredentialsRejected(VerificationOutcome):
    """The service answered but refused the account credentials."""
    service_name: str
    kind = "credentials_rejected"

    @property
    def message(self) -> str:
        return f"Invalid credentials for {self.service_name}"


@dataclass(frozen=True)
class Verified(VerificationOutcome):
    balance: float
    kind = "verified"

    @property
    def success(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return f"OK, balance = {self.balance}"


@asynccontextmanager
async def acquired(client: ICaptchaServiceClient) -> AsyncIterator[ICaptchaServiceClient]:
    """Scope a client so ``release`` runs exactly once on every exit path.

    A fault raised by ``release`` is logged and discarded so it never takes
    the place of the result computed inside the block.
    """
    try:
        yield client
    finally:
        try:
            await client.release()
        except Exception as e:
            logger.warning(
                "captcha_client_release_failed",
                client=type(client).__name__,
                error=str(e)
            )


class CaptchaVerificationWorkflow:
    """Runs a verification attempt against a captcha service.

    Stateless apart from the resolver; concurrent calls do not interact and
    the persisted settings are never touched.
    """

    def __init__(self, resolver: Optional[CaptchaServiceResolver] = None):
        self.resolver = resolver or CaptchaServiceResolver()
        self.logger = logger.bind(component="captcha_verification")

    async def verify(
        self,
        service_id: Optional[str],
        user: Optional[str] = "",
        password: Optional[str] = "",
        api_key: Optional[str] = ""
    ) -> VerificationOutcome:
        """Verify a captcha service account.

        Args:
            service_id: Identifier of the service, e.g. "anticaptcha".
            user: Account login for login based services.
            password: Account password for login based services.
            api_key: Account key for key based services.

        Returns:
            The verification outcome.
        """
        service = self.resolver.resolve(service_id)
        if service is CaptchaService.DISABLED:
            self.logger.info("captcha_verification_unknown_service", service_id=service_id)
            return UnknownService()

        credentials = CaptchaCredentials(user=user or "", password=password or "", api_key=api_key or "")
        client = self.resolver.build_client(service, credentials)
        if client is None:
            self.logger.info("captcha_verification_missing_credentials", service=service.value)
            return InsufficientCredentials()

        async with acquired(client):
            outcome = await self._run(client, self._friendly_name(client, service))

        self.logger.info(
            "captcha_verification_done",
            service=service.value,
            outcome=outcome.kind
        )
        return outcome

    def _friendly_name(self, client: ICaptchaServiceClient, service: CaptchaService) -> str:
        try:
            return client.friendly_name()
        except Exception as e:
            self.logger.warning("captcha_friendly_name_error", service=service.value, error=str(e))
            return service.value

    async def _run(self, client: ICaptchaServiceClient, name: str) -> VerificationOutcome:
        try:
            ready = await client.initialize()
        except Exception as e:
            self.logger.warning("captcha_initialize_error", service=name, error=str(e))
            ready = False
        if not ready:
            return InitializationFailed(name)

        try:
            logged_in = await client.test_login()
        except Exception as e:
            self.logger.warning("captcha_login_error", service=name, error=str(e))
            logged_in = False
        if not logged_in:
            return CredentialsRejected(name)

        try:
            balance = await client.get_balance()
        except Exception as e:
            self.logger.warning("captcha_balance_error", service=name, error=str(e))
            return InitializationFailed(name)
        return Verified(balance)
