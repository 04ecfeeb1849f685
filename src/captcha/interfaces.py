"""Interfaces for the captcha service system.

This module defines the closed set of supported captcha-solving services and
the capability every service client must implement so the settings page can
check an account before it is trusted for production use.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class CaptchaService(Enum):
    """Supported captcha-solving services.

    DISABLED only represents "no service configured"; it has no client.
    """
    DISABLED = "disabled"
    DEATHBYCAPTCHA = "deathbycaptcha"
    DECAPTCHER = "decaptcher"
    ANTICAPTCHA = "anticaptcha"

    @property
    def uses_login(self) -> bool:
        """Whether the service authenticates with a user/password pair."""
        return self in (CaptchaService.DEATHBYCAPTCHA, CaptchaService.DECAPTCHER)

    @property
    def uses_api_key(self) -> bool:
        """Whether the service authenticates with an API key."""
        return self is CaptchaService.ANTICAPTCHA


@dataclass(frozen=True)
class CaptchaCredentials:
    """Account credentials submitted for a captcha service.

    Attributes:
        user: Account login (DeathByCaptcha, Decaptcher).
        password: Account password (DeathByCaptcha, Decaptcher).
        api_key: Account key (Anti-Captcha).
    """
    user: str = ""
    password: str = ""
    api_key: str = ""


class ICaptchaServiceClient(ABC):
    """Interface for captcha service account clients.

    A client is created for a single verification attempt. Resources opened
    by ``initialize`` must be freed by ``release`` once the client goes out of
    use, whatever happened in between.
    """

    @abstractmethod
    async def initialize(self) -> bool:
        """Open the session with the service.

        Returns:
            True when the service is reachable and ready. False (or a raised
            error) means the service is unreachable or misconfigured.
        """
        pass

    @abstractmethod
    async def test_login(self) -> bool:
        """Check the account credentials against the live service.

        Returns:
            True if the account is authorized, False if the service answered
            but rejected the credentials.
        """
        pass

    @abstractmethod
    async def get_balance(self) -> float:
        """Query the remaining account credit.

        Only meaningful after ``test_login`` succeeded.

        Returns:
            The account balance as reported by the service, in US dollars.
        """
        pass

    @abstractmethod
    def friendly_name(self) -> str:
        """Human readable name of the service, used for reporting only."""
        pass

    @abstractmethod
    async def release(self) -> None:
        """Free the resources opened by ``initialize``.

        Safe to call when ``initialize`` never ran or failed.
        """
        pass
