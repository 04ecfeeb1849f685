"""Captcha service client implementations.

This module contains the concrete ICaptchaServiceClient implementations for
the supported captcha-solving services. Each client talks to the public HTTP
API of its service through an ``httpx.AsyncClient`` opened in ``initialize``
and closed in ``release``.
"""

import math
from typing import Any, Dict, Optional

import httpx

from ..config.mcp_logger import logger
from ..config.settings import ANTICAPTCHA_URL, DEATHBYCAPTCHA_URL, DECAPTCHER_URL, DEFAULT_HTTP_TIMEOUT
from .interfaces import ICaptchaServiceClient


class HttpCaptchaServiceClient(ICaptchaServiceClient):
    """Base class for clients backed by an HTTP API.

    Handles the lifecycle of the underlying ``httpx.AsyncClient``. Subclasses
    implement the service specific calls and may override ``_handshake`` to
    probe the service right after the session is opened.
    """

    name = "captcha service"

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the client.

        Args:
            base_url: Root URL of the service API.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to fake the service.
        """
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self.logger = logger.bind(captcha_service=self.name)

    def friendly_name(self) -> str:
        return self.name

    @property
    def http(self) -> httpx.AsyncClient:
        """The open HTTP session.

        Raises:
            RuntimeError: If ``initialize`` has not been called.
        """
        if self._http is None:
            raise RuntimeError(f"{self.name} client used before initialize()")
        return self._http

    async def initialize(self) -> bool:
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"}
        )
        ready = await self._handshake()
        self.logger.debug("captcha_client_initialized", ready=ready)
        return ready

    async def _handshake(self) -> bool:
        return True

    async def release(self) -> None:
        if self._http is None:
            return
        http, self._http = self._http, None
        await http.aclose()
        self.logger.debug("captcha_client_released")


class DeathByCaptchaClient(HttpCaptchaServiceClient):
    """Client for the DeathByCaptcha HTTP API.

    DeathByCaptcha accounts authenticate with a username and password. The
    ``/user`` endpoint returns the account details, with the balance
    expressed in US cents.
    """

    name = "DeathByCaptcha"

    def __init__(self, username: str, password: str, base_url: str = DEATHBYCAPTCHA_URL, **kwargs: Any):
        super().__init__(base_url.rstrip("/"), **kwargs)
        self.username = username
        self.password = password

    async def _handshake(self) -> bool:
        response = await self.http.get("/status")
        if response.status_code != 200:
            self.logger.warning("captcha_status_unavailable", status_code=response.status_code)
            return False
        status = response.json()
        if status.get("is_service_overloaded"):
            self.logger.warning("captcha_service_overloaded")
            return False
        return True

    async def _fetch_user(self) -> Optional[Dict[str, Any]]:
        response = await self.http.post(
            "/user",
            data={"username": self.username, "password": self.password}
        )
        if response.status_code != 200:
            self.logger.info("captcha_login_rejected", status_code=response.status_code)
            return None
        return response.json()

    async def test_login(self) -> bool:
        account = await self._fetch_user()
        if not account or not account.get("user"):
            return False
        if account.get("is_banned"):
            self.logger.warning("captcha_account_banned")
            return False
        return True

    async def get_balance(self) -> float:
        account = await self._fetch_user()
        if not account:
            raise RuntimeError("DeathByCaptcha refused the balance request")
        return float(account.get("balance", 0)) / 100


class DecaptcherClient(HttpCaptchaServiceClient):
    """Client for the Decaptcher poster API.

    Every call is a form post to a single endpoint selected by the
    ``function`` field. The balance call answers with a bare number, or a
    negative error code when the credentials are wrong.
    """

    name = "Decaptcher"

    def __init__(self, username: str, password: str, base_url: str = DECAPTCHER_URL, **kwargs: Any):
        super().__init__(base_url, **kwargs)
        self.username = username
        self.password = password

    async def _query_balance(self) -> Optional[float]:
        response = await self.http.post(
            "",
            data={"function": "balance", "username": self.username, "password": self.password}
        )
        if response.status_code != 200:
            self.logger.info("captcha_login_rejected", status_code=response.status_code)
            return None
        try:
            balance = float(response.text.strip())
        except ValueError:
            self.logger.info("captcha_login_rejected", body=response.text[:50])
            return None
        if not math.isfinite(balance):
            self.logger.info("captcha_login_rejected", body=response.text[:50])
            return None
        if balance < 0:
            # Negative values are Decaptcher error codes
            self.logger.info("captcha_login_rejected", code=int(balance))
            return None
        return balance

    async def test_login(self) -> bool:
        return await self._query_balance() is not None

    async def get_balance(self) -> float:
        balance = await self._query_balance()
        if balance is None:
            raise RuntimeError("Decaptcher refused the balance request")
        return balance


class AntiCaptchaClient(HttpCaptchaServiceClient):
    """Client for the Anti-Captcha JSON API.

    Anti-Captcha authenticates every request with the account key. A
    ``getBalance`` answer with ``errorId`` 0 carries the balance in US dollars.
    """

    name = "Anti-Captcha"

    def __init__(self, api_key: str, base_url: str = ANTICAPTCHA_URL, **kwargs: Any):
        super().__init__(base_url.rstrip("/"), **kwargs)
        self.api_key = api_key

    async def _query_balance(self) -> Optional[float]:
        response = await self.http.post("/getBalance", json={"clientKey": self.api_key})
        if response.status_code != 200:
            self.logger.info("captcha_login_rejected", status_code=response.status_code)
            return None
        payload = response.json()
        if payload.get("errorId", 1) != 0:
            self.logger.info("captcha_login_rejected", error_code=payload.get("errorCode"))
            return None
        return float(payload.get("balance", 0))

    async def test_login(self) -> bool:
        return await self._query_balance() is not None

    async def get_balance(self) -> float:
        balance = await self._query_balance()
        if balance is None:
            raise RuntimeError("Anti-Captcha refused the balance request")
        return balance
