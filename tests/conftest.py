"""
Pytest configuration and shared fixtures for the test suite.
"""
import sys
from pathlib import Path
from typing import Optional

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.captcha.interfaces import ICaptchaServiceClient  # noqa: E402
from src.settings.storage import InMemoryConfigStore  # noqa: E402


class FakeCaptchaClient(ICaptchaServiceClient):
    """Scriptable captcha client recording every call.

    Each step either returns the configured value or raises it when it is an
    exception instance.
    """

    def __init__(
        self,
        name="FakeCaptcha",
        init_result=True,
        login_result=True,
        balance=12.5,
        release_error: Optional[Exception] = None
    ):
        self.name = name
        self.init_result = init_result
        self.login_result = login_result
        self.balance = balance
        self.release_error = release_error
        self.calls = []
        self.release_count = 0

    def _step(self, call, value):
        self.calls.append(call)
        if isinstance(value, Exception):
            raise value
        return value

    async def initialize(self) -> bool:
        return self._step("initialize", self.init_result)

    async def test_login(self) -> bool:
        return self._step("test_login", self.login_result)

    async def get_balance(self) -> float:
        return self._step("get_balance", self.balance)

    def friendly_name(self) -> str:
        if isinstance(self.name, Exception):
            raise self.name
        return self.name

    async def release(self) -> None:
        self.release_count += 1
        self.calls.append("release")
        if self.release_error is not None:
            raise self.release_error


@pytest.fixture
def make_fake_client():
    """Factory building scripted captcha clients."""
    return FakeCaptchaClient


@pytest.fixture
def fake_client():
    """A captcha client that succeeds at every step."""
    return FakeCaptchaClient()


@pytest.fixture
def memory_store():
    """Empty in-memory configuration store."""
    return InMemoryConfigStore()


@pytest.fixture
def mock_env_vars(monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    test_env = {
        "SETTINGS_STORE": "encrypted",
        "SETTINGS_STORE_PATH": str(tmp_path / "settings"),
        "CAPTCHA_HTTP_TIMEOUT": "5",
        "LOG_LEVEL": "DEBUG"
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    return test_env
