"""Tests for the captcha verification workflow."""

import pytest

from src.captcha import (
    CaptchaService,
    CaptchaServiceResolver,
    CaptchaVerificationWorkflow,
    CredentialsRejected,
    InitializationFailed,
    InsufficientCredentials,
    UnknownService,
    Verified,
)


def _workflow_with(client):
    """Workflow whose every service builds ``client``."""
    factories = {service: (lambda c: client) for service in CaptchaService}
    return CaptchaVerificationWorkflow(CaptchaServiceResolver(factories=factories))


class TestVerificationOutcomes:
    """Tests mapping each stage to its outcome."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("service_id", ["", "disabled", "2captcha", None])
    async def test_unknown_service(self, fake_client, service_id):
        workflow = _workflow_with(fake_client)

        outcome = await workflow.verify(service_id, "user", "pass", "key")

        assert outcome == UnknownService()
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_missing_login_credentials(self, fake_client):
        workflow = _workflow_with(fake_client)

        outcome = await workflow.verify("deathbycaptcha", "", "", "")

        assert outcome == InsufficientCredentials()
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_missing_credentials_with_default_clients(self):
        """Verifies the check happens before any network client is built."""
        outcome = await CaptchaVerificationWorkflow().verify("deathbycaptcha", "", "", "")

        assert isinstance(outcome, InsufficientCredentials)
        assert outcome.success is False

    @pytest.mark.asyncio
    async def test_api_key_service_ignores_login(self, fake_client):
        workflow = _workflow_with(fake_client)

        outcome = await workflow.verify("anticaptcha", "user", "pass", "")

        assert outcome == InsufficientCredentials()

    @pytest.mark.asyncio
    async def test_verified_with_balance(self, fake_client):
        workflow = _workflow_with(fake_client)

        outcome = await workflow.verify("anticaptcha", "", "", "validKey")

        assert outcome == Verified(12.5)
        assert outcome.success is True
        assert outcome.message == "OK, balance = 12.5"
        assert fake_client.calls == ["initialize", "test_login", "get_balance", "release"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("init_result", [False, ConnectionError("refused")])
    async def test_initialization_failed(self, make_fake_client, init_result):
        client = make_fake_client(name="Decaptcher", init_result=init_result)
        workflow = _workflow_with(client)

        outcome = await workflow.verify("decaptcher", "user", "pass", "")

        assert outcome == InitializationFailed("Decaptcher")
        assert "test_login" not in client.calls
        assert client.release_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("login_result", [False, RuntimeError("boom")])
    async def test_credentials_rejected(self, make_fake_client, login_result):
        client = make_fake_client(name="DeathByCaptcha", login_result=login_result)
        workflow = _workflow_with(client)

        outcome = await workflow.verify("deathbycaptcha", "user", "pass", "")

        assert outcome == CredentialsRejected("DeathByCaptcha")
        assert outcome.message == "Invalid credentials for DeathByCaptcha"
        assert "get_balance" not in client.calls
        assert client.release_count == 1

    @pytest.mark.asyncio
    async def test_balance_error_is_reported_not_raised(self, make_fake_client):
        client = make_fake_client(name="Anti-Captcha", balance=TimeoutError("slow"))
        workflow = _workflow_with(client)

        outcome = await workflow.verify("anticaptcha", "", "", "key")

        assert outcome == InitializationFailed("Anti-Captcha")
        assert client.release_count == 1


class TestReleaseDiscipline:
    """Tests for guaranteed, fault-tolerant release."""

    @pytest.mark.asyncio
    async def test_release_fault_does_not_mask_rejection(self, make_fake_client):
        client = make_fake_client(
            name="DeathByCaptcha", login_result=False, release_error=OSError("socket already closed")
        )
        workflow = _workflow_with(client)

        outcome = await workflow.verify("deathbycaptcha", "user", "pass", "")

        assert outcome == CredentialsRejected("DeathByCaptcha")
        assert client.release_count == 1

    @pytest.mark.asyncio
    async def test_release_fault_does_not_mask_success(self, make_fake_client):
        client = make_fake_client(release_error=RuntimeError("close failed"))
        workflow = _workflow_with(client)

        outcome = await workflow.verify("anticaptcha", "", "", "key")

        assert outcome == Verified(12.5)

    @pytest.mark.asyncio
    async def test_release_runs_after_failed_initialize(self, make_fake_client):
        client = make_fake_client(init_result=ConnectionError("refused"))
        workflow = _workflow_with(client)

        await workflow.verify("anticaptcha", "", "", "key")

        assert client.calls == ["initialize", "release"]

    @pytest.mark.asyncio
    async def test_failing_friendly_name_falls_back_to_identifier(self, make_fake_client):
        client = make_fake_client(name=RuntimeError("no name"), login_result=False)
        workflow = _workflow_with(client)

        outcome = await workflow.verify("decaptcher", "user", "pass", "")

        assert outcome == CredentialsRejected("decaptcher")
        assert client.calls == ["initialize", "test_login", "release"]

    @pytest.mark.asyncio
    async def test_failing_friendly_name_and_release_still_verify(self, make_fake_client):
        client = make_fake_client(name=RuntimeError("no name"), release_error=OSError("closed"))
        workflow = _workflow_with(client)

        outcome = await workflow.verify("anticaptcha", "", "", "key")

        assert outcome == Verified(12.5)
        assert client.release_count == 1
