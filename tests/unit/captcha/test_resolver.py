"""Tests for the captcha service resolver."""

import pytest

from src.captcha import (
    AntiCaptchaClient,
    CaptchaCredentials,
    CaptchaService,
    CaptchaServiceResolver,
    DeathByCaptchaClient,
    DecaptcherClient,
)


class TestResolve:
    """Tests for service identifier resolution."""

    @pytest.fixture
    def resolver(self):
        return CaptchaServiceResolver()

    @pytest.mark.parametrize("service_id,expected", [
        ("deathbycaptcha", CaptchaService.DEATHBYCAPTCHA),
        ("DeathByCaptcha", CaptchaService.DEATHBYCAPTCHA),
        ("decaptcher", CaptchaService.DECAPTCHER),
        ("ANTICAPTCHA", CaptchaService.ANTICAPTCHA),
        (" anticaptcha ", CaptchaService.ANTICAPTCHA),
        ("disabled", CaptchaService.DISABLED),
    ])
    def test_known_identifiers(self, resolver, service_id, expected):
        """Verifies known identifiers resolve case-insensitively."""
        assert resolver.resolve(service_id) is expected

    @pytest.mark.parametrize("service_id", [
        None, "", "   ", "2captcha", "capsolver", "death by captcha", "anti-captcha", "\x00", "DISABLE", 5
    ])
    def test_unknown_identifiers_resolve_to_disabled(self, resolver, service_id):
        """Verifies unknown identifiers never raise and map to DISABLED."""
        assert resolver.resolve(service_id) is CaptchaService.DISABLED


class TestBuildClient:
    """Tests for client construction."""

    @pytest.fixture
    def resolver(self):
        return CaptchaServiceResolver(timeout=3.0)

    def test_builds_deathbycaptcha_client(self, resolver):
        client = resolver.build_client(
            CaptchaService.DEATHBYCAPTCHA, CaptchaCredentials(user="bob", password="secret")
        )

        assert isinstance(client, DeathByCaptchaClient)
        assert client.username == "bob"
        assert client.password == "secret"
        assert client.timeout == 3.0

    def test_builds_decaptcher_client(self, resolver):
        client = resolver.build_client(
            CaptchaService.DECAPTCHER, CaptchaCredentials(user="bob", password="secret")
        )

        assert isinstance(client, DecaptcherClient)

    def test_builds_anticaptcha_client(self, resolver):
        client = resolver.build_client(CaptchaService.ANTICAPTCHA, CaptchaCredentials(api_key="key"))

        assert isinstance(client, AntiCaptchaClient)
        assert client.api_key == "key"

    @pytest.mark.parametrize("service,credentials", [
        (CaptchaService.DEATHBYCAPTCHA, CaptchaCredentials()),
        (CaptchaService.DEATHBYCAPTCHA, CaptchaCredentials(user="bob")),
        (CaptchaService.DECAPTCHER, CaptchaCredentials(password="secret")),
        (CaptchaService.DECAPTCHER, CaptchaCredentials(api_key="key")),
        (CaptchaService.ANTICAPTCHA, CaptchaCredentials(user="bob", password="secret")),
        (CaptchaService.DISABLED, CaptchaCredentials(user="bob", password="secret", api_key="key")),
    ])
    def test_missing_credentials_build_nothing(self, resolver, service, credentials):
        """Verifies that missing required fields yield no client, not an error."""
        assert resolver.build_client(service, credentials) is None

    def test_custom_factory_replaces_default(self, fake_client):
        resolver = CaptchaServiceResolver(factories={CaptchaService.ANTICAPTCHA: lambda c: fake_client})

        client = resolver.build_client(CaptchaService.ANTICAPTCHA, CaptchaCredentials(api_key="key"))

        assert client is fake_client

    def test_factory_for_disabled_is_ignored(self, fake_client):
        resolver = CaptchaServiceResolver(factories={CaptchaService.DISABLED: lambda c: fake_client})

        client = resolver.build_client(
            CaptchaService.DISABLED, CaptchaCredentials(user="u", password="p", api_key="k")
        )

        assert client is None
