"""Captcha service module.

This module selects third-party captcha-solving services, builds account
clients for them and verifies an account before it is used in production.

Main components:
- CaptchaService: The closed set of supported services
- ICaptchaServiceClient: Base interface of the service account clients
- CaptchaServiceResolver: Maps identifiers to services and builds clients
- CaptchaVerificationWorkflow: Runs init / login / balance checks
- Client implementations: DeathByCaptchaClient, DecaptcherClient, AntiCaptchaClient
"""

# Closed service set and client capability
from .interfaces import CaptchaCredentials, CaptchaService, ICaptchaServiceClient

# Concrete clients for the supported services
from .clients import AntiCaptchaClient, DeathByCaptchaClient, DecaptcherClient, HttpCaptchaServiceClient

# Identifier resolution and client construction
from .resolver import CaptchaServiceResolver, resolve_service

# Verification workflow and its outcomes
from .verification import (
    CaptchaVerificationWorkflow,
    CredentialsRejected,
    InitializationFailed,
    InsufficientCredentials,
    UnknownService,
    VerificationOutcome,
    Verified,
)

# Public API exports
__all__ = [
    "CaptchaCredentials",
    "CaptchaService",
    "ICaptchaServiceClient",
    "AntiCaptchaClient",
    "DeathByCaptchaClient",
    "DecaptcherClient",
    "HttpCaptchaServiceClient",
    "CaptchaServiceResolver",
    "resolve_service",
    "CaptchaVerificationWorkflow",
    "VerificationOutcome",
    "UnknownService",
    "InsufficientCredentials",
    "InitializationFailed",
    "CredentialsRejected",
    "Verified",
]
