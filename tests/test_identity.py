from __future__ import annotations

import asyncio
import logging

from monarch.identity import (
    AnonymousIdentityProvider,
    TokenIdentityProvider,
    provider_from_config,
    resolve_identity,
)


def test_token_identity_is_stable():
    first = asyncio.run(resolve_identity(TokenIdentityProvider("session-abc")))
    second = asyncio.run(resolve_identity(TokenIdentityProvider("session-abc")))
    assert first is not None
    assert first == second
    assert not first.anonymous


def test_anonymous_identity_is_stable_per_provider():
    provider = AnonymousIdentityProvider()
    first = asyncio.run(resolve_identity(provider))
    assert first.anonymous
    assert asyncio.run(resolve_identity(provider)) == first


def test_failed_resolution_is_logged_and_unresolved(caplog):
    with caplog.at_level(logging.ERROR, logger="monarch.identity"):
        identity = asyncio.run(resolve_identity(TokenIdentityProvider("  ")))
    assert identity is None
    assert "auth_error" in caplog.text


def test_provider_from_config():
    assert isinstance(provider_from_config("tok"), TokenIdentityProvider)
    assert isinstance(provider_from_config(None), AnonymousIdentityProvider)
