"""Session identity resolution."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class IdentityResolutionError(RuntimeError):
    """Raised by a provider that cannot produce an identity."""


@dataclass(frozen=True)
class Identity:
    """An opaque, stable user identifier for the session."""

    uid: str
    anonymous: bool = False


class IdentityProvider(Protocol):
    async def resolve(self) -> Identity:
        """Resolve the session identity or raise IdentityResolutionError."""
        ...


class AnonymousIdentityProvider:
    """Issues one fresh anonymous identity per provider instance."""

    def __init__(self) -> None:
        self._identity: Identity | None = None

    async def resolve(self) -> Identity:
        if self._identity is None:
            self._identity = Identity(uid=uuid4().hex, anonymous=True)
        return self._identity


class TokenIdentityProvider:
    """Derives the identity from a pre-resolved session token."""

    def __init__(self, token: str) -> None:
        self.token = token

    async def resolve(self) -> Identity:
        token = (self.token or "").strip()
        if not token:
            raise IdentityResolutionError("session token is empty")
        uid = hashlib.sha256(token.encode("utf-8")).hexdigest()[:28]
        return Identity(uid=uid)


def provider_from_config(token: str | None) -> IdentityProvider:
    """Use the configured session token when present, else sign in anonymously."""
    if token:
        return TokenIdentityProvider(token)
    return AnonymousIdentityProvider()


async def resolve_identity(provider: IdentityProvider) -> Identity | None:
    """Resolve an identity, logging failures and treating them as unresolved."""
    try:
        identity = await provider.resolve()
    except IdentityResolutionError as exc:
        logger.error("auth_error provider=%s error=%r", type(provider).__name__, exc)
        return None
    logger.info("auth_resolved uid=%s anonymous=%s", identity.uid, identity.anonymous)
    return identity
