"""Authorizer protocol and implementations.

- ``Authorizer`` — runtime-checkable protocol consulted before every operation.
- ``BasicAuthorizer`` — a single configured HTTP Basic credential.
- ``AllowAllAuthorizer`` — always allows (auth disabled, tests).

The core operations never see an identity; authorization happens entirely
in the HTTP layer.
"""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fastapi.security import HTTPBasicCredentials

    from cfs.config.models import AuthSettings

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """The request carried missing or wrong credentials."""

    def __init__(self, reason: str = "Not authenticated") -> None:
        self.reason = reason
        super().__init__(reason)


@runtime_checkable
class Authorizer(Protocol):
    """Decides whether a request may invoke an operation."""

    def authorize(self, credentials: HTTPBasicCredentials | None) -> str:
        """Return the principal name, or raise :class:`AuthorizationError`."""
        ...


class AllowAllAuthorizer:
    """Always allows — suitable for tests and trusted deployments.

    Satisfies the :class:`Authorizer` protocol.
    """

    def authorize(self, credentials: HTTPBasicCredentials | None) -> str:
        principal = credentials.username if credentials else "anonymous"
        logger.debug("AllowAllAuthorizer: allowing %s", principal)
        return principal


class BasicAuthorizer:
    """Checks HTTP Basic credentials against one configured user.

    Satisfies the :class:`Authorizer` protocol. Comparisons are constant-time.
    """

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> BasicAuthorizer:
        return cls(settings.username, settings.password)

    def authorize(self, credentials: HTTPBasicCredentials | None) -> str:
        if credentials is None:
            raise AuthorizationError()
        user_ok = secrets.compare_digest(credentials.username.encode("utf-8"), self._username)
        password_ok = secrets.compare_digest(credentials.password.encode("utf-8"), self._password)
        if not (user_ok and password_ok):
            logger.warning("Rejected credentials for user %r", credentials.username)
            raise AuthorizationError("Invalid credentials")
        return credentials.username


def authorizer_from_settings(settings: AuthSettings) -> Authorizer:
    """Build the authorizer described by *settings*."""
    if not settings.enabled:
        logger.warning("Authentication is disabled; every request is allowed.")
        return AllowAllAuthorizer()
    return BasicAuthorizer.from_settings(settings)
