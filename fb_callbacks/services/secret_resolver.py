"""Credential resolution protocols for multi-tenant callback handling.

The dispatchers never hold an app secret themselves: they ask a resolver for
the secret (or verify token) of the app id found in the request path, once
per request. This module provides:
- `AppSecretResolver` / `VerifyTokenResolver` protocols
- `StaticCredentials` for a single app configured through Settings
- `InMemoryCredentialStore` for several apps registered at startup

Resolvers may be called concurrently from overlapping requests; an
implementation backed by a database or secret manager must handle its own
synchronization.
"""

from dataclasses import dataclass
from typing import Protocol

from fb_callbacks.config import Settings
from fb_callbacks.services.errors import SecretNotFoundError


class AppSecretResolver(Protocol):
    """Protocol for looking up the app secret of an app id."""

    async def get_app_secret(self, app_id: int) -> str:
        """Return the app secret.

        Raises:
            SecretNotFoundError: if the app id is not served here
        """
        ...


class VerifyTokenResolver(Protocol):
    """Protocol for looking up the webhook verify token of an app id."""

    async def get_verify_token(self, app_id: int) -> str:
        ...


class CredentialResolver(AppSecretResolver, VerifyTokenResolver, Protocol):
    """Both lookups, as needed by the webhooks endpoint."""


@dataclass(frozen=True)
class AppCredentials:
    app_secret: str
    verify_token: str | None = None

    def __repr__(self) -> str:
        return "AppCredentials(app_secret='***', verify_token='***')"


class StaticCredentials:
    """Credentials of exactly one app.

    Any other app id is rejected, so a request for a foreign app cannot be
    verified with this app's secret.
    """

    def __init__(
        self,
        app_id: int,
        app_secret: str,
        verify_token: str | None = None,
    ):
        if not app_secret:
            raise ValueError("app_secret is required")
        self.app_id = app_id
        self._credentials = AppCredentials(app_secret, verify_token)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticCredentials":
        if settings.facebook_app_id is None or not settings.facebook_app_secret:
            raise ValueError(
                "FACEBOOK_APP_ID and FACEBOOK_APP_SECRET must be set"
            )
        return cls(
            app_id=settings.facebook_app_id,
            app_secret=settings.facebook_app_secret,
            verify_token=settings.facebook_verify_token,
        )

    async def get_app_secret(self, app_id: int) -> str:
        if app_id != self.app_id:
            raise SecretNotFoundError(app_id)
        return self._credentials.app_secret

    async def get_verify_token(self, app_id: int) -> str:
        if app_id != self.app_id or self._credentials.verify_token is None:
            raise SecretNotFoundError(app_id, what="verify token")
        return self._credentials.verify_token


class InMemoryCredentialStore:
    """Credentials of several apps, keyed by app id.

    Example:
        >>> store = InMemoryCredentialStore()
        >>> store.register(202000000000000, "secret", verify_token="token")
        >>> await store.get_app_secret(202000000000000)
        'secret'
    """

    def __init__(self, credentials: dict[int, AppCredentials] | None = None):
        self._credentials: dict[int, AppCredentials] = dict(credentials or {})

    def register(
        self, app_id: int, app_secret: str, verify_token: str | None = None
    ) -> None:
        self._credentials[app_id] = AppCredentials(app_secret, verify_token)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._credentials

    async def get_app_secret(self, app_id: int) -> str:
        try:
            return self._credentials[app_id].app_secret
        except KeyError:
            raise SecretNotFoundError(app_id) from None

    async def get_verify_token(self, app_id: int) -> str:
        credentials = self._credentials.get(app_id)
        if credentials is None or credentials.verify_token is None:
            raise SecretNotFoundError(app_id, what="verify token")
        return credentials.verify_token
