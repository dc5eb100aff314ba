# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Bearer token resolution for AList endpoints.

The authenticator answers from the token cache when it can and otherwise logs
in with the credentials stored in the policy's secret. Credentials are read
on a cache miss only and never cached.

Example:
    Resolving a token for a policy::

        authenticator = Authenticator(secret_store, TokenCache(), ClientRegistry())
        token = await authenticator.authenticate(properties)
"""

from __future__ import annotations

from .clients import ClientRegistry
from .exceptions import AuthenticationError, ConfigurationError
from .logger import get_logger
from .schemas import AListProperties, Credentials
from .secret_store import SecretStore
from .token_cache import TokenCache

logger = get_logger("AListAuthenticator")


class Authenticator:
    """Resolve a valid token for an AList endpoint.

    Attributes:
        _secrets: Store the credentials are read from.
        _tokens: Shared token cache.
        _clients: Shared client registry.
    """

    def __init__(
        self,
        secrets: SecretStore,
        tokens: TokenCache,
        clients: ClientRegistry,
    ):
        self._secrets = secrets
        self._tokens = tokens
        self._clients = clients

    async def authenticate(self, properties: AListProperties) -> str:
        """Return a token for ``properties``, logging in on a cache miss.

        Args:
            properties: Settings of the AList endpoint.

        Returns:
            The bearer token.

        Raises:
            ConfigurationError: If the secret is missing or lacks username or
                password. Raised before any network call.
            AuthenticationError: If the remote service rejects the login.
            aiohttp.ClientError: If the login request fails in transport.
        """
        client = self._clients.client_for(properties.site)

        key = properties.token_cache_key
        token = self._tokens.get(key)
        if token is not None:
            logger.debug("Using cached token for %s", properties.base_url)
            return token

        secret = await self._secrets.fetch(properties.secret_name)
        if secret is None:
            raise ConfigurationError(f"Secret {properties.secret_name} not found")
        credentials = Credentials.from_secret(secret)

        response = await client.login(credentials.username, credentials.password)
        if not response.ok or response.data is None:
            logger.warning(
                "Login to %s rejected: %s", properties.base_url, response.message
            )
            raise AuthenticationError("Wrong username or password")

        logger.info("Logged in to %s", properties.base_url)
        issued = response.data.token
        return self._tokens.get_or_insert(key, lambda: issued)

    def invalidate(self, properties: AListProperties) -> None:
        """Drop the cached token so the next call logs in again."""
        self._tokens.invalidate(properties.token_cache_key)
