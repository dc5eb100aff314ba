# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Secret store interface consumed by the authenticator.

The host supplies the real store. ``InMemorySecretStore`` backs the CLI and
the tests.
"""

from __future__ import annotations

from typing import Protocol

from .models import Secret


class SecretStore(Protocol):
    """Read access to host-managed secrets."""

    async def fetch(self, name: str) -> Secret | None:
        """Return the secret called ``name``, or None if it does not exist."""
        ...


class InMemorySecretStore:
    """Secret store backed by a dictionary."""

    def __init__(self, secrets: dict[str, Secret] | None = None):
        self._secrets: dict[str, Secret] = dict(secrets or {})

    def add(self, secret: Secret) -> None:
        self._secrets[secret.name] = secret

    async def fetch(self, name: str) -> Secret | None:
        return self._secrets.get(name)
