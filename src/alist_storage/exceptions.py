# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exceptions raised by the AList storage adapter.

Every failure aborts the whole pipeline and reaches the caller. Transport
errors raised by aiohttp are not wrapped and propagate as they are.
"""

from __future__ import annotations


class AListError(Exception):
    """Base class for all adapter errors."""


class ConfigurationError(AListError):
    """Policy settings or the referenced secret are missing or malformed."""


class AuthenticationError(AListError):
    """The remote service rejected the login request."""


class RemoteOperationError(AListError):
    """A remote call answered with a non-success envelope.

    Attributes:
        code: Status code reported by the remote envelope.
        message: Message reported by the remote service, verbatim.
    """

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
