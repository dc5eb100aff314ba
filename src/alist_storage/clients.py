# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""HTTP clients for AList endpoints.

``AListClient`` is bound to one AList base URL and owns a single aiohttp
session, created on first use. ``ClientRegistry`` hands out one client per
base URL and reuses it for every later request.

Each call returns the parsed ``ResponseEnvelope``. The transport status code is
ignored: success is decided by the envelope's own ``code``.

Example:
    Talking to an AList server directly::

        registry = ClientRegistry()
        client = registry.client_for("https://alist.example.com")
        envelope = await client.login("admin", "secret")
        if envelope.ok:
            info = await client.get("/docs/report.pdf", envelope.data.token)
        await registry.close()
"""

from __future__ import annotations

from typing import Any

import aiohttp

from .schemas import (
    FileInfo,
    FileInfoRequest,
    LoginRequest,
    LoginResult,
    RemoveRequest,
    ResponseEnvelope,
)

LOGIN_PATH = "/api/auth/login"
PUT_PATH = "/api/fs/put"
GET_PATH = "/api/fs/get"
REMOVE_PATH = "/api/fs/remove"


class AListClient:
    """Client bound to a single AList base URL.

    Attributes:
        _base_url: Base URL without trailing slash.
        _timeout: Optional aiohttp timeout; None keeps aiohttp's default.
        _session: Lazily created aiohttp session.
    """

    def __init__(self, base_url: str, request_timeout: float | None = None):
        """Initialize the client.

        Args:
            base_url: Base URL of the AList service.
            request_timeout: Total timeout per request in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = (
            aiohttp.ClientTimeout(total=request_timeout)
            if request_timeout is not None
            else None
        )
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        """The base URL this client is bound to."""
        return self._base_url

    def _endpoint(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            if self._timeout is not None:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        envelope_type: type[ResponseEnvelope[Any]],
        **kwargs: Any,
    ) -> ResponseEnvelope[Any]:
        """Send a request and parse the response envelope.

        Raises:
            aiohttp.ClientError: If the request fails at transport level.
            json.JSONDecodeError: If the body is not JSON.
            pydantic.ValidationError: If the body is not an envelope.
        """
        session = self._get_session()
        async with session.request(method, self._endpoint(path), **kwargs) as response:
            payload = await response.json(content_type=None)
        return envelope_type.model_validate(payload)

    async def login(self, username: str, password: str) -> ResponseEnvelope[LoginResult]:
        """Exchange credentials for a token."""
        body = LoginRequest(username=username, password=password)
        return await self._request(
            "POST",
            LOGIN_PATH,
            ResponseEnvelope[LoginResult],
            json=body.model_dump(),
        )

    async def put(
        self,
        file_path: str,
        content: bytes,
        token: str,
        content_length: int | None = None,
    ) -> ResponseEnvelope[Any]:
        """Upload a whole file.

        Args:
            file_path: Percent-encoded remote path, sent as ``File-Path``.
            content: File body. Bytes are replayable on redirect.
            token: Bearer token, sent verbatim as ``Authorization``.
            content_length: Declared length; defaults to ``len(content)``.
        """
        headers = {
            "Authorization": token,
            "File-Path": file_path,
            "Content-Type": "application/octet-stream",
            "Content-Length": str(
                content_length if content_length is not None else len(content)
            ),
        }
        return await self._request(
            "PUT", PUT_PATH, ResponseEnvelope[Any], data=content, headers=headers
        )

    async def get(self, path: str, token: str) -> ResponseEnvelope[FileInfo]:
        """Fetch remote metadata for ``path``."""
        return await self._request(
            "POST",
            GET_PATH,
            ResponseEnvelope[FileInfo],
            json=FileInfoRequest(path=path).model_dump(),
            headers={"Authorization": token},
        )

    async def remove(
        self, directory: str, names: list[str], token: str
    ) -> ResponseEnvelope[Any]:
        """Remove ``names`` from ``directory``."""
        return await self._request(
            "POST",
            REMOVE_PATH,
            ResponseEnvelope[Any],
            json=RemoveRequest(dir=directory, names=names).model_dump(),
            headers={"Authorization": token},
        )

    async def close(self) -> None:
        """Close the underlying session if one was opened."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


class ClientRegistry:
    """One reusable ``AListClient`` per base URL.

    ``client_for`` does not await between lookup and insert, so concurrent
    callers on the same event loop always receive the same instance.
    """

    def __init__(self, request_timeout: float | None = None):
        self._request_timeout = request_timeout
        self._clients: dict[str, AListClient] = {}

    def client_for(self, base_url: str) -> AListClient:
        """Return the client for ``base_url``, creating it on first request."""
        key = base_url.rstrip("/")
        client = self._clients.get(key)
        if client is None:
            client = AListClient(key, request_timeout=self._request_timeout)
            self._clients[key] = client
        return client

    def __contains__(self, base_url: str) -> bool:
        return base_url.rstrip("/") in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    async def close(self) -> None:
        """Close every client session."""
        for client in list(self._clients.values()):
            await client.close()
