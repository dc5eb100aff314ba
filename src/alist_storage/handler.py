# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment handler storing files on an AList server.

Each operation runs as one sequential pipeline:

1. check that the policy selects this handler (otherwise return None),
2. parse the endpoint settings from the policy's ``ConfigMap``,
3. resolve a token through the ``Authenticator``,
4. issue the authenticated AList calls,
5. check each response envelope,
6. map the result into or out of the host's ``Attachment``.

Settings and token are passed along explicitly, so concurrent operations for
different policies never share per-call state. Any failure aborts the
pipeline and is raised to the caller; nothing is retried.

Example:
    Uploading through the handler::

        handler = AListAttachmentHandler(secret_store)
        attachment = await handler.upload(
            UploadContext(file=upload_file, policy=policy, config_map=config_map)
        )
        print(attachment.external_link)
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from urllib.parse import quote

from .auth import Authenticator
from .base import AttachmentHandler
from .clients import ClientRegistry
from .config_loader import HandlerConfig
from .exceptions import RemoteOperationError
from .logger import get_logger
from .models import (
    EXTERNAL_LINK_ANNO_KEY,
    Attachment,
    AttachmentSpec,
    ConfigMap,
    DeleteContext,
    Metadata,
    Policy,
    UploadContext,
)
from .schemas import AListProperties, FileInfo, ResponseEnvelope
from .secret_store import SecretStore
from .token_cache import TokenCache

# Characters allowed unencoded in a URI path (RFC 3986 pchar and "/")
PATH_SAFE_CHARS = "/:@!$&'()*+,;="

logger = get_logger("AListAttachmentHandler")


def encode_path(path: str) -> str:
    """Percent-encode ``path`` as UTF-8, keeping path separators.

    >>> encode_path("https://x.example/d/docs/a b.png")
    'https://x.example/d/docs/a%20b.png'
    """
    return quote(path, safe=PATH_SAFE_CHARS, encoding="utf-8")


def join_remote_path(directory: str, name: str) -> str:
    """Join a remote directory and a file name with a single slash."""
    return f"{directory.rstrip('/')}/{name}"


def build_link(properties: AListProperties, remote_name: str) -> str:
    """Return the encoded download link ``{site}/d{path}/{name}``."""
    return encode_path(
        properties.base_url + "/d" + join_remote_path(properties.path, remote_name)
    )


class AListAttachmentHandler(AttachmentHandler):
    """Store, remove and link attachments on AList servers.

    Attributes:
        template_name: Policy template served by this handler.
        _tokens: Token cache shared by every policy.
        _clients: One client per AList base URL.
        _authenticator: Token resolver.
    """

    def __init__(
        self,
        secrets: SecretStore,
        config: HandlerConfig | None = None,
        tokens: TokenCache | None = None,
        clients: ClientRegistry | None = None,
    ):
        """Initialize the handler.

        Args:
            secrets: Store holding the credentials referenced by policies.
            config: Handler settings; defaults apply when omitted.
            tokens: Token cache to share; a new one is created when omitted.
            clients: Client registry to share; a new one is created when omitted.
        """
        config = config or HandlerConfig()
        self.template_name = config.template_name
        self._tokens = (
            tokens if tokens is not None
            else TokenCache(ttl_seconds=config.token_ttl_seconds)
        )
        self._clients = (
            clients if clients is not None
            else ClientRegistry(request_timeout=config.request_timeout)
        )
        self._authenticator = Authenticator(secrets, self._tokens, self._clients)

    @property
    def tokens(self) -> TokenCache:
        return self._tokens

    @property
    def clients(self) -> ClientRegistry:
        return self._clients

    def _check(self, response: ResponseEnvelope, action: str, name: str) -> None:
        if not response.ok:
            logger.warning("%s %s failed: %s", action, name, response.message)
            raise RemoteOperationError(response.message, code=response.code)
        logger.info("%s %s successfully", action, name)

    async def _file_info(
        self, properties: AListProperties, token: str, name: str
    ) -> FileInfo:
        client = self._clients.client_for(properties.site)
        response = await client.get(join_remote_path(properties.path, name), token)
        self._check(response, "Got file", name)
        if response.data is None:
            raise RemoteOperationError(f"No metadata returned for {name}", code=response.code)
        return response.data

    async def upload(self, context: UploadContext) -> Attachment | None:
        """Upload the file and return a new attachment.

        The size of the returned attachment is the one reported by AList.
        A failed metadata fetch fails the upload even though the file now
        exists remotely.

        Raises:
            ConfigurationError: Invalid settings or secret.
            AuthenticationError: Login rejected.
            RemoteOperationError: Upload or metadata fetch rejected.
        """
        if not self.should_handle(context.policy):
            return None

        file = context.file
        properties = AListProperties.from_config_map(context.config_map)
        token = await self._authenticator.authenticate(properties)
        client = self._clients.client_for(properties.site)

        response = await client.put(
            encode_path(join_remote_path(properties.path, file.filename)),
            file.content,
            token,
            content_length=file.content_length,
        )
        self._check(response, "Upload file", file.filename)

        info = await self._file_info(properties, token, file.filename)

        return Attachment(
            metadata=Metadata(
                name=str(uuid.uuid4()),
                annotations={EXTERNAL_LINK_ANNO_KEY: build_link(properties, info.name)},
            ),
            spec=AttachmentSpec(
                display_name=file.filename,
                media_type=file.media_type,
                size=info.size,
            ),
        )

    async def delete(self, context: DeleteContext) -> Attachment | None:
        """Remove the attachment's remote file and return the attachment.

        The host removes its own record afterwards.
        """
        if not self.should_handle(context.policy):
            return None

        properties = AListProperties.from_config_map(context.config_map)
        token = await self._authenticator.authenticate(properties)
        client = self._clients.client_for(properties.site)

        name = context.attachment.spec.display_name
        response = await client.remove(properties.path, [name], token)
        self._check(response, "Delete file", name)
        return context.attachment

    async def get_permalink(
        self,
        attachment: Attachment,
        policy: Policy | None,
        config_map: ConfigMap | None,
    ) -> str | None:
        """Return the download link of the attachment's remote file."""
        if not self.should_handle(policy):
            return None

        properties = AListProperties.from_config_map(config_map)
        token = await self._authenticator.authenticate(properties)
        info = await self._file_info(properties, token, attachment.spec.display_name)
        return build_link(properties, info.name)

    async def get_shared_url(
        self,
        attachment: Attachment,
        policy: Policy | None,
        config_map: ConfigMap | None,
        ttl: timedelta,
    ) -> str | None:
        """Return the permanent link; AList has no expiring links so ``ttl`` is ignored."""
        return await self.get_permalink(attachment, policy, config_map)

    async def remove_token_cache(self, properties: AListProperties) -> None:
        """Forget the token cached for ``properties``."""
        self._authenticator.invalidate(properties)

    async def close(self) -> None:
        """Close every HTTP session opened by the handler."""
        await self._clients.close()
