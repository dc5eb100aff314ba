# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base interface for attachment storage handlers.

The host asks every registered handler to perform an operation. A handler
that does not recognize the policy returns None and the host moves on to the
next one. Recognition is a predicate each handler supplies through
``should_handle``; by default it compares the policy's template name with
the handler's ``template_name``.
"""

from __future__ import annotations

from datetime import timedelta

from .models import Attachment, ConfigMap, DeleteContext, Policy, UploadContext


class AttachmentHandler:
    """Abstract base class defining the attachment handler interface.

    Attributes:
        template_name: Policy template this handler serves.
    """

    template_name: str = ""

    def should_handle(self, policy: Policy | None) -> bool:
        """Return True when ``policy`` selects this handler."""
        if policy is None or policy.spec is None or policy.spec.template_name is None:
            return False
        return policy.spec.template_name == self.template_name

    async def upload(self, context: UploadContext) -> Attachment | None:
        """Store the file and return a new attachment, or None if not handled."""
        raise NotImplementedError

    async def delete(self, context: DeleteContext) -> Attachment | None:
        """Remove the stored file and return the attachment, or None if not handled."""
        raise NotImplementedError

    async def get_permalink(
        self,
        attachment: Attachment,
        policy: Policy | None,
        config_map: ConfigMap | None,
    ) -> str | None:
        """Return a permanent URL for the attachment, or None if not handled."""
        raise NotImplementedError

    async def get_shared_url(
        self,
        attachment: Attachment,
        policy: Policy | None,
        config_map: ConfigMap | None,
        ttl: timedelta,
    ) -> str | None:
        """Return a URL valid for ``ttl``, or None if not handled."""
        raise NotImplementedError
