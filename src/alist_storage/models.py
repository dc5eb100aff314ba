# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Host-side records read and produced by the adapter.

The host owns and persists these records. The adapter reads policies, settings
and secrets, and returns new or existing attachments.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

EXTERNAL_LINK_ANNO_KEY = "storage.halo.run/external-link"
DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dataclass
class PolicySpec:
    display_name: str = ""
    template_name: str | None = None
    config_map_name: str | None = None


@dataclass
class Policy:
    """Storage policy selecting which handler stores an attachment."""

    name: str
    spec: PolicySpec | None = None


@dataclass
class ConfigMap:
    """Settings of a policy, as deserialized key/value strings."""

    name: str = ""
    data: dict[str, str] = field(default_factory=dict)


@dataclass
class Secret:
    """Host-managed credential record referenced by name."""

    name: str
    string_data: dict[str, str] | None = None


@dataclass
class Metadata:
    name: str
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class AttachmentSpec:
    display_name: str
    media_type: str | None = None
    size: int | None = None


@dataclass
class Attachment:
    """Attachment record persisted by the host.

    Attributes:
        metadata: Identity and annotations (the external link lives here).
        spec: Display name, media type and size.
    """

    metadata: Metadata
    spec: AttachmentSpec

    @property
    def external_link(self) -> str | None:
        """The link annotation set on upload, if any."""
        return self.metadata.annotations.get(EXTERNAL_LINK_ANNO_KEY)


@dataclass
class UploadFile:
    """A file part received by the host for upload.

    The content is held in memory so the transport can replay it on a
    redirect.

    Attributes:
        filename: Name of the file, used as remote name and display name.
        content: The whole file body.
        media_type: MIME type reported by the client.
        content_length: Declared length; defaults to ``len(content)``.
    """

    filename: str
    content: bytes
    media_type: str = DEFAULT_MEDIA_TYPE
    content_length: int | None = None

    def __post_init__(self) -> None:
        if self.content_length is None:
            self.content_length = len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, media_type: str | None = None) -> UploadFile:
        """Read a local file into an upload part."""
        path = Path(path)
        if media_type is None:
            media_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MEDIA_TYPE
        return cls(filename=path.name, content=path.read_bytes(), media_type=media_type)


@dataclass
class UploadContext:
    file: UploadFile
    policy: Policy | None
    config_map: ConfigMap | None


@dataclass
class DeleteContext:
    attachment: Attachment
    policy: Policy | None
    config_map: ConfigMap | None
