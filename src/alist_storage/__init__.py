# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment storage on AList file-manager servers."""

from .auth import Authenticator
from .base import AttachmentHandler
from .clients import AListClient, ClientRegistry
from .config_loader import HandlerConfig, load_handler_config
from .exceptions import (
    AListError,
    AuthenticationError,
    ConfigurationError,
    RemoteOperationError,
)
from .handler import AListAttachmentHandler
from .models import (
    Attachment,
    ConfigMap,
    DeleteContext,
    Policy,
    PolicySpec,
    Secret,
    UploadContext,
    UploadFile,
)
from .schemas import AListProperties
from .secret_store import InMemorySecretStore, SecretStore
from .token_cache import TokenCache

__version__ = "1.0.0"

__all__ = [
    "AListAttachmentHandler",
    "AListClient",
    "AListError",
    "AListProperties",
    "Attachment",
    "AttachmentHandler",
    "AuthenticationError",
    "Authenticator",
    "ClientRegistry",
    "ConfigMap",
    "ConfigurationError",
    "DeleteContext",
    "HandlerConfig",
    "InMemorySecretStore",
    "Policy",
    "PolicySpec",
    "RemoteOperationError",
    "Secret",
    "SecretStore",
    "TokenCache",
    "UploadContext",
    "UploadFile",
    "load_handler_config",
]
