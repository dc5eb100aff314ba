# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic schemas for the AList wire format and policy settings.

Every AList response is wrapped in an envelope::

    {"code": 200, "message": "success", "data": {...}}

The status code is compared as a string against ``SUCCESS_CODE``; AList sends
it as a JSON number, so it is coerced before validation.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError
from .models import ConfigMap, Secret

SUCCESS_CODE = "200"
SETTINGS_KEY = "default"

T = TypeVar("T")


def _to_str(value: Any) -> Any:
    """Coerce numeric status codes to strings."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value


class AListProperties(BaseModel):
    """Settings of one AList endpoint, parsed from a policy's settings blob.

    Attributes:
        site: Base URL of the AList service.
        path: Remote directory that receives uploads.
        secret_name: Name of the secret holding username and password.
        token_key: Optional explicit token cache key.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    site: Annotated[str, Field(min_length=1, description="AList base URL")]
    path: Annotated[str, Field(default="/", description="Remote directory")]
    secret_name: Annotated[
        str,
        Field(min_length=1, alias="secretName", description="Secret with credentials"),
    ]
    token_key: Annotated[
        str | None,
        Field(default=None, alias="tokenKey", description="Token cache key"),
    ]

    @property
    def base_url(self) -> str:
        """Site URL without trailing slash."""
        return self.site.rstrip("/")

    @property
    def token_cache_key(self) -> str:
        """Key used for every token cache lookup, insert and invalidation.

        Falls back to a key derived from the endpoint and the secret when no
        explicit ``token_key`` is configured.
        """
        if self.token_key:
            return self.token_key
        return f"{self.base_url}#{self.secret_name}"

    @classmethod
    def from_config_map(cls, config_map: ConfigMap | None) -> AListProperties:
        """Parse the settings stored under the ``default`` key.

        Args:
            config_map: The policy's settings object.

        Returns:
            Validated properties.

        Raises:
            ConfigurationError: If the settings are not valid JSON or miss
                required fields.
        """
        data = config_map.data if config_map is not None else {}
        raw = data.get(SETTINGS_KEY) or "{}"
        try:
            settings = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid AList settings: {e}") from e
        if not isinstance(settings, dict):
            raise ConfigurationError("Invalid AList settings: expected a JSON object")
        try:
            return cls.model_validate(settings)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid AList settings: {e}") from e


class Credentials(BaseModel):
    """Username and password read from a secret."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: Annotated[str, Field(repr=False)]

    @classmethod
    def from_secret(cls, secret: Secret) -> Credentials:
        """Extract credentials from a secret's string data.

        Raises:
            ConfigurationError: If ``username`` or ``password`` is missing.
        """
        string_data = secret.string_data or {}
        if "username" not in string_data or "password" not in string_data:
            raise ConfigurationError(
                f"Secret {secret.name} does not have username or password key"
            )
        return cls(username=string_data["username"], password=string_data["password"])


class ResponseEnvelope(BaseModel, Generic[T]):
    """Wrapper around every AList response.

    Attributes:
        code: Status code as a string; ``"200"`` means success.
        message: Human-readable message from the service.
        data: Typed payload, absent for calls that return nothing.
    """

    model_config = ConfigDict(extra="ignore")

    code: Annotated[str, BeforeValidator(_to_str)]
    message: str = ""
    data: T | None = None

    @property
    def ok(self) -> bool:
        """True when the envelope carries the success code."""
        return self.code == SUCCESS_CODE


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str


class FileInfoRequest(BaseModel):
    path: str


class FileInfo(BaseModel):
    """Remote metadata returned by ``/api/fs/get``.

    Only the fields the adapter needs are declared; AList also sends
    ``is_dir``, ``modified``, ``sign``, ``raw_url`` and more.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    size: int


class RemoveRequest(BaseModel):
    dir: str
    names: list[str]
