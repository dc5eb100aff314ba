# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for the AList storage adapter.

Settings come from an INI-style file, with environment variables as fallback
and dataclass defaults last.

Example:
    Configuration file format (config.ini)::

        [handler]
        token_ttl_seconds = 86400
        template_name = alist
        request_timeout = 60

        [alist]
        site = https://alist.example.com
        path = /attachments
        secret_name = alist-secret
        token_key = alist-token
        username = admin
        password = secret

    Loading the configuration::

        handler_config = load_handler_config("/etc/alist-storage/config.ini")
        site = load_site_settings("/etc/alist-storage/config.ini")
"""

from __future__ import annotations

import configparser
import json
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .logger import get_logger
from .models import ConfigMap, Policy, PolicySpec, Secret
from .schemas import SETTINGS_KEY
from .token_cache import DEFAULT_TOKEN_TTL_SECONDS

DEFAULT_TEMPLATE_NAME = "alist"

logger = get_logger("config_loader")


@dataclass
class HandlerConfig:
    """Settings of the handler itself, shared by every policy.

    Attributes:
        token_ttl_seconds: How long an issued token is trusted.
        template_name: Policy template served by the handler.
        request_timeout: Total timeout per request in seconds, None for the
            aiohttp default.
    """

    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    template_name: str = DEFAULT_TEMPLATE_NAME
    request_timeout: float | None = None


@dataclass
class SiteSettings:
    """A single AList endpoint configured outside of a host, for the CLI.

    Attributes:
        site: Base URL of the AList service.
        path: Remote directory.
        secret_name: Name under which the credentials are registered.
        token_key: Optional token cache key.
        username: AList username.
        password: AList password.
    """

    site: str | None = None
    path: str = "/"
    secret_name: str = "alist-secret"
    token_key: str | None = None
    username: str | None = None
    password: str | None = None

    def to_config_map(self) -> ConfigMap:
        """Serialize the endpoint settings the way a host policy stores them."""
        settings: dict[str, Any] = {
            "site": self.site,
            "path": self.path,
            "secretName": self.secret_name,
        }
        if self.token_key:
            settings["tokenKey"] = self.token_key
        return ConfigMap(name="alist-settings", data={SETTINGS_KEY: json.dumps(settings)})

    def to_policy(self, template_name: str = DEFAULT_TEMPLATE_NAME) -> Policy:
        return Policy(
            name="alist-policy",
            spec=PolicySpec(
                display_name="AList",
                template_name=template_name,
                config_map_name="alist-settings",
            ),
        )

    def to_secret(self) -> Secret:
        string_data: dict[str, str] = {}
        if self.username is not None:
            string_data["username"] = self.username
        if self.password is not None:
            string_data["password"] = self.password
        return Secret(name=self.secret_name, string_data=string_data)


def _optional_float(value: str) -> float | None:
    return float(value) if value.strip() else None


def _read_section(
    config_path: str | None,
    section: str,
    env_mapping: dict[str, tuple[str, Callable[[str], Any], Any]],
) -> dict[str, Any]:
    """Resolve values for one section.

    Priority: config file > environment variables > defaults.
    """
    values: dict[str, Any] = {}

    for key, (env_var, type_fn, default) in env_mapping.items():
        env_value = os.environ.get(env_var)
        if env_value is not None:
            try:
                values[key] = type_fn(env_value)
            except (ValueError, TypeError):
                logger.warning(f"Invalid value for {env_var}, using default")
                values[key] = default
        else:
            values[key] = default

    if config_path and Path(config_path).exists():
        config = configparser.ConfigParser()
        config.read(config_path)

        if config.has_section(section):
            for key, (_, type_fn, _) in env_mapping.items():
                raw = config.get(section, key, fallback=None)
                if raw is None:
                    continue
                try:
                    values[key] = type_fn(raw.strip())
                except (ValueError, TypeError):
                    logger.warning(f"Invalid value for [{section}] {key}, ignoring")

    return values


def load_handler_config(config_path: str | None = None) -> HandlerConfig:
    """Load handler configuration from config file or environment.

    Environment variables:
        ALIST_TOKEN_TTL_SECONDS: Token lifetime in seconds
        ALIST_TEMPLATE_NAME: Policy template served by the handler
        ALIST_REQUEST_TIMEOUT: Total request timeout in seconds

    Args:
        config_path: Optional path to config.ini file

    Returns:
        HandlerConfig with parsed settings, using defaults for missing values.
    """
    env_mapping = {
        "token_ttl_seconds": ("ALIST_TOKEN_TTL_SECONDS", int, DEFAULT_TOKEN_TTL_SECONDS),
        "template_name": ("ALIST_TEMPLATE_NAME", str, DEFAULT_TEMPLATE_NAME),
        "request_timeout": ("ALIST_REQUEST_TIMEOUT", _optional_float, None),
    }
    return HandlerConfig(**_read_section(config_path, "handler", env_mapping))


def load_site_settings(config_path: str | None = None) -> SiteSettings:
    """Load the endpoint used by the CLI from config file or environment.

    Environment variables:
        ALIST_SITE, ALIST_PATH, ALIST_SECRET_NAME, ALIST_TOKEN_KEY,
        ALIST_USERNAME, ALIST_PASSWORD

    Args:
        config_path: Optional path to config.ini file

    Returns:
        SiteSettings with parsed settings, using defaults for missing values.
    """
    env_mapping = {
        "site": ("ALIST_SITE", str, None),
        "path": ("ALIST_PATH", str, "/"),
        "secret_name": ("ALIST_SECRET_NAME", str, "alist-secret"),
        "token_key": ("ALIST_TOKEN_KEY", str, None),
        "username": ("ALIST_USERNAME", str, None),
        "password": ("ALIST_PASSWORD", str, None),
    }
    return SiteSettings(**_read_section(config_path, "alist", env_mapping))
