# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the AList storage adapter.

The library never configures handlers or formatters itself. Level, handlers
and format are set with ``logging.basicConfig()`` by the entry point (see
``alist_storage.cli``) to avoid duplicate handlers in the host application.

Example:
    Typical usage in a module::

        from alist_storage.logger import get_logger

        logger = get_logger("AListAuthenticator")
        logger.info("Login successful")
"""

import logging


def get_logger(name: str = "AListStorage") -> logging.Logger:
    """Retrieve a logger instance.

    Args:
        name: The logger name. Defaults to "AListStorage".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)
