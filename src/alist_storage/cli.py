# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for alist-storage.

Runs the handler operations against the AList endpoint described in the
``[alist]`` section of a config file (or ``ALIST_*`` environment variables).

Usage:
    alist-storage --config config.ini upload report.pdf
    alist-storage --config config.ini link report.pdf
    alist-storage --config config.ini delete report.pdf
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import aiohttp
import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config_loader import SiteSettings, load_handler_config, load_site_settings
from .exceptions import AListError
from .handler import AListAttachmentHandler
from .models import Attachment, AttachmentSpec, DeleteContext, Metadata, UploadContext, UploadFile
from .secret_store import InMemorySecretStore

console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Execute an async coroutine synchronously from CLI context."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, indent=2, default=str))


def _configure_logging() -> None:
    log_level = os.getenv("ALIST_STORAGE_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _placeholder_attachment(name: str) -> Attachment:
    return Attachment(metadata=Metadata(name=name), spec=AttachmentSpec(display_name=name))


async def _with_handler(ctx_obj: dict[str, Any], operation):
    """Build a handler, run ``operation(handler, settings)`` and close it."""
    settings: SiteSettings = ctx_obj["settings"]
    handler_config = ctx_obj["handler_config"]
    secrets = InMemorySecretStore()
    secrets.add(settings.to_secret())
    handler = AListAttachmentHandler(secrets, config=handler_config)
    try:
        return await operation(handler, settings)
    finally:
        await handler.close()


def _run(ctx: click.Context, operation):
    try:
        return run_async(_with_handler(ctx.obj, operation))
    except AListError as e:
        print_error(str(e))
        sys.exit(1)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        print_error(f"Request to AList failed: {str(e) or type(e).__name__}")
        sys.exit(1)
    except (json.JSONDecodeError, ValidationError) as e:
        print_error(f"Malformed response from AList: {e}")
        sys.exit(1)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="ALIST_STORAGE_CONFIG",
    default=None,
    help="Path to config.ini.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None) -> None:
    """Store and retrieve attachments on an AList server."""
    _configure_logging()
    settings = load_site_settings(config_path)
    if not settings.site:
        print_error("No AList site configured (set [alist] site or ALIST_SITE)")
        sys.exit(1)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["handler_config"] = load_handler_config(config_path)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--media-type", default=None, help="MIME type; guessed when omitted.")
@click.pass_context
def upload(ctx: click.Context, file: str, media_type: str | None) -> None:
    """Upload FILE and print the resulting attachment."""
    upload_file = UploadFile.from_path(Path(file), media_type=media_type)

    async def operation(handler: AListAttachmentHandler, settings: SiteSettings):
        return await handler.upload(
            UploadContext(
                file=upload_file,
                policy=settings.to_policy(handler.template_name),
                config_map=settings.to_config_map(),
            )
        )

    attachment = _run(ctx, operation)
    print_success(f"Uploaded {upload_file.filename}")
    print_json(asdict(attachment))


@main.command()
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete the remote file NAME."""

    async def operation(handler: AListAttachmentHandler, settings: SiteSettings):
        return await handler.delete(
            DeleteContext(
                attachment=_placeholder_attachment(name),
                policy=settings.to_policy(handler.template_name),
                config_map=settings.to_config_map(),
            )
        )

    _run(ctx, operation)
    print_success(f"Deleted {name}")


@main.command()
@click.argument("name")
@click.pass_context
def link(ctx: click.Context, name: str) -> None:
    """Print the download link of the remote file NAME."""

    async def operation(handler: AListAttachmentHandler, settings: SiteSettings):
        return await handler.get_permalink(
            _placeholder_attachment(name),
            settings.to_policy(handler.template_name),
            settings.to_config_map(),
        )

    click.echo(_run(ctx, operation))


if __name__ == "__main__":
    main()
