"""Tests for the alist-storage command line."""

import json
import socket

import pytest
from click.testing import CliRunner

from alist_storage import cli
from alist_storage.exceptions import RemoteOperationError
from alist_storage.handler import AListAttachmentHandler
from alist_storage.models import Attachment, AttachmentSpec, Metadata


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for var in ("ALIST_SITE", "ALIST_STORAGE_CONFIG", "ALIST_TEMPLATE_NAME"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "config.ini"
    path.write_text(
        "[alist]\n"
        "site = https://x.example\n"
        "path = /docs\n"
        "username = admin\n"
        "password = secret\n"
    )
    return str(path)


@pytest.fixture
def calls(monkeypatch):
    """Replace handler operations with recorders."""
    recorded = []

    async def upload(self, context):
        recorded.append(("upload", context))
        return Attachment(
            metadata=Metadata(name="id-1", annotations={"link": "https://x.example/d/docs/a.txt"}),
            spec=AttachmentSpec(display_name=context.file.filename, size=len(context.file.content)),
        )

    async def delete(self, context):
        recorded.append(("delete", context))
        return context.attachment

    async def get_permalink(self, attachment, policy, config_map):
        recorded.append(("link", attachment, policy, config_map))
        return f"https://x.example/d/docs/{attachment.spec.display_name}"

    monkeypatch.setattr(AListAttachmentHandler, "upload", upload)
    monkeypatch.setattr(AListAttachmentHandler, "delete", delete)
    monkeypatch.setattr(AListAttachmentHandler, "get_permalink", get_permalink)
    return recorded


def test_link(config_file, calls):
    result = CliRunner().invoke(cli.main, ["--config", config_file, "link", "a.txt"])

    assert result.exit_code == 0, result.output
    assert "https://x.example/d/docs/a.txt" in result.output
    _, attachment, policy, config_map = calls[0]
    assert attachment.spec.display_name == "a.txt"
    assert policy.spec.template_name == "alist"
    assert json.loads(config_map.data["default"])["site"] == "https://x.example"


def test_upload(config_file, calls, tmp_path):
    source = tmp_path / "a.txt"
    source.write_bytes(b"hello")

    result = CliRunner().invoke(cli.main, ["--config", config_file, "upload", str(source)])

    assert result.exit_code == 0, result.output
    assert "Uploaded a.txt" in result.output
    _, context = calls[0]
    assert context.file.filename == "a.txt"
    assert context.file.content == b"hello"
    assert context.file.media_type == "text/plain"


def test_delete(config_file, calls):
    result = CliRunner().invoke(cli.main, ["--config", config_file, "delete", "a.txt"])

    assert result.exit_code == 0, result.output
    assert "Deleted a.txt" in result.output
    assert calls[0][1].attachment.spec.display_name == "a.txt"


def test_remote_error_exits_with_status_1(config_file, monkeypatch):
    async def failing(self, attachment, policy, config_map):
        raise RemoteOperationError("object not found", code="500")

    monkeypatch.setattr(AListAttachmentHandler, "get_permalink", failing)

    result = CliRunner().invoke(cli.main, ["--config", config_file, "link", "gone.txt"])

    assert result.exit_code == 1
    assert "object not found" in result.output


def test_missing_site(tmp_path, monkeypatch):
    monkeypatch.delenv("ALIST_SITE", raising=False)
    monkeypatch.delenv("ALIST_STORAGE_CONFIG", raising=False)
    empty = tmp_path / "empty.ini"
    empty.write_text("")

    result = CliRunner().invoke(cli.main, ["--config", str(empty), "link", "a.txt"])

    assert result.exit_code == 1
    assert "No AList site configured" in result.output


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_unreachable_site_exits_with_status_1(tmp_path, monkeypatch):
    for var in ("ALIST_SITE", "ALIST_STORAGE_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    config = tmp_path / "config.ini"
    config.write_text(
        "[alist]\n"
        f"site = http://127.0.0.1:{_closed_port()}\n"
        "username = admin\n"
        "password = secret\n"
    )

    result = CliRunner().invoke(cli.main, ["--config", str(config), "link", "a.txt"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Request to AList failed" in result.output
