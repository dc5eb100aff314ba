"""Tests for the delete pipeline."""

import pytest

from alist_storage import DeleteContext, UploadContext, UploadFile
from alist_storage.exceptions import RemoteOperationError


@pytest.mark.asyncio
async def test_delete_removes_remote_file(handler, alist_server, policy, config_map):
    attachment = await handler.upload(UploadContext(UploadFile("a b.png", b"x"), policy, config_map))

    result = await handler.delete(DeleteContext(attachment, policy, config_map))

    assert result is attachment
    assert alist_server.files == {}


@pytest.mark.asyncio
async def test_delete_body_names_one_file(handler, alist_server, policy, config_map):
    attachment = await handler.upload(UploadContext(UploadFile("a b.png", b"x"), policy, config_map))

    await handler.delete(DeleteContext(attachment, policy, config_map))

    assert alist_server.remove_bodies == [{"dir": "/docs", "names": ["a b.png"]}]
    assert alist_server.login_calls == 1


@pytest.mark.asyncio
async def test_delete_failure(handler, alist_server, policy, config_map):
    attachment = await handler.upload(UploadContext(UploadFile("a.txt", b"x"), policy, config_map))
    alist_server.failures["remove"] = "permission denied"

    with pytest.raises(RemoteOperationError, match="permission denied"):
        await handler.delete(DeleteContext(attachment, policy, config_map))

    assert "/docs/a.txt" in alist_server.files


@pytest.mark.asyncio
async def test_delete_uses_configured_directory(handler, alist_server, policy, make_config_map):
    config_map = make_config_map(alist_server.site, path="/")
    attachment = await handler.upload(UploadContext(UploadFile("a.txt", b"x"), policy, config_map))

    await handler.delete(DeleteContext(attachment, policy, config_map))

    assert alist_server.remove_bodies == [{"dir": "/", "names": ["a.txt"]}]
    assert alist_server.files == {}
