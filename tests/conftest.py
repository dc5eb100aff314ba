"""Shared fixtures: an in-process fake AList server and handler helpers."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import unquote

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from alist_storage import (
    AListAttachmentHandler,
    ConfigMap,
    InMemorySecretStore,
    Policy,
    PolicySpec,
    Secret,
)

USERNAME = "admin"
PASSWORD = "secret"
SECRET_NAME = "alist-secret"


class FakeAList:
    """Minimal AList server keeping files in memory.

    Responses follow AList: HTTP 200 with a numeric ``code`` in the body.
    """

    def __init__(self) -> None:
        self.site = ""
        self.files: dict[str, bytes] = {}
        self.tokens: set[str] = set()
        self.login_calls = 0
        self.requests: list[tuple[str, str]] = []
        self.put_headers: list[dict[str, str]] = []
        self.get_bodies: list[dict[str, Any]] = []
        self.remove_bodies: list[dict[str, Any]] = []
        # endpoint name -> message returned with a failure code
        self.failures: dict[str, str] = {}
        self.http_status = 200
        self.size_override: int | None = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/auth/login", self.login)
        app.router.add_put("/api/fs/put", self.put)
        app.router.add_post("/api/fs/get", self.get)
        app.router.add_post("/api/fs/remove", self.remove)
        return app

    def envelope(self, code: int = 200, message: str = "success", data: Any = None):
        return web.json_response(
            {"code": code, "message": message, "data": data}, status=self.http_status
        )

    def _record(self, request: web.Request) -> None:
        self.requests.append((request.method, request.path))

    def _authorized(self, request: web.Request) -> bool:
        return request.headers.get("Authorization") in self.tokens

    async def login(self, request: web.Request) -> web.Response:
        self._record(request)
        self.login_calls += 1
        body = await request.json()
        if body.get("username") != USERNAME or body.get("password") != PASSWORD:
            return self.envelope(400, "password is incorrect")
        token = f"token-{self.login_calls}"
        self.tokens.add(token)
        return self.envelope(data={"token": token})

    async def put(self, request: web.Request) -> web.Response:
        self._record(request)
        self.put_headers.append(dict(request.headers))
        content = await request.read()
        if not self._authorized(request):
            return self.envelope(401, "token is invalidated")
        if "put" in self.failures:
            return self.envelope(500, self.failures["put"])
        self.files[unquote(request.headers["File-Path"])] = content
        return self.envelope()

    async def get(self, request: web.Request) -> web.Response:
        self._record(request)
        body = await request.json()
        self.get_bodies.append(body)
        if not self._authorized(request):
            return self.envelope(401, "token is invalidated")
        if "get" in self.failures:
            return self.envelope(500, self.failures["get"])
        path = body["path"]
        if path not in self.files:
            return self.envelope(500, "object not found")
        return self.envelope(data={
            "name": path.rsplit("/", 1)[-1],
            "size": self.size_override if self.size_override is not None else len(self.files[path]),
            "is_dir": False,
            "modified": "2024-07-03T10:00:00Z",
            "sign": "",
            "raw_url": f"{self.site}/p{path}",
        })

    async def remove(self, request: web.Request) -> web.Response:
        self._record(request)
        body = await request.json()
        self.remove_bodies.append(body)
        if not self._authorized(request):
            return self.envelope(401, "token is invalidated")
        if "remove" in self.failures:
            return self.envelope(500, self.failures["remove"])
        for name in body["names"]:
            self.files.pop(f"{body['dir'].rstrip('/')}/{name}", None)
        return self.envelope()


def make_config_map(site: str, path: str = "/docs", **extra: Any) -> ConfigMap:
    settings = {"site": site, "path": path, "secretName": SECRET_NAME, **extra}
    return ConfigMap(name="alist-settings", data={"default": json.dumps(settings)})


def make_policy(template_name: str | None = "alist") -> Policy:
    return Policy(name="alist-policy", spec=PolicySpec(template_name=template_name))


@pytest_asyncio.fixture
async def alist_server():
    fake = FakeAList()
    server = TestServer(fake.app())
    await server.start_server()
    fake.site = f"http://{server.host}:{server.port}"
    try:
        yield fake
    finally:
        await server.close()


@pytest.fixture
def secret_store() -> InMemorySecretStore:
    return InMemorySecretStore({
        SECRET_NAME: Secret(
            name=SECRET_NAME,
            string_data={"username": USERNAME, "password": PASSWORD},
        )
    })


@pytest_asyncio.fixture
async def handler(secret_store):
    handler = AListAttachmentHandler(secret_store)
    try:
        yield handler
    finally:
        await handler.close()


@pytest.fixture
def config_map(alist_server) -> ConfigMap:
    return make_config_map(alist_server.site)


@pytest.fixture
def policy() -> Policy:
    return make_policy()


@pytest.fixture(name="make_config_map")
def make_config_map_fixture():
    return make_config_map


@pytest.fixture(name="make_policy")
def make_policy_fixture():
    return make_policy
