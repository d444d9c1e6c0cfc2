"""Shared fixtures: settings and an in-memory fake of the storage service."""

import json
from dataclasses import dataclass, field

import httpx
import pytest

from opc_storage.clients.storage import StorageClient
from opc_storage.core.config import Settings

DOMAIN = "acme"
USER = "jane@example.com"
PASSWORD = "s3cret"
ENDPOINT = "https://acme.storage.oraclecloud.com/"

CONTAINER_HEADERS = ("x-container-meta-", "x-container-read", "x-container-write")
OBJECT_HEADERS = ("x-object-meta-", "content-type", "content-disposition")
REMOVE_META_PREFIX = "x-remove-container-meta-"


@pytest.fixture
def config() -> Settings:
    return Settings(
        OPC_IDENTITY_DOMAIN=DOMAIN,
        OPC_USERNAME=USER,
        OPC_PASSWORD=PASSWORD,
        OPC_ENDPOINT=ENDPOINT,
        _env_file=None,  # type: ignore[call-arg]
    )


@dataclass
class FakeStorageService:
    """Minimal Swift-style service backing httpx.MockTransport."""

    account: str = f"/v1/Storage-{DOMAIN}"
    requests: list[httpx.Request] = field(default_factory=list)
    auth_calls: int = 0
    fail_auth: bool = False
    containers: dict[str, httpx.Headers] = field(default_factory=dict)
    objects: dict[tuple[str, str], tuple[bytes, httpx.Headers]] = field(default_factory=dict)

    def issued_token(self) -> str:
        return f"token-{self.auth_calls}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/v1.0":
            return self._auth(request)
        if request.headers.get("X-Auth-Token") != self.issued_token():
            return httpx.Response(401, text="Unauthorized")
        if not path.startswith(self.account):
            return httpx.Response(404, text="Not Found")

        parts = path[len(self.account) :].strip("/").split("/", 1)
        if parts == [""]:
            return self._list([{"name": name} for name in sorted(self.containers)], request)
        if len(parts) == 1:
            return self._container(request, parts[0])
        return self._object(request, parts[0], parts[1])

    def _auth(self, request: httpx.Request) -> httpx.Response:
        if self.fail_auth:
            return httpx.Response(401, text="Invalid credentials")
        if request.headers.get("X-Storage-User") != f"/Storage-{DOMAIN}:{USER}":
            return httpx.Response(401, text="Unknown user")
        if request.headers.get("X-Storage-Pass") != PASSWORD:
            return httpx.Response(401, text="Invalid credentials")
        self.auth_calls += 1
        return httpx.Response(200, headers={"X-Auth-Token": self.issued_token()})

    def _list(self, items: list[dict], request: httpx.Request) -> httpx.Response:
        prefix = request.url.params.get("prefix")
        if prefix:
            items = [item for item in items if item["name"].startswith(prefix)]
        if not items:
            return httpx.Response(204)
        return httpx.Response(200, content=json.dumps(items).encode())

    def _container(self, request: httpx.Request, name: str) -> httpx.Response:
        if request.method == "PUT":
            self.containers[name] = httpx.Headers(_kept(request.headers, CONTAINER_HEADERS))
            return httpx.Response(201)
        if name not in self.containers:
            return httpx.Response(404, text="Not Found")
        if request.method == "HEAD":
            count = sum(1 for (c, _) in self.objects if c == name)
            used = sum(len(data) for (c, _), (data, _) in self.objects.items() if c == name)
            headers = self.containers[name].copy()
            headers["X-Container-Object-Count"] = str(count)
            headers["X-Container-Bytes-Used"] = str(used)
            return httpx.Response(204, headers=headers)
        if request.method == "POST":
            self._merge_container_meta(name, request.headers)
            return httpx.Response(204)
        if request.method == "DELETE":
            del self.containers[name]
            return httpx.Response(204)
        if request.method == "GET":
            names = sorted(obj for (c, obj) in self.objects if c == name)
            return self._list([{"name": obj} for obj in names], request)
        return httpx.Response(405)

    def _object(self, request: httpx.Request, container: str, name: str) -> httpx.Response:
        if container not in self.containers:
            return httpx.Response(404, text="Not Found")
        key = (container, name)
        if request.method == "PUT":
            headers = httpx.Headers(_kept(request.headers, OBJECT_HEADERS))
            self.objects[key] = (request.read(), headers)
            return httpx.Response(201, headers={"ETag": "abc123"})
        if key not in self.objects:
            return httpx.Response(404, text="Not Found")
        data, headers = self.objects[key]
        if request.method == "HEAD":
            headers = httpx.Headers(headers)
            headers["Content-Length"] = str(len(data))
            headers["ETag"] = "abc123"
            headers["Last-Modified"] = "Wed, 21 Oct 2015 07:28:00 GMT"
            return httpx.Response(200, headers=headers)
        if request.method == "DELETE":
            del self.objects[key]
            return httpx.Response(204)
        return httpx.Response(405)

    def _merge_container_meta(self, name: str, headers: httpx.Headers) -> None:
        # POST merges: sent headers overwrite, removals and empty values delete
        stored = self.containers[name]
        for key, value in _kept(headers, CONTAINER_HEADERS):
            if value or not key.lower().startswith("x-container-meta-"):
                stored[key] = value
            elif key in stored:
                del stored[key]
        for key, _ in _kept(headers, (REMOVE_META_PREFIX,)):
            meta_key = "X-Container-Meta-" + key[len(REMOVE_META_PREFIX) :]
            if meta_key in stored:
                del stored[meta_key]


def _kept(headers: httpx.Headers, prefixes: tuple[str, ...]) -> list[tuple[str, str]]:
    """Headers whose lowercased name starts with one of prefixes, casing preserved."""
    pairs = []
    for raw_key, raw_value in headers.raw:
        key = raw_key.decode()
        if key.lower().startswith(prefixes):
            pairs.append((key, raw_value.decode()))
    return pairs


@pytest.fixture
def service() -> FakeStorageService:
    return FakeStorageService()


@pytest.fixture
def storage_client(config: Settings, service: FakeStorageService) -> StorageClient:
    client = StorageClient(config, transport=httpx.MockTransport(service))
    yield client
    client.close()
