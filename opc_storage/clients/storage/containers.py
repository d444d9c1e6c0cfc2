"""Container operations for the storage API."""

import logging
from urllib.parse import urlencode

import httpx

from opc_storage.clients.storage.client import API_VERSION, StorageClient
from opc_storage.clients.storage.encoding import metadata_from_headers, quote_path
from opc_storage.core.exceptions import RequestBuildError
from opc_storage.schemas.storage import (
    Container,
    CreateContainerInput,
    UpdateContainerInput,
)

logger = logging.getLogger(__name__)

H_READ_ACL = "X-Container-Read"
H_WRITE_ACL = "X-Container-Write"
H_PRIMARY_KEY = "X-Container-Meta-Temp-URL-Key"
H_SECONDARY_KEY = "X-Container-Meta-Temp-URL-Key-2"
H_ALLOWED_ORIGINS = "X-Container-Meta-Access-Control-Allow-Origin"
H_MAX_AGE = "X-Container-Meta-Access-Control-Max-Age"
H_OBJECT_COUNT = "X-Container-Object-Count"
H_BYTES_USED = "X-Container-Bytes-Used"
H_META_PREFIX = "X-Container-Meta-"
H_REMOVE_META_PREFIX = "X-Remove-Container-Meta-"

_RESERVED_META = frozenset(
    h.lower() for h in (H_PRIMARY_KEY, H_SECONDARY_KEY, H_ALLOWED_ORIGINS, H_MAX_AGE)
)


def container_path(client: StorageClient, name: str) -> str:
    """Return the encoded, qualified request path for a container.

    Raises:
        RequestBuildError: If a bare name is empty, a dot segment, or contains "/".
    """
    if not name:
        raise RequestBuildError(message="Container name is required")

    qualified = client.qualify(name)
    if qualified != name and ("/" in name or name in (".", "..")):
        raise RequestBuildError(
            message=f"Invalid container name: {name!r}",
            details={"name": name},
        )
    return quote_path(qualified)


def _container_headers(payload: CreateContainerInput) -> dict[str, str]:
    # ACL headers are always sent so an update can clear them
    headers = {
        H_READ_ACL: ",".join(payload.read_acls),
        H_WRITE_ACL: ",".join(payload.write_acls),
    }
    if payload.primary_key:
        headers[H_PRIMARY_KEY] = payload.primary_key
    if payload.secondary_key:
        headers[H_SECONDARY_KEY] = payload.secondary_key
    if payload.allowed_origins:
        headers[H_ALLOWED_ORIGINS] = " ".join(payload.allowed_origins)
    if payload.max_age is not None:
        headers[H_MAX_AGE] = str(payload.max_age)
    for key, value in payload.metadata.items():
        headers[f"{H_META_PREFIX}{key}"] = value
    return headers


def _split(value: str | None, sep: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(sep) if part.strip()]


def _int_header(headers: httpx.Headers, name: str) -> int | None:
    value = headers.get(name)
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


class ContainersClient:
    """Create, read, update, delete and list storage containers."""

    def __init__(self, client: StorageClient) -> None:
        self.client = client

    def create_container(self, payload: CreateContainerInput) -> Container:
        """Create a container and return it as stored by the service."""
        path = container_path(self.client, payload.name)
        self.client.execute_request("PUT", path, _container_headers(payload))
        logger.info(f"Created container: {self.client.unqualify(payload.name)}")
        return self.get_container(payload.name)

    def get_container(self, name: str) -> Container:
        """Fetch a container's ACLs, keys, CORS settings and usage.

        Raises:
            NotFoundError: If the container does not exist.
        """
        response = self.client.execute_request("HEAD", container_path(self.client, name))
        return self._container_from_headers(name, response.headers)

    def update_container(self, payload: UpdateContainerInput) -> Container:
        """Update a container's ACLs, keys, CORS settings and metadata.

        ACLs are replaced. Other settings are only changed when given, and
        metadata keys not sent are kept unless listed in remove_metadata.
        """
        path = container_path(self.client, payload.name)
        headers = _container_headers(payload)
        for key in payload.remove_metadata:
            headers[f"{H_REMOVE_META_PREFIX}{key}"] = "x"
        self.client.execute_request("POST", path, headers)
        return self.get_container(payload.name)

    def delete_container(self, name: str) -> None:
        """Delete an empty container.

        Raises:
            NotFoundError: If the container does not exist.
        """
        self.client.execute_request("DELETE", container_path(self.client, name))
        logger.info(f"Deleted container: {self.client.unqualify(name)}")

    def list_containers(self, prefix: str | None = None) -> list[str]:
        """List container names in the account, optionally filtered by prefix."""
        params = {"format": "json"}
        if prefix:
            params["prefix"] = prefix
        path = f"{API_VERSION}{self.client.get_account()}?{urlencode(params)}"

        response = self.client.execute_request("GET", path)
        if response.status_code == 204 or not response.content:
            return []

        names = [item["name"] for item in response.json()]
        self.client.unqualify_all(names)
        return names

    def _container_from_headers(self, name: str, headers: httpx.Headers) -> Container:
        return Container(
            name=self.client.unqualify(name),
            read_acls=_split(headers.get(H_READ_ACL), ","),
            write_acls=_split(headers.get(H_WRITE_ACL), ","),
            primary_key=headers.get(H_PRIMARY_KEY),
            secondary_key=headers.get(H_SECONDARY_KEY),
            allowed_origins=_split(headers.get(H_ALLOWED_ORIGINS), None),
            max_age=_int_header(headers, H_MAX_AGE),
            object_count=_int_header(headers, H_OBJECT_COUNT) or 0,
            bytes_used=_int_header(headers, H_BYTES_USED) or 0,
            metadata=metadata_from_headers(headers, H_META_PREFIX, _RESERVED_META),
        )
