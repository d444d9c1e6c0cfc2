"""Object operations for the storage API."""

import logging
from email.utils import parsedate_to_datetime
from urllib.parse import urlencode

import httpx

from opc_storage.clients.storage.client import StorageClient
from opc_storage.clients.storage.containers import container_path
from opc_storage.clients.storage.encoding import metadata_from_headers, quote_path
from opc_storage.core.exceptions import RequestBuildError
from opc_storage.schemas.storage import CreateObjectInput, StorageObject

logger = logging.getLogger(__name__)

H_META_PREFIX = "X-Object-Meta-"


def _object_headers(payload: CreateObjectInput) -> dict[str, str]:
    optional = {
        "Content-Type": payload.content_type,
        "Content-Disposition": payload.content_disposition,
        "Content-Encoding": payload.content_encoding,
        "ETag": payload.etag,
        "X-Delete-At": payload.delete_at,
        "X-Delete-After": payload.delete_after,
        "X-Object-Manifest": payload.object_manifest,
    }
    headers = {key: str(value) for key, value in optional.items() if value is not None}
    for key, value in payload.metadata.items():
        headers[f"{H_META_PREFIX}{key}"] = value
    return headers


class ObjectsClient:
    """Upload, inspect, delete and list objects inside containers."""

    def __init__(self, client: StorageClient) -> None:
        self.client = client

    def _object_path(self, container: str, name: str) -> str:
        if not name:
            raise RequestBuildError(message="Object name is required")
        return f"{container_path(self.client, container)}/{quote_path(name)}"

    def create_object(self, payload: CreateObjectInput) -> StorageObject:
        """Upload an object and return its stored metadata."""
        path = self._object_path(payload.container, payload.name)
        self.client.execute_request_body("PUT", path, _object_headers(payload), payload.body)
        logger.info(f"Uploaded object: {self.client.unqualify(payload.container)}/{payload.name}")
        return self.get_object(payload.container, payload.name)

    def get_object(self, container: str, name: str) -> StorageObject:
        """Fetch an object's metadata without downloading its content.

        Raises:
            NotFoundError: If the object does not exist.
        """
        response = self.client.execute_request("HEAD", self._object_path(container, name))
        return self._object_from_headers(container, name, response.headers)

    def delete_object(self, container: str, name: str) -> None:
        """Delete an object.

        Raises:
            NotFoundError: If the object does not exist.
        """
        self.client.execute_request("DELETE", self._object_path(container, name))
        logger.info(f"Deleted object: {self.client.unqualify(container)}/{name}")

    def list_objects(self, container: str, prefix: str | None = None) -> list[str]:
        """List object names in a container, optionally filtered by prefix.

        Object names may contain "/" and are returned as stored.
        """
        params = {"format": "json"}
        if prefix:
            params["prefix"] = prefix
        path = f"{container_path(self.client, container)}?{urlencode(params)}"

        response = self.client.execute_request("GET", path)
        if response.status_code == 204 or not response.content:
            return []
        return [item["name"] for item in response.json()]

    def _object_from_headers(
        self, container: str, name: str, headers: httpx.Headers
    ) -> StorageObject:
        last_modified = None
        if raw := headers.get("Last-Modified"):
            try:
                last_modified = parsedate_to_datetime(raw)
            except (TypeError, ValueError):
                logger.warning(f"Unparseable Last-Modified header: {raw}")

        content_length = headers.get("Content-Length", "0")
        return StorageObject(
            name=name,
            container=self.client.unqualify(container),
            content_length=int(content_length) if content_length.isdigit() else 0,
            content_type=headers.get("Content-Type"),
            etag=headers.get("ETag"),
            last_modified=last_modified,
            metadata=metadata_from_headers(headers, H_META_PREFIX),
        )
