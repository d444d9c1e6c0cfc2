"""Storage API clients.

Provides the authenticated StorageClient and the container and object
resource clients built on top of it.
"""

from opc_storage.clients.storage.client import (
    API_VERSION,
    AUTH_HEADER,
    TOKEN_REFRESH_AFTER,
    AuthToken,
    StorageClient,
    get_storage_client,
)
from opc_storage.clients.storage.containers import ContainersClient
from opc_storage.clients.storage.objects import ObjectsClient

__all__ = [
    "API_VERSION",
    "AUTH_HEADER",
    "TOKEN_REFRESH_AFTER",
    "AuthToken",
    "ContainersClient",
    "ObjectsClient",
    "StorageClient",
    "get_storage_client",
]
