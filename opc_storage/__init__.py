"""Authenticated client for the Oracle Storage Cloud (Swift) API."""

from opc_storage.clients.storage import StorageClient, get_storage_client
from opc_storage.core.config import Settings, settings

__all__ = [
    "Settings",
    "StorageClient",
    "get_storage_client",
    "settings",
]
