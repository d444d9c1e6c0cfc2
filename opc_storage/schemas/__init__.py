"""Pydantic schemas."""

from opc_storage.schemas.storage import (
    Container,
    CreateContainerInput,
    CreateObjectInput,
    StorageObject,
    UpdateContainerInput,
)

__all__ = [
    "Container",
    "CreateContainerInput",
    "CreateObjectInput",
    "StorageObject",
    "UpdateContainerInput",
]
