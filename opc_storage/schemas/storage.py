"""Container and object schemas for storage operations."""

from datetime import datetime
from typing import Any

from pydantic import Field

from opc_storage.schemas.base import BaseSchema


class CreateContainerInput(BaseSchema):
    """Parameters for creating a storage container."""

    name: str = Field(description="Container name (qualified or bare)")
    read_acls: list[str] = Field(default_factory=list, description="Read ACL entries")
    write_acls: list[str] = Field(default_factory=list, description="Write ACL entries")
    primary_key: str | None = Field(default=None, description="Temp-URL signing key")
    secondary_key: str | None = Field(default=None, description="Second temp-URL signing key")
    allowed_origins: list[str] = Field(default_factory=list, description="CORS allowed origins")
    max_age: int | None = Field(default=None, ge=0, description="CORS preflight max age (seconds)")
    metadata: dict[str, str] = Field(default_factory=dict, description="Custom container metadata")


class UpdateContainerInput(CreateContainerInput):
    """Parameters for updating a storage container.

    ACLs are always replaced. Keys, CORS settings and metadata that are left
    unset keep their stored values; list metadata keys in remove_metadata to
    delete them.
    """

    remove_metadata: list[str] = Field(
        default_factory=list, description="Custom metadata keys to delete"
    )


class Container(BaseSchema):
    """A storage container as reported by the service."""

    name: str = Field(description="Unqualified container name")
    read_acls: list[str] = Field(default_factory=list)
    write_acls: list[str] = Field(default_factory=list)
    primary_key: str | None = None
    secondary_key: str | None = None
    allowed_origins: list[str] = Field(default_factory=list)
    max_age: int | None = None
    object_count: int = 0
    bytes_used: int = 0
    metadata: dict[str, str] = Field(default_factory=dict)


class CreateObjectInput(BaseSchema):
    """Parameters for uploading a storage object."""

    name: str = Field(description="Object name within the container")
    container: str = Field(description="Container name (qualified or bare)")
    body: Any = Field(default=None, description="bytes or a readable, seekable binary file")
    content_type: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    etag: str | None = None
    delete_at: int | None = Field(default=None, description="Unix time when the object expires")
    delete_after: int | None = Field(default=None, description="Seconds until the object expires")
    object_manifest: str | None = Field(default=None, description="Dynamic large object manifest")
    metadata: dict[str, str] = Field(default_factory=dict, description="Custom object metadata")


class StorageObject(BaseSchema):
    """A storage object as reported by the service."""

    name: str
    container: str
    content_length: int = 0
    content_type: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        """Identifier combining container and object name."""
        return f"{self.container}/{self.name}"
