"""Authenticated client for the Oracle Storage Cloud (Swift) API.

Usage:
    from opc_storage.clients.storage import StorageClient
    from opc_storage.core.config import settings

    client = StorageClient(settings)
    response = client.execute_request("GET", client.qualify("backups"))

    containers = client.containers()
    containers.list_containers()

The client authenticates on construction and re-authenticates before any
request once the held token is older than TOKEN_REFRESH_AFTER.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx

from opc_storage.clients.api_client import ApiClient
from opc_storage.core.config import Settings, settings
from opc_storage.core.exceptions import AppException, AuthError

if TYPE_CHECKING:
    from opc_storage.clients.storage.containers import ContainersClient
    from opc_storage.clients.storage.objects import ObjectsClient

logger = logging.getLogger(__name__)

STR_ACCOUNT = "/Storage-{identity_domain}"
STR_USERNAME = "/Storage-{identity_domain}:{user_name}"
STR_QUALIFIED_NAME = "{version}{account}/{name}"
API_VERSION = "v1"

AUTH_HEADER = "X-Auth-Token"
AUTH_PATH = "/auth/v1.0"

# No expiry is advertised by the service; tokens are refreshed after this age
TOKEN_REFRESH_AFTER = timedelta(minutes=25)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AuthToken:
    """An auth token together with the moment it was issued."""

    value: str
    issued_at: datetime

    def is_stale(self, now: datetime) -> bool:
        return now - self.issued_at > TOKEN_REFRESH_AFTER


class StorageClient:
    """Storage API client holding an auth token for an identity domain.

    Attributes:
        client: The generic API client used to build and send requests.
    """

    def __init__(
        self,
        config: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Build the API client and authenticate.

        Args:
            config: Settings with identity domain, credentials and endpoint.
            transport: Optional httpx transport override.

        Raises:
            ClientInitError: If the configuration is unusable.
            AuthError: If the initial authentication fails.
        """
        self.client = ApiClient(config, transport=transport)
        self._token: AuthToken | None = None
        self._token_lock = threading.Lock()

        try:
            self._get_authentication_token()
        except AuthError:
            self.client.close()
            raise

    @property
    def auth_token(self) -> str | None:
        """The current token value, or None before authentication."""
        token = self._token
        return token.value if token else None

    @property
    def token_issued(self) -> datetime | None:
        token = self._token
        return token.issued_at if token else None

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()

    def __enter__(self) -> "StorageClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # === Resources ===

    def containers(self) -> "ContainersClient":
        """Return a client for container operations sharing this token."""
        from opc_storage.clients.storage.containers import ContainersClient

        return ContainersClient(self)

    def objects(self) -> "ObjectsClient":
        """Return a client for object operations sharing this token."""
        from opc_storage.clients.storage.objects import ObjectsClient

        return ObjectsClient(self)

    # === Request execution ===

    def execute_request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute a request without a body."""
        return self.execute_request_body(method, path, headers, None)

    def execute_request_body(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        body: Any = None,
    ) -> httpx.Response:
        """Execute an authenticated request with an optional raw body.

        The body is not marshalled into JSON. If the held token is stale the
        client re-authenticates first; if that fails the request is not sent.

        Args:
            method: HTTP method.
            path: Request path, qualified or not.
            headers: Extra headers, sent with keys as given.
            body: None, bytes, or a readable, seekable binary file.

        Returns:
            The raw response.

        Raises:
            RequestBuildError: If the request cannot be built.
            AuthError: If a required token refresh fails.
            RequestExecError: On transport failure or a non-2xx response.
        """
        return self._send(method, path, headers, body, attach_token=True)

    def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None,
        body: Any,
        *,
        attach_token: bool,
    ) -> httpx.Response:
        request = self.client.build_non_json_request(method, path, body)

        debug_lines = [f"{request.method} ({request.url}) HTTP/1.1"]
        for key, value in (headers or {}).items():
            debug_lines.append(f"{key.lower()}: {value}")
            request.headers[key] = value

        # Keep credentials out of the log during authentication
        if "/auth/" not in path:
            self.client.debug_log_string("\n".join(debug_lines))

        if attach_token:
            token = self._valid_token()
            if token is not None:
                request.headers[AUTH_HEADER] = token.value

        return self.client.execute_request(request)

    def _valid_token(self) -> AuthToken | None:
        """Return the held token, refreshing it first if it has gone stale."""
        token = self._token
        if token is None or not token.is_stale(_utcnow()):
            return token

        with self._token_lock:
            # Another thread may have refreshed while we waited
            if self._token is not None and self._token.is_stale(_utcnow()):
                logger.info(f"Storage auth token older than {TOKEN_REFRESH_AFTER}, refreshing")
                self._get_authentication_token()
            return self._token

    def _get_authentication_token(self) -> None:
        """Request a new auth token and store it with its issue time.

        Raises:
            AuthError: If the auth call fails or returns no token.
        """
        headers = {
            "X-Storage-User": self.get_user_name(),
            "X-Storage-Pass": self.client.password,
        }
        try:
            response = self._send("GET", AUTH_PATH, headers, None, attach_token=False)
        except AppException as e:
            raise AuthError(
                message=f"Storage authentication failed: {e.message}",
                details={"user": self.get_user_name(), "cause": e.code, **e.details},
            ) from e

        value = response.headers.get(AUTH_HEADER)
        if not value:
            raise AuthError(
                message=f"Authentication response did not include an {AUTH_HEADER} header",
                details={"user": self.get_user_name()},
            )

        self._token = AuthToken(value=value, issued_at=_utcnow())
        logger.info(f"Storage auth token issued for {self.get_user_name()}")

    # === Names ===

    def get_user_name(self) -> str:
        return STR_USERNAME.format(
            identity_domain=self.client.identity_domain,
            user_name=self.client.user_name,
        )

    def get_account(self) -> str:
        return STR_ACCOUNT.format(identity_domain=self.client.identity_domain)

    def qualify(self, name: str) -> str:
        """Return the fully-qualified name, e.g. v1/Storage-{domain}/{name}.

        Names that are already qualified are returned unchanged.
        """
        if not name:
            return ""
        if name.startswith("/Storage-") or name.startswith(f"{API_VERSION}/"):
            return name
        return STR_QUALIFIED_NAME.format(
            version=API_VERSION,
            account=self.get_account(),
            name=name,
        )

    def unqualify(self, name: str) -> str:
        """Return the {name} part of v1/{account}/{name}."""
        if not name or "/" not in name:
            return name
        return name.rsplit("/", 1)[-1]

    def unqualify_all(self, names: list[str]) -> None:
        """Replace every name in the list with its unqualified form."""
        for i, name in enumerate(names):
            names[i] = self.unqualify(name)


# Singleton instance
_client_instance: StorageClient | None = None


def get_storage_client() -> StorageClient:
    """Get the singleton storage client configured from settings.

    Returns:
        StorageClient instance (creates and authenticates one if not exists).
    """
    global _client_instance
    if _client_instance is None:
        _client_instance = StorageClient(settings)
    return _client_instance
