"""Generic API client for Oracle Cloud REST endpoints.

Wraps a synchronous httpx.Client with the identity fields, request building,
retrying execution and debug logging that resource clients build on.
Request bodies are sent as-is; nothing is marshalled to JSON here.
"""

import logging
import re
from typing import Any

import httpx

from opc_storage.core.config import Settings
from opc_storage.core.exceptions import (
    ClientInitError,
    NotFoundError,
    RequestBuildError,
    RequestExecError,
)

logger = logging.getLogger(__name__)

# RFC 7230 token characters
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# Extension key holding a seekable request body so retries can rewind it
_BODY_EXTENSION = "opc_body"


class ApiClient:
    """Synchronous HTTP client bound to one identity domain and endpoint.

    Attributes:
        identity_domain: Identity domain the credentials belong to.
        user_name: Account user name.
        password: Account password.
        endpoint: Base URL that request paths are resolved against.
        max_retries: Total attempts per request (at least 1).
        debug: Whether debug_log_string emits anything.
    """

    def __init__(
        self,
        config: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client from configuration.

        Args:
            config: Settings carrying identity, endpoint and transport options.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).

        Raises:
            ClientInitError: If a required field is missing or the endpoint is invalid.
        """
        missing = [
            field
            for field in ("OPC_IDENTITY_DOMAIN", "OPC_USERNAME", "OPC_PASSWORD", "OPC_ENDPOINT")
            if not getattr(config, field)
        ]
        if missing:
            raise ClientInitError(
                message=f"Missing required configuration: {', '.join(missing)}",
                details={"missing": missing},
            )

        self.identity_domain: str = config.OPC_IDENTITY_DOMAIN
        self.user_name: str = config.OPC_USERNAME
        self.password: str = config.OPC_PASSWORD
        self.endpoint = self._parse_endpoint(config.OPC_ENDPOINT)
        self.max_retries = max(1, config.OPC_MAX_RETRIES)
        self.debug = config.DEBUG

        self._http = httpx.Client(timeout=config.OPC_HTTP_TIMEOUT, transport=transport)

    @staticmethod
    def _parse_endpoint(raw: str) -> httpx.URL:
        try:
            endpoint = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError) as e:
            raise ClientInitError(
                message=f"Invalid OPC_ENDPOINT: {raw}",
                details={"endpoint": raw},
            ) from e

        if endpoint.scheme not in ("http", "https") or not endpoint.host:
            raise ClientInitError(
                message=f"OPC_ENDPOINT must be an absolute http(s) URL: {raw}",
                details={"endpoint": raw},
            )

        # Relative paths resolve under the endpoint path, not beside it
        if not endpoint.path.endswith("/"):
            endpoint = endpoint.copy_with(path=endpoint.path + "/")
        return endpoint

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def format_url(self, path: str) -> httpx.URL:
        """Resolve a request path against the endpoint."""
        return self.endpoint.join(path)

    def build_non_json_request(
        self,
        method: str,
        path: str,
        body: Any = None,
    ) -> httpx.Request:
        """Build a request whose body is sent verbatim.

        Args:
            method: HTTP method.
            path: Path resolved against the endpoint (may carry a query string).
            body: None, bytes, str, or a readable binary file.

        Returns:
            The unsent request.

        Raises:
            RequestBuildError: If the method, path or body is unusable.
        """
        if not method or not _METHOD_RE.fullmatch(method):
            raise RequestBuildError(
                message=f"Invalid HTTP method: {method!r}",
                details={"method": method},
            )

        try:
            url = self.format_url(path)
            request = httpx.Request(method, url, content=body)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestBuildError(
                message=f"Could not build {method} request for {path!r}: {e}",
                details={"method": method, "path": path},
            ) from e

        if hasattr(body, "seek") and hasattr(body, "tell"):
            request.extensions[_BODY_EXTENSION] = (body, body.tell())
        return request

    def execute_request(self, request: httpx.Request) -> httpx.Response:
        """Send a request, retrying non-2xx responses up to max_retries attempts.

        Transport errors are not retried.

        Returns:
            The successful response with its body read.

        Raises:
            NotFoundError: If the final attempt returned 404.
            RequestExecError: On transport failure or any other non-2xx response.
        """
        status_code = 0
        error_body = ""

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._http.send(request)
            except httpx.TimeoutException as e:
                raise RequestExecError(
                    message=f"Storage request timed out: {request.method} {request.url}",
                    details={"url": str(request.url), "timeout": self._http.timeout.read},
                ) from e
            except httpx.RequestError as e:
                raise RequestExecError(
                    message=f"Storage connection error: {e}",
                    details={"url": str(request.url), "error_type": type(e).__name__},
                ) from e

            if response.is_success:
                return response

            status_code = response.status_code
            error_body = response.text
            self.debug_log_string(f"Encountered HTTP ({status_code}) Error: {error_body}")
            self.debug_log_string(f"{self.max_retries - attempt}/{self.max_retries} retries left")
            self._rewind_body(request)

        error_cls = NotFoundError if status_code == 404 else RequestExecError
        raise error_cls(
            message=f"Storage API error: {status_code} - {error_body}",
            api_status_code=status_code,
            details={"url": str(request.url), "response": error_body},
        )

    @staticmethod
    def _rewind_body(request: httpx.Request) -> None:
        saved = request.extensions.get(_BODY_EXTENSION)
        if saved is not None:
            body, position = saved
            body.seek(position)

    def debug_log_string(self, message: str) -> None:
        """Log a debug line when debug output is enabled."""
        if not self.debug:
            return
        logger.debug(message)
