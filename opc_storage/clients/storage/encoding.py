"""Path and header encoding shared by the container and object clients."""

from urllib.parse import quote

import httpx


def quote_path(path: str) -> str:
    """Percent-encode each segment of a storage path.

    Names reach the service verbatim: "#", "?" and "%" are escaped, and
    "." / ".." segments are encoded so URL resolution cannot collapse them.
    The "/" separators are kept.
    """
    segments = []
    for segment in path.split("/"):
        if segment in (".", ".."):
            segments.append(segment.replace(".", "%2E"))
        else:
            segments.append(quote(segment, safe=""))
    return "/".join(segments)


def metadata_from_headers(
    headers: httpx.Headers,
    prefix: str,
    exclude: frozenset[str] = frozenset(),
) -> dict[str, str]:
    """Collect custom metadata from headers starting with prefix.

    Keys keep the casing the service sent them in. Header names listed in
    exclude (lowercase) are skipped.
    """
    lowered_prefix = prefix.lower()
    metadata = {}
    for raw_key, raw_value in headers.raw:
        key = raw_key.decode(headers.encoding)
        lowered = key.lower()
        if lowered.startswith(lowered_prefix) and lowered not in exclude:
            metadata[key[len(prefix) :]] = raw_value.decode(headers.encoding)
    return metadata
