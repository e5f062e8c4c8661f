"""
Typesense client construction.
"""

from urllib.parse import urlparse

import typesense

DEFAULT_PORTS = {"http": 8108, "https": 443}


def create_client(
    url: str,
    api_key: str,
    connection_timeout_seconds: float = 60 * 60,
) -> typesense.Client:
    """
    Create a Typesense client for a single node.

    Args:
        url: Node URL, e.g. "http://localhost:8108"
        api_key: Search-only key for queries, admin key for maintenance
        connection_timeout_seconds: Request timeout

    Returns:
        Configured Typesense client
    """
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError(f"Invalid Typesense URL: {url!r}")

    protocol = parsed.scheme or "http"
    node = {
        "host": parsed.hostname,
        "port": str(parsed.port or DEFAULT_PORTS.get(protocol, 8108)),
        "protocol": protocol,
    }
    if parsed.path and parsed.path != "/":
        node["path"] = parsed.path.rstrip("/")

    return typesense.Client(
        {
            "nodes": [node],
            "api_key": api_key,
            "connection_timeout_seconds": connection_timeout_seconds,
        }
    )
