"""Utility functions for identifiers, redaction, and string suggestions."""

from collections.abc import Mapping
from typing import Any

from .consts import GID_PREFIX, MAX_LOGGED_QUERY_LENGTH

SENSITIVE_KEY_MARKERS = (
    "token",
    "password",
    "secret",
    "apikey",
    "api_key",
    "authorization",
    "credential",
)


def to_gid(identifier: str | int, resource_type: str) -> str:
    """Convert a bare numeric id into a Shopify global id.

    Args:
        identifier: Bare numeric id (``"123"``) or an existing GID.
        resource_type: GraphQL type name, e.g. ``"Product"``.

    Returns:
        Fully-qualified GID. Already-qualified ids are returned unchanged.

    Examples:
        >>> to_gid("123", "Product")
        'gid://shopify/Product/123'

        >>> to_gid("gid://shopify/Order/9", "Product")
        'gid://shopify/Order/9'
    """
    identifier = str(identifier).strip()
    if identifier.startswith(GID_PREFIX):
        return identifier
    return f"{GID_PREFIX}{resource_type}/{identifier}"


def extract_numeric_id(gid: str) -> str:
    """Return the trailing numeric part of a GID; bare ids pass through.

    Examples:
        >>> extract_numeric_id("gid://shopify/Order/999")
        '999'
    """
    if gid.startswith(GID_PREFIX):
        # strip query-string suffixes such as ?inventory_item_id=...
        return gid.rsplit("/", 1)[-1].split("?", 1)[0]
    return gid


def is_valid_identifier(identifier: str) -> bool:
    """True for a bare numeric id or a ``gid://shopify/`` GID."""
    return identifier.isdigit() or (
        identifier.startswith(GID_PREFIX) and identifier.count("/") >= 4
    )


def mask_sensitive_value(value: Any) -> str:
    """Mask a secret, keeping only its first and last four characters.

    Values of eight characters or fewer are masked entirely; non-string
    values become ``[MASKED]``.
    """
    if not isinstance(value, str):
        return "[MASKED]"
    if len(value) <= 8:
        return "*" * len(value)
    return value[:4] + "*" * (len(value) - 8) + value[-4:]


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEY_MARKERS)


def sanitize_metadata(meta: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``meta`` with sensitive values masked, recursively."""
    if not meta:
        return {}

    return {
        key: _sanitize_value(value, is_sensitive_key(str(key)))
        for key, value in meta.items()
    }


def _sanitize_value(value: Any, sensitive: bool) -> Any:
    if isinstance(value, Mapping):
        return sanitize_metadata(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item, sensitive) for item in value]
    return mask_sensitive_value(value) if sensitive else value


def truncate_query(document: str, limit: int = MAX_LOGGED_QUERY_LENGTH) -> str:
    """Shorten a GraphQL document for logs and error context."""
    return document if len(document) <= limit else f"{document[:limit]}..."


def variable_keys(variables: Mapping[str, Any] | None) -> list[str]:
    """Variable names only; values may carry customer data."""
    return list(variables) if variables else []


def flatten_edges(connection: Mapping[str, Any] | None) -> list[Any]:
    """Flatten a GraphQL connection's ``edges[].node`` into a plain list."""
    if not connection:
        return []
    edges = connection.get("edges")
    if not isinstance(edges, list):
        return []
    return [edge["node"] for edge in edges if edge and "node" in edge]


def suggest_similar_strings(
    target: str,
    candidates: set[str] | list[str],
    threshold: float = 0.6,
    max_results: int = 3,
) -> list[str]:
    """Suggest similar strings using basic similarity scoring.

    Args:
        target: String to match against.
        candidates: Set or list of candidate strings.
        threshold: Minimum similarity threshold (0.0 to 1.0).
        max_results: Maximum number of suggestions to return.

    Returns:
        List of similar strings, sorted by similarity (highest first).
    """
    from difflib import SequenceMatcher

    suggestions = []
    for candidate in candidates:
        similarity = SequenceMatcher(None, target.lower(), candidate.lower()).ratio()
        if similarity >= threshold:
            suggestions.append((candidate, similarity))

    suggestions.sort(key=lambda x: x[1], reverse=True)
    return [s[0] for s in suggestions[:max_results]]
