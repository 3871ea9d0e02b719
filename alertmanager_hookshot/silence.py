"""Alertmanager silence links."""

from typing import Any, Mapping
from urllib.parse import quote, urlencode


def matchers(labels: Mapping[str, Any]) -> str:
    """Encode every label pair as a ``matcher`` query parameter.

    Each value is the Alertmanager matcher expression ``key="value"``,
    percent-encoded as a whole. Parameters keep the label order.
    """
    return urlencode(
        [("matcher", f'{key}="{value}"') for key, value in labels.items()],
        quote_via=quote,
    )


def silence_link(labels: Mapping[str, Any], base_url: str) -> str:
    """Build the URL that opens a new silence for ``labels``.

    Args:
        labels: Alert labels, rendered in iteration order
        base_url: Alertmanager silence page, e.g. ``https://am.example.com/#/silences/new``

    Returns:
        The base URL with the matcher query appended
    """
    query = matchers(labels)
    if not query:
        return base_url
    if base_url.endswith(("?", "&")):
        return f"{base_url}{query}"
    if "?" in base_url:
        return f"{base_url}&{query}"
    return f"{base_url}?{query}"
