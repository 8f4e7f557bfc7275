"""URL parts record and formatting."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

# encodeURIComponent leaves these unescaped in addition to letters, digits and "-_.~"
_QUERY_SAFE = "!*'()"
# RFC 3986 pchar minus the unreserved set, plus the path separator
_PATH_SAFE = "/:@!$&'()*+,;="


@dataclass
class UrlParts:
    """Pieces of a sanitized URL.

    Attributes:
        protocol: ``http`` or ``https``
        host: Allowlisted host name
        pathname: Path starting with ``/``, or empty for a bare host
        query: Query parameters in output order
    """

    protocol: str
    host: str
    pathname: str = ""
    query: dict[str, Any] = field(default_factory=dict)


def format_query_value(value: Any) -> str:
    """Format a scalar query value the way a JavaScript string conversion would."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_component(value: Any) -> str:
    """Percent-encode a value with encodeURIComponent semantics."""
    return quote(format_query_value(value), safe=_QUERY_SAFE)


def format_url(parts: UrlParts) -> str:
    """Assemble a URL string from its parts.

    Query values are percent-encoded and keep their insertion order, so the
    same parts always give the same string.

    Example:
        >>> format_url(UrlParts("https", "sec.org", "/w/api.php", {"ids": "Q1,Q2"}))
        'https://sec.org/w/api.php?ids=Q1%2CQ2'
    """
    url = f"{parts.protocol}://{parts.host}{quote(parts.pathname, safe=_PATH_SAFE)}"
    if parts.query:
        url += "?" + "&".join(
            f"{encode_component(key)}={encode_component(value)}"
            for key, value in parts.query.items()
        )
    return url
