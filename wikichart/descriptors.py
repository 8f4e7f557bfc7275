"""Typed data source descriptors.

A graph specification asks for data with a small mapping such as
``{"type": "wikiraw", "title": "MyPage"}``. ``parse_descriptor`` turns that
untrusted mapping into one of a closed set of frozen dataclasses, one per
protocol family. Values are kept as given; the translator validates them so
that its errors can name the protocol and field.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wikichart.errors import ParameterInvalid, UnknownProtocol


@dataclass(frozen=True)
class GenericDescriptor:
    """Plain http/https access, only allowed for trusted graphs."""

    protocol: str | None = None
    host: Any = None
    path: Any = None
    query: Any = None


@dataclass(frozen=True)
class WikiApiDescriptor:
    """Call to the wiki Action API (``/w/api.php``)."""

    host: Any = None
    params: Any = None
    protocol: str = "wikiapi"


@dataclass(frozen=True)
class WikiRestDescriptor:
    """Call to the wiki REST API under ``/api/``."""

    host: Any = None
    path: Any = None
    protocol: str = "wikirest"


@dataclass(frozen=True)
class WikiRawDescriptor:
    """Raw wikitext of a single page."""

    host: Any = None
    title: Any = None
    protocol: str = "wikiraw"


@dataclass(frozen=True)
class JsonDataDescriptor:
    """Tabular (``.tab``) or map (``.map``) dataset page."""

    protocol: str
    host: Any = None
    title: Any = None
    lang: Any = None


@dataclass(frozen=True)
class WikiFileDescriptor:
    """File or image fetched through Special:Redirect."""

    host: Any = None
    title: Any = None
    width: Any = None
    height: Any = None
    protocol: str = "wikifile"


@dataclass(frozen=True)
class WikiRawUploadDescriptor:
    """Raw content from the upload host."""

    host: Any = None
    path: Any = None
    protocol: str = "wikirawupload"


@dataclass(frozen=True)
class SparqlDescriptor:
    """Wikidata SPARQL query."""

    host: Any = None
    query: Any = None
    protocol: str = "wikidatasparql"


@dataclass(frozen=True)
class GeoShapeDescriptor:
    """Geo shapes or lines for Wikidata items."""

    protocol: str
    host: Any = None
    ids: Any = None
    query: Any = None


@dataclass(frozen=True)
class MapSnapshotDescriptor:
    """Static map image."""

    host: Any = None
    width: Any = None
    height: Any = None
    zoom: Any = None
    lat: Any = None
    lon: Any = None
    style: Any = None
    lang: Any = None
    protocol: str = "mapsnapshot"


@dataclass(frozen=True)
class WikiTitleDescriptor:
    """Link to a wiki page by title. Only valid for links."""

    host: Any = None
    path: Any = None
    protocol: str = "wikititle"


Descriptor = (
    GenericDescriptor
    | WikiApiDescriptor
    | WikiRestDescriptor
    | WikiRawDescriptor
    | JsonDataDescriptor
    | WikiFileDescriptor
    | WikiRawUploadDescriptor
    | SparqlDescriptor
    | GeoShapeDescriptor
    | MapSnapshotDescriptor
    | WikiTitleDescriptor
)

PROTOCOL_TAGS = (
    "http",
    "https",
    "wikiapi",
    "wikirest",
    "wikiraw",
    "tabular",
    "map",
    "wikifile",
    "wikirawupload",
    "wikidatasparql",
    "geoshape",
    "geoline",
    "mapsnapshot",
    "wikititle",
)


def _title(raw: Mapping) -> Any:
    """Title of a page, falling back to the path without its leading slash."""
    title = raw.get("title")
    if title is None:
        path = raw.get("path")
        if isinstance(path, str) and path.startswith("/"):
            path = path[1:]
        title = path
    return title


def parse_descriptor(raw: Mapping) -> Descriptor:
    """Build a typed descriptor from a graph specification mapping.

    Args:
        raw: Mapping with a ``type`` tag and protocol specific fields. The
            target host may be given as ``host`` or ``wiki``.

    Returns:
        The descriptor dataclass for the tag.

    Raises:
        ParameterInvalid: If ``raw`` is not a mapping
        UnknownProtocol: If the tag is not supported

    Example:
        >>> parse_descriptor({"type": "wikiraw", "title": "MyPage"})
        WikiRawDescriptor(host=None, title='MyPage', protocol='wikiraw')
    """
    if isinstance(raw, Descriptor):
        return raw
    if not isinstance(raw, Mapping):
        raise ParameterInvalid("descriptor", "uri", "must be an object")

    tag = raw.get("type") or None
    host = raw.get("host")
    if host is None:
        host = raw.get("wiki")

    if tag is None or tag in ("http", "https"):
        return GenericDescriptor(
            protocol=tag, host=host, path=raw.get("path"), query=raw.get("query")
        )
    if tag == "wikiapi":
        params = raw.get("params")
        if isinstance(params, Mapping):
            params = dict(params)
        return WikiApiDescriptor(host=host, params=params)
    if tag == "wikirest":
        return WikiRestDescriptor(host=host, path=raw.get("path"))
    if tag == "wikiraw":
        return WikiRawDescriptor(host=host, title=_title(raw))
    if tag in ("tabular", "map"):
        return JsonDataDescriptor(protocol=tag, host=host, title=_title(raw), lang=raw.get("lang"))
    if tag == "wikifile":
        return WikiFileDescriptor(
            host=host, title=_title(raw), width=raw.get("width"), height=raw.get("height")
        )
    if tag == "wikirawupload":
        return WikiRawUploadDescriptor(host=host, path=raw.get("path"))
    if tag == "wikidatasparql":
        return SparqlDescriptor(host=host, query=raw.get("query"))
    if tag in ("geoshape", "geoline"):
        return GeoShapeDescriptor(
            protocol=tag, host=host, ids=raw.get("ids"), query=raw.get("query")
        )
    if tag == "mapsnapshot":
        return MapSnapshotDescriptor(
            host=host,
            width=raw.get("width"),
            height=raw.get("height"),
            zoom=raw.get("zoom"),
            lat=raw.get("lat"),
            lon=raw.get("lon"),
            style=raw.get("style"),
            lang=raw.get("lang"),
        )
    if tag == "wikititle":
        return WikiTitleDescriptor(host=host, path=raw.get("path"))

    raise UnknownProtocol(tag)
