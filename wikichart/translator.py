"""Descriptor to URL translation.

Turns a typed descriptor into the parts of a concrete URL on an allowlisted
host. This is the security boundary between an untrusted graph
specification and the network: every host is checked against the allowlist
before any URL is produced, and paths are only ever built from validated
input.

Public Interface:
    - DescriptorTranslator: Validates descriptors and builds URL parts
    - TranslatedRequest: URL parts plus the transport hints for one request
    - RequestSideEffects: CORS flag and extra headers for the transport

Example:
    >>> translator = DescriptorTranslator(allowlist, is_trusted=False)
    >>> request = translator.translate({"type": "wikiraw", "title": "MyPage"}, "en.wikipedia.org")
    >>> request.url
    'https://en.wikipedia.org/w/api.php?format=json&formatversion=2&action=query&...'
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from wikichart.allowlist import HostAllowlist
from wikichart.descriptors import (
    GenericDescriptor,
    GeoShapeDescriptor,
    JsonDataDescriptor,
    MapSnapshotDescriptor,
    SparqlDescriptor,
    WikiApiDescriptor,
    WikiFileDescriptor,
    WikiRawDescriptor,
    WikiRawUploadDescriptor,
    WikiRestDescriptor,
    parse_descriptor,
)
from wikichart.errors import (
    HostNotAllowlisted,
    ParameterInvalid,
    ParameterMissing,
    ParameterNotNumeric,
    ParameterOutOfRange,
    ProtocolDisabled,
    UnknownProtocol,
    UntrustedProtocolForbidden,
)
from wikichart.urls import UrlParts, format_query_value, format_url

logger = logging.getLogger(__name__)

INTEGER_RE = re.compile(r"^-?[0-9]+$")
DECIMAL_RE = re.compile(r"^-?[0-9]+\.?[0-9]*$")
TITLE_RE = re.compile(r"^[^|\x1f]+$")
TABULAR_TITLE_RE = re.compile(r"^[^|\x1f]+\.tab$")
MAP_TITLE_RE = re.compile(r"^[^|\x1f]+\.map$")
WIKIDATA_ID_RE = re.compile(r"^Q[1-9][0-9]{0,15}$")
NAME_RE = re.compile(r"^[-_0-9a-zA-Z]+$")

MAX_GEOSHAPE_IDS = 1000
SPARQL_ACCEPT = "application/sparql-results+json"

_LITERAL_TYPES = (bool, int, float, str)


@dataclass
class RequestSideEffects:
    """Hints for the transport that do not belong in the URL.

    Attributes:
        add_cors_origin: The target is a wiki API that needs CORS origin handling
        headers: Extra request headers
    """

    add_cors_origin: bool = False
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class TranslatedRequest:
    """Result of translating one descriptor."""

    protocol: str
    url_parts: UrlParts
    side_effects: RequestSideEffects = field(default_factory=RequestSideEffects)

    @property
    def url(self) -> str:
        return format_url(self.url_parts)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_number(
    protocol: str, name: str, value, minimum: float, maximum: float, is_float: bool = False
) -> None:
    """Check that a value looks like a number and lies within a range.

    Raises:
        ParameterMissing: If the value is not set
        ParameterNotNumeric: If it does not match the integer/decimal pattern
        ParameterOutOfRange: If it is outside ``[minimum, maximum]``
    """
    if value is None:
        raise ParameterMissing(protocol, name)
    if not (_is_number(value) or isinstance(value, str)):
        raise ParameterNotNumeric(protocol, name)

    text = format_query_value(value)
    if not (DECIMAL_RE if is_float else INTEGER_RE).match(text):
        raise ParameterNotNumeric(protocol, name)

    try:
        number = float(text) if is_float else int(text)
    except ValueError as e:
        # Digit strings too long for int()
        raise ParameterOutOfRange(protocol, name) from e
    if number < minimum or number > maximum:
        raise ParameterOutOfRange(protocol, name)


def _validate_title(protocol: str, title, pattern: re.Pattern = TITLE_RE, hint: str = "") -> str:
    if title is None or title == "":
        raise ParameterMissing(protocol, "title")
    if not isinstance(title, str) or not pattern.match(title):
        raise ParameterInvalid(
            protocol, "title", f"is invalid: {title!r}, can't contain pipe symbol{hint}"
        )
    return title


def _has_parent_segment(path: str) -> bool:
    return ".." in path.split("/")


class DescriptorTranslator:
    """Validates descriptors and builds URL parts on allowlisted hosts.

    Args:
        allowlist: Host allowlist shared by all protocols
        is_trusted: Allow raw http/https access (trusted graphs only)
        language_code: Default ``uselang`` for tabular and map data

    Example:
        >>> translator = DescriptorTranslator(HostAllowlist(domains), language_code="en")
        >>> translator.translate({"type": "tabular", "title": "Data.tab"}, "sec.org").url
        'https://sec.org/w/api.php?format=json&formatversion=2&action=jsondata&title=Data.tab&uselang=en'
    """

    def __init__(
        self,
        allowlist: HostAllowlist,
        is_trusted: bool = False,
        language_code: str | None = None,
    ):
        self.allowlist = allowlist
        self.is_trusted = is_trusted
        self.language_code = language_code
        self._builders = {
            GenericDescriptor: self._build_generic,
            WikiApiDescriptor: self._build_wikiapi,
            WikiRestDescriptor: self._build_wikirest,
            WikiRawDescriptor: self._build_wikiraw,
            JsonDataDescriptor: self._build_jsondata,
            WikiFileDescriptor: self._build_wikifile,
            WikiRawUploadDescriptor: self._build_wikirawupload,
            SparqlDescriptor: self._build_sparql,
            GeoShapeDescriptor: self._build_geoshape,
            MapSnapshotDescriptor: self._build_mapsnapshot,
        }

    def translate(self, descriptor, default_domain: str | None = None) -> TranslatedRequest:
        """Validate a descriptor and build its URL parts.

        Args:
            descriptor: Typed descriptor or raw mapping from the graph spec
            default_domain: Host used when the descriptor does not name one

        Returns:
            TranslatedRequest with the URL parts and transport hints

        Raises:
            GraphDataError: Any validation failure; nothing is fetched
        """
        descriptor = parse_descriptor(descriptor)
        builder = self._builders.get(type(descriptor))
        if builder is None:
            raise UnknownProtocol(descriptor.protocol)

        host = descriptor.host if descriptor.host is not None else default_domain
        resolved = self.allowlist.sanitize_host(host)
        if resolved is None:
            raise HostNotAllowlisted(f"URL hostname is not whitelisted: {host}")

        request = TranslatedRequest(
            protocol=descriptor.protocol or resolved.protocol,
            url_parts=UrlParts(protocol=resolved.protocol, host=resolved.host),
        )
        builder(descriptor, request)
        logger.debug(f"Sanitized {request.protocol} request: {request.url}")
        return request

    def _resolve_service_host(self, protocol: str, parts: UrlParts, override: str | None = None):
        """Point the URL at the fixed backend configured for a service protocol.

        The host is always the first configured domain for the protocol,
        whatever host the descriptor asked for.
        """
        service = override or protocol
        host = self.allowlist.first_domain(service)
        if host is None:
            raise ProtocolDisabled(f"{service}: protocol is disabled")

        resolved = self.allowlist.sanitize_host(host)
        if resolved is None or not self.allowlist.test_host(service, resolved.host):
            raise HostNotAllowlisted(f"{protocol}: service host is not whitelisted: {host}")

        parts.host = resolved.host
        parts.protocol = resolved.protocol

    def _build_generic(self, descriptor: GenericDescriptor, request: TranslatedRequest):
        if not self.is_trusted:
            raise UntrustedProtocolForbidden(
                "HTTP and HTTPS protocols are not supported for untrusted graphs. "
                "Use wikiraw, wikiapi, wikirest, wikifile and other protocols."
            )

        parts = request.url_parts
        path = descriptor.path or ""
        if not isinstance(path, str):
            raise ParameterInvalid(request.protocol, "path", "should be a string")

        if descriptor.protocol:
            # An explicit scheme is kept even if the host also allows https
            parts.protocol = descriptor.protocol
            path = path or "/"
        if path and not path.startswith("/"):
            path = "/" + path
        parts.pathname = path

        if descriptor.query is not None:
            if not isinstance(descriptor.query, Mapping):
                raise ParameterInvalid(request.protocol, "query", "should be an object")
            parts.query = dict(descriptor.query)

    def _build_wikiapi(self, descriptor: WikiApiDescriptor, request: TranslatedRequest):
        params = descriptor.params
        if params is None:
            raise ParameterMissing("wikiapi", "params")
        if not isinstance(params, Mapping):
            raise ParameterInvalid("wikiapi", "params", "should be an object")

        query = {}
        for key, value in params.items():
            if not isinstance(value, _LITERAL_TYPES):
                raise ParameterInvalid(
                    "wikiapi", "params", 'value should be a literal (e.g. true, 123, "foo")'
                )
            if value is True:
                query[key] = 1
            elif value is not False:
                query[key] = value

        query.update(format="json", formatversion="2")
        request.url_parts.query = query
        request.url_parts.pathname = "/w/api.php"
        request.side_effects.add_cors_origin = True

    def _build_wikirest(self, descriptor: WikiRestDescriptor, request: TranslatedRequest):
        path = descriptor.path
        if path is None or path == "":
            raise ParameterMissing("wikirest", "path")
        if not isinstance(path, str):
            raise ParameterInvalid("wikirest", "path", "should be a non-empty string")

        if not path.startswith("/api/"):
            path = ("/api" if path.startswith("/") else "/api/") + path
        if not path.startswith("/api/") or _has_parent_segment(path):
            raise ParameterInvalid("wikirest", "path", "must begin with the /api/ prefix")
        request.url_parts.pathname = path

    def _build_wikiraw(self, descriptor: WikiRawDescriptor, request: TranslatedRequest):
        title = _validate_title("wikiraw", descriptor.title)
        request.url_parts.query = {
            "format": "json",
            "formatversion": "2",
            "action": "query",
            "prop": "revisions",
            "rvprop": "content",
            "titles": title,
        }
        request.url_parts.pathname = "/w/api.php"
        request.side_effects.add_cors_origin = True

    def _build_jsondata(self, descriptor: JsonDataDescriptor, request: TranslatedRequest):
        if descriptor.protocol == "map":
            title = _validate_title("map", descriptor.title, MAP_TITLE_RE, ", must end with .map")
        else:
            title = _validate_title(
                "tabular", descriptor.title, TABULAR_TITLE_RE, ", must end with .tab"
            )

        query = {
            "format": "json",
            "formatversion": "2",
            "action": "jsondata",
            "title": title,
        }
        lang = descriptor.lang or self.language_code
        if lang:
            query["uselang"] = lang

        request.url_parts.query = query
        request.url_parts.pathname = "/w/api.php"
        request.side_effects.add_cors_origin = True

    def _build_wikifile(self, descriptor: WikiFileDescriptor, request: TranslatedRequest):
        title = _validate_title("wikifile", descriptor.title)
        if _has_parent_segment(title):
            raise ParameterInvalid("wikifile", "title", f"is invalid: {title!r}")
        parts = request.url_parts
        parts.pathname = "/wiki/Special:Redirect/file/" + title
        if descriptor.width:
            validate_number("wikifile", "width", descriptor.width, 0, float("inf"))
            parts.query["width"] = descriptor.width
        if descriptor.height:
            validate_number("wikifile", "height", descriptor.height, 0, float("inf"))
            parts.query["height"] = descriptor.height

    def _build_wikirawupload(self, descriptor: WikiRawUploadDescriptor, request: TranslatedRequest):
        protocol = "wikirawupload"
        if not self.allowlist.first_domain(protocol):
            raise ProtocolDisabled(f"{protocol}: protocol is disabled")

        parts = request.url_parts
        if descriptor.host is None:
            self._resolve_service_host(protocol, parts)
        elif not self.allowlist.test_host(protocol, parts.host):
            raise HostNotAllowlisted(
                f"{protocol}: URL must either be relative, or use one of the allowed hosts: "
                f"{descriptor.host}"
            )

        path = descriptor.path
        if path is None or path == "" or path == "/":
            raise ParameterMissing(protocol, "path")
        if not isinstance(path, str) or _has_parent_segment(path):
            raise ParameterInvalid(protocol, "path", "is invalid")
        parts.pathname = path if path.startswith("/") else "/" + path
        parts.query = {}

    def _build_sparql(self, descriptor: SparqlDescriptor, request: TranslatedRequest):
        self._resolve_service_host("wikidatasparql", request.url_parts)
        if descriptor.query is None or descriptor.query == "":
            raise ParameterMissing("wikidatasparql", "query")
        if not isinstance(descriptor.query, str):
            raise ParameterInvalid("wikidatasparql", "query", "should be a string")

        request.url_parts.query = {"query": descriptor.query}
        request.url_parts.pathname = "/bigdata/namespace/wdq/sparql"
        request.side_effects.headers["Accept"] = SPARQL_ACCEPT

    def _build_geoshape(self, descriptor: GeoShapeDescriptor, request: TranslatedRequest):
        protocol = descriptor.protocol
        self._resolve_service_host(protocol, request.url_parts, "geoshape")

        has_ids = descriptor.ids not in (None, "", [])
        has_query = descriptor.query not in (None, "")
        if not has_ids and not has_query:
            raise ParameterMissing(protocol, "ids", "or query is not set")
        if has_ids and has_query:
            raise ParameterInvalid(protocol, "ids", "cannot be combined with query")

        if has_ids:
            ids = descriptor.ids
            if isinstance(ids, str):
                ids = [ids]
            elif not isinstance(ids, (list, tuple)) or len(ids) > MAX_GEOSHAPE_IDS:
                raise ParameterInvalid(
                    protocol,
                    "ids",
                    f"must be a non-empty list of Wikidata IDs with no more than "
                    f"{MAX_GEOSHAPE_IDS} items",
                )
            for value in ids:
                if not isinstance(value, str) or not WIKIDATA_ID_RE.match(value):
                    raise ParameterInvalid(protocol, "ids", f"has invalid Wikidata ID {value!r}")
            request.url_parts.query = {"ids": ",".join(ids)}
        else:
            if not isinstance(descriptor.query, str):
                raise ParameterInvalid(protocol, "query", "should be a non-empty string")
            request.url_parts.query = {"query": descriptor.query}

        request.url_parts.pathname = "/" + protocol

    def _build_mapsnapshot(self, descriptor: MapSnapshotDescriptor, request: TranslatedRequest):
        protocol = "mapsnapshot"
        validate_number(protocol, "width", descriptor.width, 1, 4096)
        validate_number(protocol, "height", descriptor.height, 1, 4096)
        validate_number(protocol, "zoom", descriptor.zoom, 0, 22)
        validate_number(protocol, "lat", descriptor.lat, -90, 90, is_float=True)
        validate_number(protocol, "lon", descriptor.lon, -180, 180, is_float=True)

        for name in ("style", "lang"):
            value = getattr(descriptor, name)
            if value and (not isinstance(value, str) or not NAME_RE.match(value)):
                raise ParameterInvalid(
                    protocol, name, "must be letters/numbers/dash/underscores only"
                )

        # Snapshots are served by the same backend as geoshapes
        self._resolve_service_host(protocol, request.url_parts, "geoshape")

        style = descriptor.style or "osm-intl"
        zoom, lat, lon, width, height = (
            format_query_value(getattr(descriptor, name))
            for name in ("zoom", "lat", "lon", "width", "height")
        )
        request.url_parts.pathname = f"/img/{style},{zoom},{lat},{lon},{width}x{height}@2x.png"
        if descriptor.lang:
            request.url_parts.query["lang"] = descriptor.lang
