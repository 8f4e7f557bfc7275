"""Safe data loading for wiki-hosted graphs.

This package validates the data source descriptors found in (possibly
untrusted) graph specifications, turns them into URLs on allowlisted hosts,
fetches them and reshapes the responses for the charting library.
"""

from wikichart.allowlist import DomainMatcher, HostAllowlist, ResolvedHost
from wikichart.config import LoaderConfig, LoaderSettings, load_config
from wikichart.decoder import ResponseDecoder
from wikichart.descriptors import PROTOCOL_TAGS, parse_descriptor
from wikichart.errors import (
    ApiError,
    ContentUnavailable,
    DescriptorError,
    GraphDataError,
    HostNotAllowlisted,
    MalformedSparqlResult,
    ParameterInvalid,
    ParameterMissing,
    ParameterNotNumeric,
    ParameterOutOfRange,
    ProtocolDisabled,
    TransportFailure,
    UnknownProtocol,
    UntrustedProtocolForbidden,
)
from wikichart.links import LinkSanitizer
from wikichart.loader import GraphDataLoader, RequestsTransport, Transport
from wikichart.translator import DescriptorTranslator, RequestSideEffects, TranslatedRequest
from wikichart.urls import UrlParts, format_url
from wikichart.wikidata_values import parse_wikidata_value

__all__ = [
    # Pipeline
    "GraphDataLoader",
    "RequestsTransport",
    "Transport",
    # Configuration
    "LoaderConfig",
    "LoaderSettings",
    "load_config",
    # Allowlist
    "DomainMatcher",
    "HostAllowlist",
    "ResolvedHost",
    # Translation
    "DescriptorTranslator",
    "TranslatedRequest",
    "RequestSideEffects",
    "LinkSanitizer",
    "parse_descriptor",
    "PROTOCOL_TAGS",
    "UrlParts",
    "format_url",
    # Decoding
    "ResponseDecoder",
    "parse_wikidata_value",
    # Errors
    "GraphDataError",
    "DescriptorError",
    "ParameterMissing",
    "ParameterInvalid",
    "ParameterNotNumeric",
    "ParameterOutOfRange",
    "HostNotAllowlisted",
    "ProtocolDisabled",
    "UnknownProtocol",
    "UntrustedProtocolForbidden",
    "ApiError",
    "ContentUnavailable",
    "MalformedSparqlResult",
    "TransportFailure",
]
