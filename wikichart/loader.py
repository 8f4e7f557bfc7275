"""Graph data loader

Validates a data source descriptor, fetches the sanitized URL once and
decodes the response.

Public Interface:
    - GraphDataLoader: sanitize / fetch / decode pipeline
    - RequestsTransport: Default transport built on requests
    - Transport: Protocol for caller supplied transports

Example:
    >>> loader = GraphDataLoader(load_config("wikichart.yaml"))
    >>> loader.sanitize({"type": "wikiraw", "title": "MyPage"})
    'https://en.wikipedia.org/w/api.php?format=json&formatversion=2&action=query&...'
    >>> loader.fetch_and_decode({"type": "wikiraw", "title": "MyPage"})
    'page wikitext'
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import requests

from wikichart.allowlist import HostAllowlist
from wikichart.config import LoaderConfig
from wikichart.decoder import ResponseDecoder
from wikichart.errors import TransportFailure, UntrustedProtocolForbidden
from wikichart.links import LinkSanitizer
from wikichart.translator import DescriptorTranslator, TranslatedRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Performs one GET request and returns the response body."""

    def __call__(
        self, url: str, *, headers: Mapping[str, str], add_cors_origin: bool
    ) -> str | bytes: ...


class RequestsTransport:
    """Transport built on a ``requests.Session``.

    Makes exactly one request per call; there is no retry logic. Any
    network error or non-2xx status raises TransportFailure.

    Args:
        user_agent: User-Agent header sent with every request
        timeout: Request timeout in seconds (default: 30)
        allow_redirects: Follow redirects, needed by wikifile (default: True)
        session: Existing session to reuse
    """

    USER_AGENT = "wikichart/1.0 (Graph data loader)"

    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: int = 30,
        allow_redirects: bool = True,
        session: requests.Session | None = None,
    ):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.timeout = timeout
        self.allow_redirects = allow_redirects

    def __call__(
        self, url: str, *, headers: Mapping[str, str], add_cors_origin: bool
    ) -> bytes:
        # Anonymous cross-origin access to the wiki API
        params = {"origin": "*"} if add_cors_origin else None
        try:
            response = self.session.get(
                url,
                params=params,
                headers=dict(headers),
                timeout=self.timeout,
                allow_redirects=self.allow_redirects,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportFailure(f"Request failed: {url}: {str(e)}") from e

        return response.content


class GraphDataLoader:
    """Loads data for a graph specification through a safe pipeline.

    Every request goes through the same steps: the descriptor is validated
    and translated into a URL on an allowlisted host, the URL is fetched
    exactly once, and the body is decoded for the descriptor's protocol.
    Validation errors are raised before anything is fetched. Errors from the
    transport are propagated unchanged.

    Args:
        config: Allowlist and trust configuration
        transport: Callable doing the actual fetch (default: RequestsTransport)
        logger: Single-argument sink for API warnings

    Example:
        >>> loader = GraphDataLoader(config, transport=my_transport)
        >>> rows = loader.fetch_and_decode({"type": "tabular", "title": "Data.tab"})
    """

    def __init__(
        self,
        config: LoaderConfig,
        transport: Transport | None = None,
        logger: Callable[[str], None] | None = None,
    ):
        self.config = config
        self.allowlist = HostAllowlist(config.domains, config.domain_map)
        self.translator = DescriptorTranslator(
            self.allowlist,
            is_trusted=config.is_trusted,
            language_code=config.language_code,
        )
        self.links = LinkSanitizer(self.allowlist)
        self.decoder = ResponseDecoder(logger)
        self.transport = transport or RequestsTransport(
            user_agent=config.user_agent, timeout=config.timeout
        )

    def _domain(self, default_domain: str | None) -> str | None:
        return default_domain if default_domain is not None else self.config.default_domain

    def prepare(self, descriptor: Mapping, default_domain: str | None = None) -> TranslatedRequest:
        """Validate a descriptor and build the request to make for it."""
        return self.translator.translate(descriptor, self._domain(default_domain))

    def sanitize(self, descriptor: Mapping, default_domain: str | None = None) -> str:
        """Return the sanitized URL for a descriptor.

        Raises:
            GraphDataError: If the descriptor is rejected
        """
        return self.prepare(descriptor, default_domain).url

    def sanitize_link(self, descriptor: Mapping, default_domain: str | None = None) -> str:
        """Return the sanitized page URL for a link opened from a graph."""
        return self.links.sanitize(descriptor, self._domain(default_domain))

    def fetch(self, request: TranslatedRequest) -> str | bytes:
        """Fetch a prepared request with a single transport call."""
        url = request.url
        logger.info(f"Fetching {request.protocol} data: {url}")
        return self.transport(
            url,
            headers=dict(request.side_effects.headers),
            add_cors_origin=request.side_effects.add_cors_origin,
        )

    def fetch_and_decode(self, descriptor: Mapping, default_domain: str | None = None) -> Any:
        """Sanitize, fetch and decode the data for one descriptor.

        Returns:
            Decoded data in the shape the charting library expects

        Raises:
            GraphDataError: On validation or decoding failures
            Exception: Whatever the transport raises, unchanged
        """
        request = self.prepare(descriptor, default_domain)
        body = self.fetch(request)
        return self.decoder.decode(body, request.protocol)

    def load_file(self, *args, **kwargs):
        """Local files are never a valid data source."""
        raise UntrustedProtocolForbidden("Loading local files is disabled")
