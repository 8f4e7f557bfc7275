"""Sanitization of links opened from a graph.

Graphs may open a wiki page when a mark is clicked. Only page views on an
allowlisted host are permitted, always as ``/wiki/<Title>``.
"""

import logging
from collections.abc import Mapping

from wikichart.allowlist import HostAllowlist
from wikichart.descriptors import GenericDescriptor, WikiTitleDescriptor, parse_descriptor
from wikichart.errors import (
    HostNotAllowlisted,
    ParameterInvalid,
    ParameterMissing,
    UnknownProtocol,
)
from wikichart.urls import encode_component

logger = logging.getLogger(__name__)

WIKI_PREFIX = "/wiki/"


class LinkSanitizer:
    """Turns ``wikititle`` and ``http(s)`` link descriptors into page URLs.

    Example:
        >>> LinkSanitizer(allowlist).sanitize({"type": "wikititle", "path": "My page"}, "sec.org")
        'https://sec.org/wiki/My_page'
    """

    def __init__(self, allowlist: HostAllowlist):
        self.allowlist = allowlist

    def sanitize(self, descriptor: Mapping, default_domain: str | None = None) -> str:
        descriptor = parse_descriptor(descriptor)
        if isinstance(descriptor, WikiTitleDescriptor):
            protocol = "wikititle"
        elif isinstance(descriptor, GenericDescriptor) and descriptor.protocol:
            protocol = descriptor.protocol
        else:
            raise UnknownProtocol(
                descriptor.protocol, f"{descriptor.protocol}: protocol is not supported for links"
            )

        host = descriptor.host if descriptor.host is not None else default_domain
        resolved = self.allowlist.sanitize_host(host)
        if resolved is None:
            raise HostNotAllowlisted(f"URL hostname is not whitelisted: {host}")

        path = descriptor.path
        if not isinstance(path, str) or not path:
            raise ParameterMissing(protocol, "path")

        if protocol == "wikititle":
            title = path[1:] if path.startswith("/") else path
        else:
            if not path.startswith(WIKI_PREFIX):
                raise ParameterInvalid(protocol, "path", f"must begin with {WIKI_PREFIX}")
            if descriptor.query:
                raise ParameterInvalid(protocol, "query", "is not allowed for links")
            title = path[len(WIKI_PREFIX) :]

        if not title:
            raise ParameterMissing(protocol, "title")

        url = f"{resolved.protocol}://{resolved.host}{WIKI_PREFIX}"
        url += encode_component(title.replace(" ", "_"))
        logger.debug(f"Sanitized link: {url}")
        return url
