"""Host allowlisting for graph data requests.

Each protocol tag has its own ordered list of allowed domain patterns. A
pattern is either an exact host (``sec.org``) or a wildcard suffix
(``*.sec.org``). The ``http`` and ``https`` lists additionally allow any
subdomain of an exact entry.
"""

import fnmatch
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Characters a bare hostname may contain. Anything else (ports, userinfo,
# path separators) can smuggle a different target past a wildcard pattern.
_HOST_RE = re.compile(r"^[-_.a-z0-9]+$")

SUBDOMAIN_PROTOCOLS = ("http", "https")


def _normalize_host(host) -> str | None:
    """Lowercase a host and reject anything that is not a bare hostname."""
    if not isinstance(host, str):
        return None
    host = host.strip().lower().rstrip(".")
    if not host or not _HOST_RE.match(host):
        return None
    return host


class DomainMatcher:
    """Tests hostnames against a list of allowed domain patterns.

    Args:
        patterns: Exact hosts or ``*.suffix`` wildcards
        allow_subdomains: Also accept any subdomain of an exact pattern

    Example:
        >>> matcher = DomainMatcher(["sec.org"], allow_subdomains=True)
        >>> matcher.matches("any.sec.org")
        True
    """

    def __init__(self, patterns: Sequence[str], allow_subdomains: bool = False):
        self.patterns = [p.strip().lower() for p in patterns if p and p.strip()]
        self.allow_subdomains = allow_subdomains

    def matches(self, host) -> bool:
        host = _normalize_host(host)
        if host is None:
            return False

        for pattern in self.patterns:
            if pattern.startswith("*."):
                if fnmatch.fnmatchcase(host, pattern):
                    return True
            elif host == pattern:
                return True
            elif self.allow_subdomains and host.endswith("." + pattern):
                return True
        return False


@dataclass(frozen=True)
class ResolvedHost:
    """A host that passed the allowlist, with the scheme to reach it."""

    host: str
    protocol: str


class HostAllowlist:
    """Per-protocol host allowlist with alias remapping.

    Matchers are built lazily on first use of a protocol and then reused.
    Building one is a pure function of the configuration, so two threads
    racing to build the same matcher only waste a little work.

    Args:
        domains: Mapping of protocol tag to allowed domain patterns
        domain_map: Optional alias -> canonical host table
    """

    def __init__(
        self,
        domains: Mapping[str, Sequence[str]],
        domain_map: Mapping[str, str] | None = None,
    ):
        self.domains = {tag: list(patterns) for tag, patterns in (domains or {}).items()}
        self.domain_map = dict(domain_map or {})
        self._matchers: dict[str, DomainMatcher] = {}

    def test_host(self, protocol: str, host) -> bool:
        """Test a host against the allowlist of one protocol.

        A protocol without configured domains never matches.
        """
        matcher = self._matchers.get(protocol)
        if matcher is None:
            patterns = self.domains.get(protocol)
            if not patterns:
                return False
            matcher = DomainMatcher(patterns, protocol in SUBDOMAIN_PROTOCOLS)
            self._matchers[protocol] = matcher
        return matcher.matches(host)

    def sanitize_host(self, host) -> ResolvedHost | None:
        """Map a host through the alias table and find its scheme.

        Returns:
            ResolvedHost with ``https`` preferred over ``http``, or None if
            the host is not allowed for either.
        """
        if isinstance(host, str):
            host = self.domain_map.get(host, host)

        if self.test_host("https", host):
            return ResolvedHost(host=host, protocol="https")
        if self.test_host("http", host):
            return ResolvedHost(host=host, protocol="http")

        logger.debug(f"Host not allowlisted: {host!r}")
        return None

    def first_domain(self, protocol: str) -> str | None:
        """Return the first configured domain for a protocol, if any."""
        patterns = self.domains.get(protocol)
        return patterns[0] if patterns else None
