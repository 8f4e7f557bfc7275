"""Shared fixtures for wikichart tests."""

import pytest

from wikichart.allowlist import HostAllowlist
from wikichart.config import LoaderConfig
from wikichart.translator import DescriptorTranslator

DEFAULT_DOMAIN = "domain.sec.org"


@pytest.fixture
def domains() -> dict[str, list[str]]:
    """Allowlist where sec.org is https-only and nonsec.org is http-only."""
    return {
        "http": ["nonsec.org"],
        "https": ["sec.org"],
        "wikiapi": ["wikiapi.nonsec.org", "wikiapi.sec.org"],
        "wikirest": ["wikirest.nonsec.org", "wikirest.sec.org"],
        "wikiraw": ["wikiraw.nonsec.org", "wikiraw.sec.org"],
        "wikirawupload": ["wikirawupload.nonsec.org", "wikirawupload.sec.org"],
        "wikidatasparql": ["wikidatasparql.nonsec.org", "wikidatasparql.sec.org"],
        "geoshape": ["maps.nonsec.org", "maps.sec.org"],
    }


@pytest.fixture
def domain_map() -> dict[str, str]:
    return {"nonsec": "nonsec.org", "sec": "sec.org"}


@pytest.fixture
def allowlist(domains, domain_map) -> HostAllowlist:
    return HostAllowlist(domains, domain_map)


@pytest.fixture
def translator(allowlist) -> DescriptorTranslator:
    """Translator for untrusted graphs."""
    return DescriptorTranslator(allowlist, is_trusted=False, language_code="en")


@pytest.fixture
def trusted_translator(allowlist) -> DescriptorTranslator:
    return DescriptorTranslator(allowlist, is_trusted=True, language_code="en")


@pytest.fixture
def loader_config(domains, domain_map) -> LoaderConfig:
    return LoaderConfig(
        domains=domains,
        domain_map=domain_map,
        language_code="en",
        default_domain=DEFAULT_DOMAIN,
    )
