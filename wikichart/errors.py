"""Exceptions raised while sanitizing, fetching and decoding graph data.

Every failure is fatal to the request that caused it. Validation errors are
raised before any network call; decoder errors after the fetch completes.
"""


class GraphDataError(Exception):
    """Base exception for graph data loading errors."""

    pass


class DescriptorError(GraphDataError):
    """A descriptor field failed validation.

    Attributes:
        protocol: Protocol tag of the descriptor being validated
        field: Name of the offending field
    """

    def __init__(self, protocol: str, field: str, reason: str):
        self.protocol = protocol
        self.field = field
        super().__init__(f"{protocol}: parameter {field} {reason}")


class ParameterMissing(DescriptorError):
    """A required descriptor field is absent or empty."""

    def __init__(self, protocol: str, field: str, reason: str = "is not set"):
        super().__init__(protocol, field, reason)


class ParameterInvalid(DescriptorError):
    """A descriptor field has the wrong type or fails its pattern."""

    pass


class ParameterNotNumeric(ParameterInvalid):
    """A numeric field does not look like a number."""

    def __init__(self, protocol: str, field: str):
        super().__init__(protocol, field, "is not a number")


class ParameterOutOfRange(ParameterInvalid):
    """A numeric field is outside its allowed range."""

    def __init__(self, protocol: str, field: str):
        super().__init__(protocol, field, "is not valid")


class HostNotAllowlisted(GraphDataError):
    """Host matches no allowlist entry for the applicable protocol."""

    pass


class ProtocolDisabled(GraphDataError):
    """A service-backed protocol has no configured domains."""

    pass


class UnknownProtocol(GraphDataError):
    """Protocol tag is not one of the supported tags."""

    def __init__(self, protocol, message: str | None = None):
        self.protocol = protocol
        super().__init__(message or f"Unknown type parameter {protocol}")


class UntrustedProtocolForbidden(GraphDataError):
    """Raw http/https access was requested by an untrusted graph."""

    pass


class ApiError(GraphDataError):
    """The wiki API envelope reported an error.

    Attributes:
        payload: The ``error`` member of the envelope
    """

    def __init__(self, message: str, payload=None):
        self.payload = payload
        super().__init__(message)


class ContentUnavailable(GraphDataError):
    """An expected field is missing from a successful response."""

    pass


class MalformedSparqlResult(GraphDataError):
    """SPARQL response has no ``results.bindings`` list."""

    pass


class TransportFailure(GraphDataError):
    """Raised by the bundled transport when a request fails."""

    pass
