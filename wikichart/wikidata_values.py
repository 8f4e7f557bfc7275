"""Typing of Wikidata SPARQL result values.

The SPARQL JSON result format gives every cell as a small object such as
``{"type": "literal", "datatype": "...#int", "value": "42"}``. Charts want
plain values, so cells are converted by type and datatype.
"""

import re

XSD = "http://www.w3.org/2001/XMLSchema#"
WKT_LITERAL = "http://www.opengis.net/ont/geosparql#wktLiteral"
ENTITY_PREFIX = "http://www.wikidata.org/entity/"

INTEGER_TYPES = {
    XSD + name
    for name in (
        "integer",
        "int",
        "long",
        "short",
        "byte",
        "nonNegativeInteger",
        "nonPositiveInteger",
        "positiveInteger",
        "negativeInteger",
        "unsignedInt",
        "unsignedLong",
        "unsignedShort",
        "unsignedByte",
    )
}
FLOAT_TYPES = {XSD + "decimal", XSD + "float", XSD + "double"}

# Optional CRS IRI, then Point(longitude latitude)
POINT_RE = re.compile(
    r"^\s*(?:<[^>]*>\s*)?Point\(\s*([-+0-9.eE]+)\s+([-+0-9.eE]+)\s*\)\s*$", re.IGNORECASE
)


def parse_wikidata_value(value):
    """Convert one SPARQL binding cell into a plain Python value.

    Args:
        value: Binding cell with ``type``, ``value`` and optional ``datatype``

    Returns:
        int/float for numeric literals, bool for booleans, ``[lon, lat]`` for
        WKT points, the bare ID for Wikidata entity URIs, otherwise the string
        value. None if the cell has no value.

    Raises:
        ValueError: If a numeric literal does not parse

    Example:
        >>> parse_wikidata_value({"type": "uri", "value": "http://www.wikidata.org/entity/Q42"})
        'Q42'
    """
    if not isinstance(value, dict) or "value" not in value:
        return None

    raw = value["value"]
    kind = value.get("type")

    if kind == "uri":
        if isinstance(raw, str) and raw.startswith(ENTITY_PREFIX):
            return raw[len(ENTITY_PREFIX) :]
        return raw

    if kind in ("literal", "typed-literal"):
        datatype = value.get("datatype")
        if datatype in INTEGER_TYPES:
            try:
                return int(raw)
            except ValueError:
                return float(raw)
        if datatype in FLOAT_TYPES:
            return float(raw)
        if datatype == XSD + "boolean":
            return raw in ("true", "1")
        if datatype == WKT_LITERAL:
            match = POINT_RE.match(raw)
            if match:
                return [float(match.group(1)), float(match.group(2))]

    return raw
