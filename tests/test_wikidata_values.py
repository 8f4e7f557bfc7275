"""Tests for SPARQL value typing."""

import pytest

from wikichart.wikidata_values import WKT_LITERAL, XSD, parse_wikidata_value


def literal(value, datatype=None):
    cell = {"type": "literal", "value": value}
    if datatype:
        cell["datatype"] = datatype
    return cell


class TestParseWikidataValue:
    @pytest.mark.parametrize(
        "cell, expected",
        [
            (literal("42", XSD + "integer"), 42),
            (literal("-7", XSD + "int"), -7),
            (literal("12", XSD + "nonNegativeInteger"), 12),
            (literal("42.5", XSD + "decimal"), 42.5),
            (literal("1.0E3", XSD + "double"), 1000.0),
            (literal("true", XSD + "boolean"), True),
            (literal("false", XSD + "boolean"), False),
            (literal("Point(42 144.5)", WKT_LITERAL), [42.0, 144.5]),
            (
                literal("<http://www.wikidata.org/entity/Q2> Point(-1.5 2)", WKT_LITERAL),
                [-1.5, 2.0],
            ),
            (literal("2020-01-01T00:00:00Z", XSD + "dateTime"), "2020-01-01T00:00:00Z"),
            (literal("plain text"), "plain text"),
        ],
    )
    def test_literals(self, cell, expected):
        assert parse_wikidata_value(cell) == expected

    def test_integer_types_give_int(self):
        assert isinstance(parse_wikidata_value(literal("3", XSD + "long")), int)

    def test_entity_uri_becomes_id(self):
        cell = {"type": "uri", "value": "http://www.wikidata.org/entity/Q42"}
        assert parse_wikidata_value(cell) == "Q42"

    def test_other_uri_unchanged(self):
        cell = {"type": "uri", "value": "https://example.org/x"}
        assert parse_wikidata_value(cell) == "https://example.org/x"

    def test_language_literal(self):
        cell = {"type": "literal", "value": "Douglas Adams", "xml:lang": "en"}
        assert parse_wikidata_value(cell) == "Douglas Adams"

    def test_unparsed_point_is_raw(self):
        assert parse_wikidata_value(literal("Polygon((0 0))", WKT_LITERAL)) == "Polygon((0 0))"

    @pytest.mark.parametrize("cell", [None, {}, {"type": "literal"}, "Q42"])
    def test_no_value(self, cell):
        assert parse_wikidata_value(cell) is None

    def test_bad_number(self):
        with pytest.raises(ValueError):
            parse_wikidata_value(literal("abc", XSD + "decimal"))
