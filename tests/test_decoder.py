"""Tests for response decoding."""

import json
import logging
from unittest.mock import Mock

import pytest

from wikichart.decoder import ResponseDecoder
from wikichart.errors import ApiError, ContentUnavailable, MalformedSparqlResult

XSD = "http://www.w3.org/2001/XMLSchema#"


@pytest.fixture
def decoder():
    return ResponseDecoder()


def wikiraw_body(content="Hello"):
    return json.dumps({"query": {"pages": [{"revisions": [{"content": content}]}]}})


def jsondata_body(**jsondata):
    return json.dumps({"jsondata": jsondata})


class TestApiEnvelope:
    """Tests for parse_api_response()."""

    def test_returns_parsed_object(self, decoder):
        assert decoder.decode('{"batchcomplete": true}', "wikiapi") == {"batchcomplete": True}

    def test_accepts_bytes(self, decoder):
        assert decoder.decode(b'{"a": 1}', "wikiapi") == {"a": 1}

    def test_error_raises(self, decoder):
        body = json.dumps({"error": {"code": "badtitle", "info": "Bad title"}})
        with pytest.raises(ApiError, match="badtitle") as exc_info:
            decoder.decode(body, "wikiapi")
        assert exc_info.value.payload == {"code": "badtitle", "info": "Bad title"}

    def test_warnings_go_to_sink(self):
        sink = Mock()
        decoder = ResponseDecoder(logger=sink)
        body = json.dumps({"warnings": {"main": "deprecated"}, "ok": 1})

        assert decoder.decode(body, "wikiapi")["ok"] == 1
        sink.assert_called_once_with('API warnings: {"main": "deprecated"}')

    def test_warnings_default_to_module_logger(self, decoder, caplog):
        with caplog.at_level(logging.WARNING, logger="wikichart.decoder"):
            decoder.decode(json.dumps({"warnings": {"x": 1}}), "wikiapi")
        assert "API warnings" in caplog.text

    def test_invalid_json(self, decoder):
        with pytest.raises(ContentUnavailable):
            decoder.decode("<html>", "wikiapi")

    def test_non_object(self, decoder):
        with pytest.raises(ContentUnavailable):
            decoder.decode("[1, 2]", "wikiapi")

    def test_empty_error_object_raises(self, decoder):
        with pytest.raises(ApiError):
            decoder.decode('{"error": {}, "ok": 1}', "wikiapi")


class TestWikiRaw:
    def test_content(self, decoder):
        assert decoder.decode(wikiraw_body("== Title =="), "wikiraw") == "== Title =="

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"query": {"pages": []}},
            {"query": {"pages": [{"missing": True}]}},
            {"query": {"pages": [{"revisions": []}]}},
        ],
    )
    def test_missing_content(self, decoder, payload):
        with pytest.raises(ContentUnavailable, match="Page content not available"):
            decoder.decode(json.dumps(payload), "wikiraw")

    def test_error_wins(self, decoder):
        with pytest.raises(ApiError):
            decoder.decode(json.dumps({"error": {"code": "x"}}), "wikiraw")


class TestSparql:
    def test_bindings_are_typed(self, decoder):
        body = json.dumps(
            {
                "head": {"vars": ["int", "float", "geo", "uri"]},
                "results": {
                    "bindings": [
                        {
                            "int": {"type": "literal", "datatype": XSD + "int", "value": "42"},
                            "float": {
                                "type": "literal",
                                "datatype": XSD + "decimal",
                                "value": "42.5",
                            },
                            "geo": {
                                "type": "literal",
                                "datatype": "http://www.opengis.net/ont/geosparql#wktLiteral",
                                "value": "Point(42 144.5)",
                            },
                        },
                        {
                            "uri": {
                                "type": "uri",
                                "value": "http://www.wikidata.org/entity/Q42",
                            }
                        },
                    ]
                },
            }
        )
        assert decoder.decode(body, "wikidatasparql") == [
            {"int": 42, "float": 42.5, "geo": [42, 144.5]},
            {"uri": "Q42"},
        ]

    def test_empty_bindings(self, decoder):
        assert decoder.decode('{"results": {"bindings": []}}', "wikidatasparql") == []

    @pytest.mark.parametrize(
        "payload",
        [{}, {"results": {}}, {"results": {"bindings": {}}}, {"results": {"bindings": [1]}}, []],
    )
    def test_malformed(self, decoder, payload):
        with pytest.raises(MalformedSparqlResult):
            decoder.decode(json.dumps(payload), "wikidatasparql")


class TestTabular:
    def test_rows_become_records(self, decoder):
        body = jsondata_body(
            description="Populations",
            license={"code": "CC0-1.0", "text": "Public domain", "url": "https://cc.org/"},
            sources="Census",
            schema={"fields": [{"name": "city", "type": "string"}, {"name": "pop"}]},
            data=[["Paris", 2100000], ["Nowhere", None], ["Short"]],
        )

        result = decoder.decode(body, "tabular")

        assert result["fields"] == ["city", "pop"]
        assert result["data"] == [
            {"city": "Paris", "pop": 2100000},
            {"city": "Nowhere", "pop": None},
            {"city": "Short", "pop": None},
        ]
        assert result["meta"] == [
            {
                "description": "Populations",
                "license_code": "CC0-1.0",
                "license_text": "Public domain",
                "license_url": "https://cc.org/",
                "sources": "Census",
            }
        ]

    def test_missing_license(self, decoder):
        body = jsondata_body(schema={"fields": []}, data=[])
        meta = decoder.decode(body, "tabular")["meta"][0]
        assert meta["license_code"] is None
        assert meta["description"] is None

    def test_missing_schema(self, decoder):
        with pytest.raises(ContentUnavailable):
            decoder.decode(jsondata_body(data=[]), "tabular")

    def test_missing_jsondata(self, decoder):
        with pytest.raises(ContentUnavailable, match="jsondata"):
            decoder.decode("{}", "tabular")

    @pytest.mark.parametrize("rows", [[None], [{"x": 1}], {"0": ["a"]}, None])
    def test_rows_must_be_lists(self, decoder, rows):
        body = jsondata_body(schema={"fields": [{"name": "x"}]}, data=rows)
        with pytest.raises(ContentUnavailable, match="rows"):
            decoder.decode(body, "tabular")


class TestMap:
    def test_map_metadata(self, decoder):
        geojson = {"type": "FeatureCollection", "features": []}
        body = jsondata_body(
            description="Route", zoom=5, latitude=10.5, longitude=-3, data=geojson
        )

        result = decoder.decode(body, "map")

        assert result["data"] == geojson
        meta = result["meta"][0]
        assert meta["zoom"] == 5
        assert meta["latitude"] == 10.5
        assert meta["longitude"] == -3
        assert meta["description"] == "Route"


class TestPassThrough:
    @pytest.mark.parametrize(
        "protocol", ["wikirest", "wikifile", "wikirawupload", "geoshape", "mapsnapshot", None]
    )
    def test_body_returned_unchanged(self, decoder, protocol):
        body = b"\x89PNG raw"
        assert decoder.decode(body, protocol) is body
