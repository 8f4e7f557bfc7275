"""Post-processing of fetched graph data.

Wiki API responses come wrapped in an envelope that may carry ``error`` or
``warnings`` members. The decoder unwraps them and reshapes the payload into
what the charting library expects. Protocols without special handling get
the raw body back unchanged.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from wikichart.errors import ApiError, ContentUnavailable, MalformedSparqlResult
from wikichart.wikidata_values import parse_wikidata_value

logger = logging.getLogger(__name__)


def _load_json(body: str | bytes) -> Any:
    try:
        return json.loads(body)
    except (TypeError, ValueError) as e:
        raise ContentUnavailable(f"Response is not valid JSON: {e}") from e


def _log_warning(message: str) -> None:
    logger.warning(message)


def _metadata(jsondata: dict) -> list[dict]:
    """Metadata shared by tabular and map datasets."""
    license_info = jsondata.get("license") or {}
    return [
        {
            "description": jsondata.get("description"),
            "license_code": license_info.get("code"),
            "license_text": license_info.get("text"),
            "license_url": license_info.get("url"),
            "sources": jsondata.get("sources"),
        }
    ]


class ResponseDecoder:
    """Decodes raw response bodies by protocol tag.

    Args:
        logger: Single-argument sink for API warnings. Defaults to the
            module logger's ``warning``.
    """

    def __init__(self, logger: Callable[[str], None] | None = None):
        self.logger = logger or _log_warning
        self._decoders = {
            "wikiapi": self._decode_wikiapi,
            "wikiraw": self._decode_wikiraw,
            "wikidatasparql": self._decode_sparql,
            "tabular": self._decode_tabular,
            "map": self._decode_map,
        }

    def decode(self, body: str | bytes, protocol: str | None) -> Any:
        """Decode a response body fetched for the given protocol.

        Raises:
            ApiError: If a wiki API envelope reports an error
            ContentUnavailable: If an expected field is missing
            MalformedSparqlResult: If a SPARQL result has no bindings list
        """
        decoder = self._decoders.get(protocol)
        if decoder is None:
            return body
        return decoder(body)

    def parse_api_response(self, body: str | bytes) -> dict:
        """Parse a wiki API envelope, raising on errors and logging warnings."""
        data = _load_json(body)
        if not isinstance(data, dict):
            raise ContentUnavailable("API response is not an object")
        if "error" in data:
            raise ApiError(f"API error: {json.dumps(data['error'])}", payload=data["error"])
        if data.get("warnings"):
            self.logger(f"API warnings: {json.dumps(data['warnings'])}")
        return data

    def _decode_wikiapi(self, body):
        return self.parse_api_response(body)

    def _decode_wikiraw(self, body):
        data = self.parse_api_response(body)
        try:
            return data["query"]["pages"][0]["revisions"][0]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ContentUnavailable(f"Page content not available\n{json.dumps(data)}") from e

    def _decode_sparql(self, body):
        data = _load_json(body)
        results = data.get("results") if isinstance(data, dict) else None
        bindings = results.get("bindings") if isinstance(results, dict) else None
        if not isinstance(bindings, list) or not all(isinstance(row, dict) for row in bindings):
            raise MalformedSparqlResult('SPARQL query result does not have "results.bindings"')

        return [
            {key: parse_wikidata_value(cell) for key, cell in row.items()} for row in bindings
        ]

    def _jsondata(self, body) -> dict:
        data = self.parse_api_response(body)
        jsondata = data.get("jsondata")
        if not isinstance(jsondata, dict):
            raise ContentUnavailable("Dataset content not available: missing jsondata")
        return jsondata

    def _decode_tabular(self, body):
        jsondata = self._jsondata(body)
        try:
            fields = [field["name"] for field in jsondata["schema"]["fields"]]
            rows = jsondata["data"]
        except (KeyError, TypeError) as e:
            raise ContentUnavailable("Tabular data has no schema fields or data") from e
        if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
            raise ContentUnavailable("Tabular data rows must be lists")

        # Rows keep explicit nulls; short rows are padded with None
        data = [
            {name: (row[i] if i < len(row) else None) for i, name in enumerate(fields)}
            for row in rows
        ]
        return {"meta": _metadata(jsondata), "fields": fields, "data": data}

    def _decode_map(self, body):
        jsondata = self._jsondata(body)
        meta = _metadata(jsondata)
        meta[0].update(
            zoom=jsondata.get("zoom"),
            latitude=jsondata.get("latitude"),
            longitude=jsondata.get("longitude"),
        )
        return {"meta": meta, "data": jsondata.get("data")}
