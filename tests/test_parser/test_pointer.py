"""Tests for specgraph.parser.pointer."""

from __future__ import annotations

import pytest

from specgraph.exceptions import PointerError
from specgraph.parser.pointer import (
    create_pointer,
    escape_segment,
    parse_pointer,
    pointer_name,
    resolve_pointer,
    unescape_segment,
)

SCHEMAS = "#/components/schemas"


class TestCreatePointer:
    def test_simple_name(self) -> None:
        assert create_pointer(SCHEMAS, "Pet") == "#/components/schemas/Pet"

    def test_escapes_slash_and_tilde(self) -> None:
        assert create_pointer(SCHEMAS, "a/b~c") == "#/components/schemas/a~1b~0c"

    def test_trailing_slash_on_base_is_ignored(self) -> None:
        assert create_pointer(SCHEMAS + "/", "Pet") == create_pointer(SCHEMAS, "Pet")

    def test_distinct_names_give_distinct_pointers(self) -> None:
        names = ["a/b", "a~1b", "a~b", "a~0b", "ab"]
        pointers = {create_pointer(SCHEMAS, name) for name in names}
        assert len(pointers) == len(names)

    def test_escape_order_does_not_double_escape(self) -> None:
        assert escape_segment("~1") == "~01"
        assert unescape_segment("~01") == "~1"


class TestParsePointer:
    def test_splits_and_unescapes(self) -> None:
        assert parse_pointer("#/components/schemas/a~1b") == ["components", "schemas", "a/b"]

    def test_root(self) -> None:
        assert parse_pointer("#") == []

    @pytest.mark.parametrize(
        "ref",
        ["components/schemas/Pet", "other.yaml#/components/schemas/Pet", "https://x/y#/a", ""],
    )
    def test_rejects_non_local(self, ref: str) -> None:
        with pytest.raises(PointerError, match="document-local"):
            parse_pointer(ref)

    def test_rejects_non_string(self) -> None:
        with pytest.raises(PointerError, match="must be a string"):
            parse_pointer(42)  # type: ignore[arg-type]

    def test_no_percent_decoding(self) -> None:
        assert parse_pointer("#/a%20b") == ["a%20b"]


class TestResolvePointer:
    def test_round_trip_returns_original_object(self) -> None:
        pet = {"type": "object", "properties": {"name": {"type": "string"}}}
        document = {"components": {"schemas": {"Pet": pet}}}

        resolved = resolve_pointer(document, create_pointer(SCHEMAS, "Pet"))

        assert resolved is document["components"]["schemas"]["Pet"]

    def test_round_trip_with_escaped_name(self) -> None:
        schema = {"type": "string"}
        document = {"components": {"schemas": {"v1/Thing~x": schema}}}

        assert resolve_pointer(document, create_pointer(SCHEMAS, "v1/Thing~x")) is schema

    def test_list_index(self) -> None:
        document = {"a": {"oneOf": [{"type": "string"}, {"type": "integer"}]}}
        assert resolve_pointer(document, "#/a/oneOf/1") == {"type": "integer"}

    def test_missing_key(self) -> None:
        with pytest.raises(PointerError, match="key 'Nope' not found"):
            resolve_pointer({"components": {"schemas": {}}}, "#/components/schemas/Nope")

    def test_bad_list_index(self) -> None:
        with pytest.raises(PointerError, match="invalid array index"):
            resolve_pointer({"a": [1]}, "#/a/5")

    def test_cannot_navigate_into_scalar(self) -> None:
        with pytest.raises(PointerError, match="cannot navigate into str"):
            resolve_pointer({"a": "text"}, "#/a/b")

    def test_root_returns_document(self) -> None:
        document = {"openapi": "3.0.3"}
        assert resolve_pointer(document, "#") is document


class TestPointerName:
    def test_last_segment_unescaped(self) -> None:
        assert pointer_name("#/components/schemas/a~1b") == "a/b"

    def test_root_has_no_name(self) -> None:
        with pytest.raises(PointerError):
            pointer_name("#")
