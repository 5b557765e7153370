"""Tests for specgraph.parser.state."""

from __future__ import annotations

import pytest

from specgraph.exceptions import ModelResolutionError, PointerError
from specgraph.models import ModelEntry, ParserConfig, ScalarKind, ScalarType
from specgraph.parser.state import ParserState

PET = "#/components/schemas/Pet"


class TestModelCache:
    def test_placeholder_then_finish(self) -> None:
        state = ParserState({})
        state.set_model(PET, ModelEntry(pointer=PET, name="Pet"))

        assert PET in state.models
        assert state.models.finished(PET) is None
        assert state.models.pending() == [PET]

        string = ScalarType(type=ScalarKind.STRING)
        state.set_model(PET, ModelEntry(pointer=PET, name="Pet", type=string))

        assert state.models.finished(PET) is string
        assert state.models.pending() == []

    def test_finished_entry_is_never_replaced(self) -> None:
        state = ParserState({})
        string = ScalarType(type=ScalarKind.STRING)
        state.set_model(PET, ModelEntry(pointer=PET, name="Pet", type=string))

        with pytest.raises(ModelResolutionError, match="already finished"):
            state.set_model(
                PET,
                ModelEntry(pointer=PET, name="Pet", type=ScalarType(type=ScalarKind.INTEGER)),
            )
        assert state.models.finished(PET) is string

    def test_entry_must_match_pointer(self) -> None:
        state = ParserState({})
        with pytest.raises(ModelResolutionError, match="cannot be stored"):
            state.set_model("#/other", ModelEntry(pointer=PET, name="Pet"))

    def test_models_skips_placeholders_and_keeps_order(self) -> None:
        state = ParserState({})
        string = ScalarType(type=ScalarKind.STRING)
        for name in ("B", "A", "C"):
            pointer = f"#/components/schemas/{name}"
            state.set_model(pointer, ModelEntry(pointer=pointer, name=name))
        for name in ("A", "B"):
            pointer = f"#/components/schemas/{name}"
            state.set_model(pointer, ModelEntry(pointer=pointer, name=name, type=string))

        assert [entry.name for entry in state.models.models()] == ["B", "A"]
        assert len(state.models) == 3

    def test_to_dict(self) -> None:
        state = ParserState({})
        state.set_model(
            PET,
            ModelEntry(pointer=PET, name="Pet", type=ScalarType(type=ScalarKind.STRING)),
        )
        state.mark_recursive(PET)

        assert state.models.to_dict() == {
            PET: {
                "name": "Pet",
                "recursive": True,
                "type": {"kind": "scalar", "type": "string", "format": None},
            }
        }


class TestDeclaredSchemas:
    def test_returns_schema_map(self) -> None:
        schemas = {"Pet": {"type": "object"}}
        state = ParserState({"components": {"schemas": schemas}})
        assert state.declared_schemas() is schemas

    @pytest.mark.parametrize(
        "document",
        [{}, {"components": {}}, {"components": {"schemas": None}}],
    )
    def test_missing_section_is_empty(self, document: dict) -> None:
        assert dict(ParserState(document).declared_schemas()) == {}

    def test_custom_schema_root(self) -> None:
        state = ParserState(
            {"definitions": {"Pet": {"type": "object"}}},
            ParserConfig(schemas_base="#/definitions"),
        )
        assert list(state.declared_schemas()) == ["Pet"]

    def test_malformed_schema_root(self) -> None:
        state = ParserState({}, ParserConfig(schemas_base="components/schemas"))
        with pytest.raises(PointerError):
            state.declared_schemas()


class TestFailedState:
    def test_failed_state_refuses_writes(self) -> None:
        state = ParserState({})
        state.mark_failed()

        assert state.failed
        with pytest.raises(ModelResolutionError, match="failed run"):
            state.set_model(PET, ModelEntry(pointer=PET, name="Pet"))
