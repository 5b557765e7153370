"""Drive model resolution over every schema the document declares."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from specgraph.models import ParserConfig, TypeReference
from specgraph.parser.builder import get_or_create_model
from specgraph.parser.converter import schema_to_model
from specgraph.parser.pipeline import ParserStep, run, traverse
from specgraph.parser.pointer import create_pointer
from specgraph.parser.state import ParserState


def _model_step(name: str) -> ParserStep[TypeReference]:
    def _step(state: ParserState) -> TypeReference:
        pointer = create_pointer(state.config.schemas_base, name)
        return get_or_create_model(state, pointer, name)

    return _step


def parse_all_schemas() -> ParserStep[None]:
    """Return a step that resolves each declared schema, in document order.

    The useful result is the populated model cache; the individual types are
    discarded.  A document without schemas succeeds and leaves the cache
    empty.  The first failure ends the run and later schemas are not touched.
    """

    async def _step(state: ParserState) -> None:
        schemas = state.declared_schemas()
        if not schemas:
            return None
        await traverse(list(schemas), _model_step)(state)
        return None

    return _step


def parse_inline_schema(schema: Any, location: str) -> ParserStep[TypeReference]:
    """Return a step converting a schema found outside the schema map.

    Request bodies, responses and parameters embed schemas inline; they go
    through the same converter and model cache as declared schemas, but are
    not cached under their own location.
    """

    def _step(state: ParserState) -> TypeReference:
        state.ensure_usable()
        return schema_to_model(state, schema, location)

    return _step


def parse_document(
    document: Mapping[str, Any], config: Optional[ParserConfig] = None
) -> ParserState:
    """Resolve every declared schema of *document* in a fresh run.

    This goes through :func:`~specgraph.parser.pipeline.run`, which starts its
    own event loop, so it raises ``RuntimeError`` when called from a running
    loop.  Async callers use
    ``await arun(parse_all_schemas(), ParserState(document, config))`` instead.

    Returns:
        The finished :class:`~specgraph.parser.state.ParserState`; its
        ``models`` cache is what code emitters consume.

    Raises:
        SpecgraphError: The first failure of the run.  No partial state is
            returned.
    """
    state = ParserState(document, config)
    run(parse_all_schemas(), state)
    return state
