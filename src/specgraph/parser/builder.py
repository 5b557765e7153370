"""Memoising, cycle-safe model construction.

:func:`get_or_create_model` is the heart of the parser.  Each pointer is
converted at most once per run, however many schemas reference it, and a
pointer reached again while its own conversion is still running yields a
:class:`~specgraph.models.NamedReference` instead of another expansion.  That
is what lets ``Node.next -> Node`` or ``A -> B -> A`` terminate.

The protocol relies on resolutions running one at a time (see
:mod:`specgraph.parser.pipeline`): the placeholder check and the placeholder
insert are not atomic.
"""

from __future__ import annotations

import logging

from specgraph.exceptions import ModelResolutionError, PointerError
from specgraph.models import ModelEntry, NamedReference, TypeReference
from specgraph.parser.converter import schema_to_model
from specgraph.parser.pointer import parse_pointer, resolve_pointer
from specgraph.parser.state import ParserState

logger = logging.getLogger(__name__)


def get_or_create_model(state: ParserState, pointer: str, name: str) -> TypeReference:
    """Return the model for *pointer*, converting its schema on first use.

    1. A finished cache entry is returned as is.
    2. An in-progress entry means *pointer* is being converted further up the
       call stack; a named forward reference to it is returned and the
       pointer is marked recursive.
    3. Otherwise a placeholder is stored, the schema at *pointer* is fetched
       and converted (possibly re-entering this function), and the
       placeholder is replaced by the result.

    Args:
        state: The run's parser state.
        pointer: Canonical location of the schema, e.g.
            ``#/components/schemas/Pet``.
        name: Name the model is declared under.

    Returns:
        The finished type reference, identical (``is``) on every later call
        for the same pointer in this run, or a forward reference during a
        cycle.

    Raises:
        PointerError: If *pointer* is not a document-local pointer.
        ModelResolutionError: If no schema exists at *pointer*, or the state
            belongs to a failed run.
        ConverterError: If the schema (or one it references) cannot be
            converted.  The placeholder is left behind; the run is over.
    """
    state.ensure_usable()

    entry = state.models.get(pointer)
    if entry is not None:
        if entry.type is not None:
            logger.debug("Model cache hit: %s", pointer)
            return entry.type
        logger.debug("Cycle at %s, emitting forward reference", pointer)
        state.mark_recursive(pointer)
        return NamedReference(pointer=pointer, name=entry.name)

    parse_pointer(pointer)
    logger.debug("Resolving model '%s' at %s", name, pointer)
    state.set_model(pointer, ModelEntry(pointer=pointer, name=name))

    try:
        schema = resolve_pointer(state.document, pointer)
    except PointerError as exc:
        raise ModelResolutionError(
            f"No schema for model '{name}': {exc}"
        ) from exc

    model = schema_to_model(state, schema, pointer)
    state.set_model(pointer, ModelEntry(pointer=pointer, name=name, type=model))
    return state.models.finished(pointer)
