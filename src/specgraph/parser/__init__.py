"""OpenAPI schema parser -- resolve declared schemas into a graph of models.

Typical usage::

    from specgraph.parser import load_document, check_openapi_version, parse_document

    document = load_document("petstore.yaml")
    check_openapi_version(document)
    state = parse_document(document)
    pet = state.models.finished("#/components/schemas/Pet")

Sub-modules, leaves first:

* :mod:`~specgraph.parser.pointer` -- build and resolve ``#/...`` pointers.
* :mod:`~specgraph.parser.state` -- the run-scoped
  :class:`~specgraph.parser.state.ParserState` and its model cache.
* :mod:`~specgraph.parser.converter` -- one schema object to one type.
* :mod:`~specgraph.parser.builder` -- memoising, cycle-safe
  :func:`~specgraph.parser.builder.get_or_create_model`.
* :mod:`~specgraph.parser.pipeline` -- ordered, fail-fast step composition.
* :mod:`~specgraph.parser.schemas` -- the top-level driver.
* :mod:`~specgraph.parser.loader` -- document I/O for the CLI.
"""

from specgraph.parser.builder import get_or_create_model
from specgraph.parser.loader import check_openapi_version, load_document
from specgraph.parser.pipeline import run
from specgraph.parser.pointer import create_pointer, resolve_pointer
from specgraph.parser.schemas import parse_all_schemas, parse_document, parse_inline_schema
from specgraph.parser.state import ModelCache, ParserState

__all__ = [
    "ModelCache",
    "ParserState",
    "check_openapi_version",
    "create_pointer",
    "get_or_create_model",
    "load_document",
    "parse_all_schemas",
    "parse_document",
    "parse_inline_schema",
    "resolve_pointer",
    "run",
]
