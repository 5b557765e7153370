"""Run-scoped parser state: the document being read and the model cache being filled.

A :class:`ParserState` is created once per parser run and handed to every
pipeline step (see :mod:`specgraph.parser.pipeline`).  The document is only
ever read.  The :class:`ModelCache` is only ever written through
:meth:`ParserState.set_model`, one resolution at a time.

When a run fails its state is marked as failed and refuses further work; a
retry starts over with a fresh state.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional

from specgraph.exceptions import ModelResolutionError, PointerError
from specgraph.models import ModelEntry, ParserConfig, TypeReference
from specgraph.parser.pointer import parse_pointer, resolve_pointer


class ModelCache:
    """Pointer-keyed model cache.

    An entry is either a placeholder (the pointer is being resolved somewhere
    up the call stack) or finished.  Finished entries are never replaced, so a
    type reference handed out once stays valid for the whole run.

    Pointers reached again while still in progress are collected in
    :attr:`recursive`: an emitter has to declare those types lazily.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ModelEntry] = {}
        self.recursive: set[str] = set()

    def get(self, pointer: str) -> Optional[ModelEntry]:
        return self._entries.get(pointer)

    def finished(self, pointer: str) -> Optional[TypeReference]:
        """Return the finished type for *pointer*, or ``None`` if absent or in progress."""
        entry = self._entries.get(pointer)
        if entry is None:
            return None
        return entry.type

    def models(self) -> Iterator[ModelEntry]:
        """Iterate finished entries in the order they were started."""
        return (entry for entry in self._entries.values() if entry.finished)

    def pending(self) -> list[str]:
        """Pointers whose placeholder was never replaced (only after a failure)."""
        return [p for p, entry in self._entries.items() if not entry.finished]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dump of the finished models, keyed by pointer."""
        return {
            entry.pointer: {
                "name": entry.name,
                "recursive": entry.pointer in self.recursive,
                "type": entry.type.model_dump(mode="json"),
            }
            for entry in self.models()
        }

    def _store(self, entry: ModelEntry) -> None:
        current = self._entries.get(entry.pointer)
        if current is not None and current.finished:
            raise ModelResolutionError(
                f"Model '{entry.pointer}' is already finished and cannot be replaced"
            )
        self._entries[entry.pointer] = entry

    def __contains__(self, pointer: object) -> bool:
        return pointer in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ParserState:
    """Context shared by every step of one parser run.

    Args:
        document: The parsed OpenAPI document.  It must already be valid;
            it is never modified.
        config: Parser settings.  Defaults to :class:`ParserConfig`'s defaults.
    """

    def __init__(
        self,
        document: Mapping[str, Any],
        config: Optional[ParserConfig] = None,
    ) -> None:
        self._document = document
        self._config = config or ParserConfig()
        self._models = ModelCache()
        self._failed = False

    @property
    def document(self) -> Mapping[str, Any]:
        return self._document

    @property
    def models(self) -> ModelCache:
        return self._models

    @property
    def config(self) -> ParserConfig:
        return self._config

    @property
    def failed(self) -> bool:
        return self._failed

    def set_model(self, pointer: str, entry: ModelEntry) -> None:
        """Insert or update the cache entry for *pointer*.

        This is the only way the cache is written.

        Raises:
            ModelResolutionError: If the state belongs to a failed run, or
                *pointer* already holds a finished model.
        """
        self.ensure_usable()
        if entry.pointer != pointer:
            raise ModelResolutionError(
                f"Cache entry for '{entry.pointer}' cannot be stored under '{pointer}'"
            )
        self._models._store(entry)

    def mark_recursive(self, pointer: str) -> None:
        """Record that *pointer* was reached again while it was still in progress."""
        self._models.recursive.add(pointer)

    def declared_schemas(self) -> Mapping[str, Any]:
        """Return the name-keyed schema map under the configured schema root.

        A document without that section declares no schemas; an empty mapping
        is returned rather than an error.

        Raises:
            PointerError: If the configured schema root is not a local pointer.
        """
        parse_pointer(self._config.schemas_base)
        try:
            schemas = resolve_pointer(self._document, self._config.schemas_base)
        except PointerError:
            return {}
        if not isinstance(schemas, Mapping):
            return {}
        return schemas

    def mark_failed(self) -> None:
        self._failed = True

    def ensure_usable(self) -> None:
        if self._failed:
            raise ModelResolutionError(
                "Parser state belongs to a failed run; start again with a fresh state"
            )
