"""Build and resolve JSON Pointer locations inside an OpenAPI document.

A *pointer* is the canonical string naming a schema location, e.g.
``#/components/schemas/Pet``.  Pointers are compared as plain strings and
double as model cache keys, so they are built in exactly the form ``$ref``
values take in source documents: segments joined with ``/`` after RFC 6901
escaping (``~`` as ``~0``, ``/`` as ``~1``).  No percent-decoding is applied.

Only document-local pointers (starting with ``#``) are understood; anything
else raises :class:`~specgraph.exceptions.PointerError`.
"""

from __future__ import annotations

from typing import Any

from specgraph.exceptions import PointerError

ROOT = "#"


def escape_segment(segment: str) -> str:
    """Escape one pointer segment (``~`` first, so ``~1`` never double-escapes)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def create_pointer(base: str, name: str) -> str:
    """Return the pointer for *name* under the location *base*.

    *base* is an already-canonical pointer such as ``#/components/schemas``;
    *name* is a raw key and is escaped, so two distinct names under the same
    base never produce the same pointer.

    Example::

        create_pointer("#/components/schemas", "Pet")      # '#/components/schemas/Pet'
        create_pointer("#/components/schemas", "a/b~c")    # '#/components/schemas/a~1b~0c'
    """
    return f"{base.rstrip('/')}/{escape_segment(name)}"


def parse_pointer(ref: str) -> list[str]:
    """Split *ref* into its unescaped path segments.

    Args:
        ref: A ``$ref`` value or pointer.  ``#`` alone addresses the document
            root and yields no segments.

    Returns:
        The unescaped segments in order.

    Raises:
        PointerError: If *ref* is not a string or does not start with ``#``
            (external and relative references are not supported).
    """
    if not isinstance(ref, str):
        raise PointerError(f"$ref must be a string, got {type(ref).__name__}")
    if ref == ROOT:
        return []
    if not ref.startswith(ROOT + "/"):
        raise PointerError(
            f"Unsupported $ref '{ref}'. "
            "Only document-local references (#/...) are handled."
        )
    return [unescape_segment(segment) for segment in ref[2:].split("/")]


def resolve_pointer(document: Any, ref: str) -> Any:
    """Return the node of *document* that *ref* points to.

    Dicts are walked by key and lists by integer index.  The returned node is
    the document's own object, not a copy.

    Raises:
        PointerError: If *ref* is malformed or any segment does not exist.
    """
    current: Any = document
    for segment in parse_pointer(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise PointerError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise PointerError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise PointerError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )
    return current


def pointer_name(ref: str) -> str:
    """Return the last segment of *ref*, the name a referenced model is declared under."""
    segments = parse_pointer(ref)
    if not segments:
        raise PointerError(f"$ref '{ref}' points at the document root and has no name")
    return segments[-1]
