"""Convert one raw OpenAPI schema object into a type reference.

:func:`schema_to_model` looks at one schema node and returns the matching
:mod:`~specgraph.models` type.  Keywords are checked in a fixed order:

* ``$ref`` -- resolved through
  :func:`~specgraph.parser.builder.get_or_create_model` and returned as a
  :class:`~specgraph.models.NamedReference`.
* ``allOf`` -- an :class:`~specgraph.models.IntersectionType`; the fields of
  all object-shaped branches are merged.  A field may narrow a scalar with a
  ``format``; any other type difference between branches is an error.
* ``oneOf`` / ``anyOf`` -- a :class:`~specgraph.models.UnionType`.  ``anyOf``
  really means "valid against one or more branches", which a union can only
  approximate; such unions are flagged ``exclusive=False``.
* ``enum`` -- a closed union of :class:`~specgraph.models.LiteralType`.
* ``type`` -- scalars, arrays, objects, or (OpenAPI 3.1) a union when ``type``
  is a list.

Inline sub-schemas are converted in place and are not cached; only ``$ref``
targets go through the model cache.  Branches, properties and enum values are
visited in document order, so the output is the same on every run.

Every error names the location of the offending node, e.g.
``#/components/schemas/Pet/properties/tags/items``.
"""

from __future__ import annotations

from typing import Any, Optional

from specgraph.exceptions import ConverterError
from specgraph.models import (
    ArrayType,
    IntersectionType,
    LiteralType,
    NamedReference,
    ObjectField,
    ObjectType,
    ScalarKind,
    ScalarType,
    TypeReference,
    UnionOrigin,
    UnionType,
)
from specgraph.parser.pointer import create_pointer, pointer_name
from specgraph.parser.state import ParserState

_PRIMITIVES = {
    "string": ScalarKind.STRING,
    "number": ScalarKind.NUMBER,
    "integer": ScalarKind.INTEGER,
    "boolean": ScalarKind.BOOLEAN,
    "null": ScalarKind.NULL,
}

_UNKNOWN = ScalarType(type=ScalarKind.UNKNOWN)
_NULL = ScalarType(type=ScalarKind.NULL)


def schema_to_model(state: ParserState, schema: Any, location: str) -> TypeReference:
    """Return the type reference for *schema*.

    Args:
        state: The run's parser state; ``$ref`` targets are resolved and
            cached through it.
        schema: A schema object from the document.  Never modified.
        location: Pointer to *schema*, used in error messages and to derive
            the locations of nested schemas.

    Raises:
        ConverterError: If the schema shape is not recognised or contradicts
            itself.
        PointerError: If a ``$ref`` is malformed or points nowhere.
        ModelResolutionError: If a ``$ref`` points to a location without a
            schema.
    """
    # OpenAPI 3.1 allows boolean schemas; ``true`` accepts anything.
    if schema is True:
        return _UNKNOWN
    if not isinstance(schema, dict):
        raise ConverterError(
            f"Schema at {location} must be an object, got {type(schema).__name__}"
        )

    model = _convert(state, schema, location)
    if schema.get("nullable") is True and not _accepts_null(model):
        model = UnionType(origin=UnionOrigin.NULLABLE, members=[model, _NULL])
    return model


def _convert(state: ParserState, schema: dict[str, Any], location: str) -> TypeReference:
    if "$ref" in schema:
        return _convert_ref(state, schema["$ref"])
    if "allOf" in schema:
        return _convert_all_of(state, schema, location)
    if "oneOf" in schema:
        return _convert_union(state, schema, "oneOf", location)
    if "anyOf" in schema:
        return _convert_union(state, schema, "anyOf", location)
    if "enum" in schema:
        return _convert_enum(schema, location)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return _convert_type_list(state, schema, schema_type, location)
    if schema_type is None:
        if "properties" in schema or "additionalProperties" in schema:
            return _convert_object(state, schema, location)
        if "items" in schema:
            return _convert_array(state, schema, location)
        return _UNKNOWN
    return _convert_typed(state, schema, schema_type, location)


def _convert_typed(
    state: ParserState, schema: dict[str, Any], schema_type: Any, location: str
) -> TypeReference:
    if schema_type == "array":
        return _convert_array(state, schema, location)
    if schema_type == "object":
        return _convert_object(state, schema, location)
    if isinstance(schema_type, str) and schema_type in _PRIMITIVES:
        return ScalarType(type=_PRIMITIVES[schema_type], format=schema.get("format"))
    raise ConverterError(f"Unrecognised schema type {schema_type!r} at {location}")


def _convert_ref(state: ParserState, ref: Any) -> NamedReference:
    # Imported here: the builder imports this module.
    from specgraph.parser.builder import get_or_create_model

    name = pointer_name(ref)
    get_or_create_model(state, ref, name)
    entry = state.models.get(ref)
    return NamedReference(pointer=ref, name=entry.name if entry else name)


def _convert_type_list(
    state: ParserState, schema: dict[str, Any], types: list[Any], location: str
) -> TypeReference:
    if not types:
        raise ConverterError(f"Empty 'type' list at {location}")
    members = [_convert_typed(state, schema, t, location) for t in types]
    if len(members) == 1:
        return members[0]
    return UnionType(origin=UnionOrigin.TYPE, members=members)


def _convert_array(state: ParserState, schema: dict[str, Any], location: str) -> ArrayType:
    items = schema.get("items")
    if items is None:
        return ArrayType(items=_UNKNOWN)
    return ArrayType(items=schema_to_model(state, items, f"{location}/items"))


def _convert_object(state: ParserState, schema: dict[str, Any], location: str) -> ObjectType:
    properties = schema.get("properties", {})
    if not isinstance(properties, dict):
        raise ConverterError(f"'properties' must be an object at {location}")
    required = _required_names(schema, location)

    fields = [
        ObjectField(
            name=name,
            required=name in required,
            type=schema_to_model(
                state, prop, create_pointer(f"{location}/properties", name)
            ),
        )
        for name, prop in properties.items()
    ]

    additional = schema.get("additionalProperties")
    if additional is None or additional is False:
        index = None
    elif additional is True:
        index = _UNKNOWN
    else:
        index = schema_to_model(state, additional, f"{location}/additionalProperties")

    return ObjectType(fields=fields, additional_properties=index)


def _convert_union(
    state: ParserState, schema: dict[str, Any], keyword: str, location: str
) -> UnionType:
    branches = _branches(schema, keyword, location)
    members = [
        schema_to_model(state, branch, f"{location}/{keyword}/{index}")
        for index, branch in enumerate(branches)
    ]

    discriminator = schema.get("discriminator")
    property_name = None
    if isinstance(discriminator, dict):
        property_name = discriminator.get("propertyName")

    return UnionType(
        origin=UnionOrigin(keyword),
        members=members,
        exclusive=keyword == "oneOf",
        discriminator=property_name,
    )


def _convert_enum(schema: dict[str, Any], location: str) -> UnionType:
    values = schema["enum"]
    if not isinstance(values, list) or not values:
        raise ConverterError(f"'enum' must be a non-empty list at {location}")

    unique: list[Any] = []
    for value in values:
        if not any(_same_literal(u, value) for u in unique):
            unique.append(value)
    return UnionType(
        origin=UnionOrigin.ENUM,
        members=[LiteralType(value=value) for value in unique],
    )


def _convert_all_of(
    state: ParserState, schema: dict[str, Any], location: str
) -> IntersectionType:
    branches = _branches(schema, "allOf", location)
    members = [
        schema_to_model(state, branch, f"{location}/allOf/{index}")
        for index, branch in enumerate(branches)
    ]
    # Object keywords next to allOf act as one more branch.
    if "properties" in schema or "additionalProperties" in schema:
        members.append(_convert_object(state, schema, location))

    merged: dict[str, ObjectField] = {}
    for member in members:
        for field in _known_fields(state, member):
            existing = merged.get(field.name)
            if existing is None:
                merged[field.name] = field
                continue
            narrowed = _narrower(existing.type, field.type)
            if narrowed is None:
                raise ConverterError(
                    f"Field '{field.name}' has incompatible types in allOf at "
                    f"{location}: {existing.type.describe()} vs {field.type.describe()}"
                )
            required = existing.required or field.required
            if narrowed is not existing.type or required != existing.required:
                merged[field.name] = ObjectField(name=field.name, required=required, type=narrowed)

    for name in _required_names(schema, location):
        field = merged.get(name)
        if field is not None and not field.required:
            merged[name] = ObjectField(name=name, required=True, type=field.type)

    return IntersectionType(members=members, fields=list(merged.values()))


def _narrower(a: TypeReference, b: TypeReference) -> Optional[TypeReference]:
    """The more specific of two allOf field types, or ``None`` if they conflict.

    A scalar without ``format`` is widened by the same scalar with one, so
    ``string`` and ``string<uuid>`` merge to ``string<uuid>``.
    """
    if a == b:
        return a
    if isinstance(a, ScalarType) and isinstance(b, ScalarType) and a.type is b.type:
        if a.format is None:
            return b
        if b.format is None:
            return a
    return None


def _known_fields(state: ParserState, member: TypeReference) -> list[ObjectField]:
    """Fields of *member* if its structure is known yet, else an empty list.

    Named references are followed through the cache.  A reference still in
    progress (a cycle) contributes nothing.
    """
    seen: set[str] = set()
    while isinstance(member, NamedReference):
        if member.pointer in seen:
            return []
        seen.add(member.pointer)
        target = state.models.finished(member.pointer)
        if target is None:
            return []
        member = target
    if isinstance(member, (ObjectType, IntersectionType)):
        return list(member.fields)
    return []


def _branches(schema: dict[str, Any], keyword: str, location: str) -> list[Any]:
    branches = schema[keyword]
    if not isinstance(branches, list) or not branches:
        raise ConverterError(f"'{keyword}' must be a non-empty list at {location}")
    return branches


def _required_names(schema: dict[str, Any], location: str) -> list[str]:
    required = schema.get("required", [])
    if not isinstance(required, list):
        raise ConverterError(f"'required' must be a list at {location}")
    return required


def _accepts_null(model: TypeReference) -> bool:
    if isinstance(model, ScalarType):
        return model.type is ScalarKind.NULL
    if isinstance(model, UnionType):
        return any(_accepts_null(m) for m in model.members)
    return False


def _same_literal(a: Any, b: Any) -> bool:
    """JSON equality: booleans are not numbers, but ``1`` and ``1.0`` are one number."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b
