"""Canonical Pydantic models shared across all specgraph modules.

The models fall into three groups:

**Configuration models** -- read from JSON files in the user's config directory
and the project directory:
    :class:`ParserConfig`, :class:`OutputConfig` and :class:`SpecgraphConfig`.

**Type references** -- the resolved, generatable type descriptions produced by
the schema converter and consumed by code emitters:
    :class:`ScalarType`, :class:`LiteralType`, :class:`ArrayType`,
    :class:`ObjectType` (with :class:`ObjectField`), :class:`UnionType`,
    :class:`IntersectionType` and :class:`NamedReference`, joined into the
    discriminated union :data:`TypeReference`.

**Cache entries** -- :class:`ModelEntry`, one per pointer in the model cache.

Type references are frozen. Once the converter has built one, every holder of
it sees the same object for the rest of the run.
"""

from __future__ import annotations

import enum
import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SCHEMAS_BASE = "#/components/schemas"


# --- Config ---


class ParserConfig(BaseModel):
    """Settings for a single parser run."""

    schemas_base: str = Field(
        default=DEFAULT_SCHEMAS_BASE,
        description="Pointer to the name-keyed schema map that the driver walks",
    )


class OutputConfig(BaseModel):
    """Default output format preferences."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class SpecgraphConfig(BaseModel):
    """Effective configuration, merged by :func:`~specgraph.config.resolve_config`.

    Persisted as ``~/.config/specgraph/config.json`` (user) and
    ``./specgraph.json`` (project); unknown keys are rejected so that typos
    surface as :class:`~specgraph.exceptions.ConfigError`.
    """

    model_config = ConfigDict(extra="forbid")

    parser: ParserConfig = Field(default_factory=ParserConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Type references ---


class ScalarKind(str, enum.Enum):
    """Primitive JSON Schema types, plus ``unknown`` for schemas that say nothing."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    UNKNOWN = "unknown"


class UnionOrigin(str, enum.Enum):
    """The schema keyword a :class:`UnionType` was built from."""

    ONE_OF = "oneOf"
    ANY_OF = "anyOf"
    ENUM = "enum"
    NULLABLE = "nullable"
    TYPE = "type"


class _TypeBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScalarType(_TypeBase):
    """A primitive value, optionally narrowed by ``format`` (``date-time``, ``int64``...)."""

    kind: Literal["scalar"] = "scalar"
    type: ScalarKind
    format: Optional[str] = None

    def describe(self) -> str:
        if self.format:
            return f"{self.type.value}<{self.format}>"
        return self.type.value


class LiteralType(_TypeBase):
    """One literal value of a closed enum."""

    kind: Literal["literal"] = "literal"
    value: Any

    def describe(self) -> str:
        return json.dumps(self.value, default=str)


class ArrayType(_TypeBase):
    kind: Literal["array"] = "array"
    items: TypeReference

    def describe(self) -> str:
        inner = self.items.describe()
        if isinstance(self.items, (UnionType, IntersectionType)):
            inner = f"({inner})"
        return f"{inner}[]"


class ObjectField(_TypeBase):
    """One property of an object type, in declaration order."""

    name: str
    required: bool = False
    type: TypeReference

    def describe(self) -> str:
        marker = "" if self.required else "?"
        return f"{self.name}{marker}: {self.type.describe()}"


class ObjectType(_TypeBase):
    """A structural object: ordered fields plus an optional index signature.

    ``additional_properties`` is ``None`` when the schema closes the object
    (or says nothing), and the value type of the index signature otherwise.
    """

    kind: Literal["object"] = "object"
    fields: list[ObjectField] = Field(default_factory=list)
    additional_properties: Optional[TypeReference] = None

    def describe(self) -> str:
        parts = [f.describe() for f in self.fields]
        if self.additional_properties is not None:
            parts.append(f"[key: string]: {self.additional_properties.describe()}")
        return "{" + ", ".join(parts) + "}"


class UnionType(_TypeBase):
    """A tagged union of member types.

    ``exclusive`` is ``False`` for unions built from ``anyOf``: a value may
    match several members, which a union can only approximate.
    """

    kind: Literal["union"] = "union"
    origin: UnionOrigin
    members: list[TypeReference]
    exclusive: bool = True
    discriminator: Optional[str] = None

    def describe(self) -> str:
        return " | ".join(m.describe() for m in self.members)


class IntersectionType(_TypeBase):
    """The structural merge of ``allOf`` branches.

    ``members`` keeps every branch in declaration order (named references
    included). ``fields`` is the merged field list of the branches whose shape
    was known when the intersection was built.
    """

    kind: Literal["intersection"] = "intersection"
    members: list[TypeReference]
    fields: list[ObjectField] = Field(default_factory=list)

    def describe(self) -> str:
        return " & ".join(m.describe() for m in self.members)


class NamedReference(_TypeBase):
    """A reference, by pointer, to a model declared elsewhere in the cache."""

    kind: Literal["reference"] = "reference"
    pointer: str
    name: str

    def describe(self) -> str:
        return self.name


TypeReference = Annotated[
    Union[
        ScalarType,
        LiteralType,
        ArrayType,
        ObjectType,
        UnionType,
        IntersectionType,
        NamedReference,
    ],
    Field(discriminator="kind"),
]

for _model in (ArrayType, ObjectField, ObjectType, UnionType, IntersectionType):
    _model.model_rebuild()


# --- Cache entries ---


class ModelEntry(BaseModel):
    """A model cache slot.

    ``type`` is ``None`` while the pointer is still being resolved further up
    the call stack (the placeholder state), and the finished type afterwards.
    """

    model_config = ConfigDict(frozen=True)

    pointer: str
    name: str
    type: Optional[TypeReference] = None

    @property
    def finished(self) -> bool:
        return self.type is not None

