"""
Core schema representation for code generation.

The SchemaGraph is the normalized, read-only input of the pipeline: a
mapping from unique type id to its SchemaType definition, plus the
NamespaceScope each type belongs to. The loader builds it once and no
pipeline stage modifies it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from .errors import SchemaError, UnresolvedReferenceError


class PrimitiveKind(Enum):
    """Primitive JSON types."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class NamespaceScope:
    """
    Module/version grouping of generated types.

    Two types with the same simple name but different scopes are distinct
    and end up in different output packages.
    """

    package: str = ""
    version: Optional[str] = None
    description: Optional[str] = None

    @property
    def segments(self) -> Tuple[str, ...]:
        """Package path segments, split on '/' or '.'."""
        return tuple(part for part in re.split(r"[./\\]+", self.package) if part)

    @property
    def key(self) -> Tuple[Tuple[str, ...], Optional[str]]:
        return (self.segments, self.version)

    def __str__(self) -> str:
        parts = list(self.segments)
        if self.version:
            parts.append(self.version)
        return "/".join(parts) or "<root>"


DEFAULT_SCOPE = NamespaceScope()


@dataclass(frozen=True)
class Primitive:
    """
    A string, number or boolean.

    ``constraints`` holds the facets of a named primitive definition; they
    apply to every field that references it.
    """

    kind: PrimitiveKind
    format: Optional[str] = None
    constraints: Tuple[Any, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "constraints", tuple(self.constraints))


@dataclass(frozen=True)
class Reference:
    target_id: str


@dataclass(frozen=True)
class ArrayType:
    element_type: "SchemaType"
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False


@dataclass(frozen=True)
class MapType:
    """String-keyed map (``additionalProperties``)."""

    value_type: "SchemaType"


@dataclass(frozen=True)
class EnumType:
    name: str
    variants: Tuple[str, ...]
    description: Optional[str] = None
    deprecated: bool = False
    deprecation_message: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "variants", tuple(self.variants))


@dataclass(frozen=True)
class Field:
    """A single property of an object type."""

    name: str
    type: "SchemaType"
    required: bool = False
    nullable: bool = False  # nullable-by-schema
    default: Any = None
    description: Optional[str] = None
    constraints: Tuple[Any, ...] = ()
    deprecated: bool = False
    deprecation_message: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "constraints", tuple(self.constraints))

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class ObjectType:
    name: str
    fields: Tuple[Field, ...] = ()
    description: Optional[str] = None
    all_of: Tuple["SchemaType", ...] = ()
    deprecated: bool = False
    deprecation_message: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "all_of", tuple(self.all_of))

    def get_field(self, name: str) -> Optional[Field]:
        """Get field by name."""
        for item in self.fields:
            if item.name == name:
                return item
        return None


SchemaType = Union[Primitive, Reference, ArrayType, MapType, EnumType, ObjectType]

NAMED_TYPES = (ObjectType, EnumType)


@dataclass(frozen=True)
class SchemaGraph:
    """Immutable mapping of type id to definition and scope."""

    types: Mapping[str, SchemaType]
    scopes: Mapping[str, NamespaceScope] = field(default_factory=dict)

    def __post_init__(self):
        types = dict(self.types)
        scopes = {type_id: self.scopes.get(type_id, DEFAULT_SCOPE) for type_id in types}
        unknown = set(self.scopes) - set(types)
        if unknown:
            raise SchemaError(f"Scopes given for undefined types: {sorted(unknown)}")

        for type_id, definition in types.items():
            _check_no_inline_definitions(type_id, definition, scopes[type_id])

        object.__setattr__(self, "types", MappingProxyType(types))
        object.__setattr__(self, "scopes", MappingProxyType(scopes))

    def __contains__(self, type_id: str) -> bool:
        return type_id in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def lookup(self, type_id: str, referrer: Optional[str] = None) -> SchemaType:
        """
        Get a definition, failing when it does not exist.

        Args:
            type_id: Id to look up
            referrer: Type id holding the reference, reported on failure

        Raises:
            UnresolvedReferenceError: If no such definition exists
        """
        try:
            return self.types[type_id]
        except KeyError:
            owner = referrer or type_id
            raise UnresolvedReferenceError(
                f"Reference to undefined type '{type_id}'",
                type_id=owner,
                scope=self.scopes.get(owner),
            ) from None

    def scope_of(self, type_id: str) -> NamespaceScope:
        return self.scopes.get(type_id, DEFAULT_SCOPE)

    def name_of(self, type_id: str) -> str:
        """Schema name of a definition; aliases use the last id segment."""
        definition = self.types[type_id]
        if isinstance(definition, NAMED_TYPES):
            return definition.name
        return re.split(r"[/#]", type_id)[-1] or type_id


def _check_no_inline_definitions(type_id: str, definition: SchemaType, scope: NamespaceScope):
    """Named types may only appear at the top level; fields must reference them."""

    def check(schema_type: SchemaType, where: str):
        if isinstance(schema_type, NAMED_TYPES):
            raise SchemaError(
                f"Inline {type(schema_type).__name__} '{schema_type.name}' in {where}; "
                "named types must be top-level definitions",
                type_id=type_id,
                scope=scope,
            )
        if isinstance(schema_type, ArrayType):
            check(schema_type.element_type, where)
        elif isinstance(schema_type, MapType):
            check(schema_type.value_type, where)

    if isinstance(definition, ObjectType):
        for item in definition.fields:
            check(item.type, f"field '{item.name}'")
        for part in definition.all_of:
            if isinstance(part, ObjectType):
                for item in part.fields:
                    check(item.type, f"field '{item.name}'")
            elif not isinstance(part, Reference):
                raise SchemaError(
                    "Composition parts must be references or objects",
                    type_id=type_id,
                    scope=scope,
                )
    elif isinstance(definition, (ArrayType, MapType)):
        check(definition, "alias definition")
