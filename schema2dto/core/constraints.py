"""
Validation constraints and their mapping onto resolved fields.

A constraint is a language-neutral validation rule. The ConstraintMapper
collects the declared constraints of a field, adds the ones implied by its
schema (string formats, array bounds), and checks each against the
resolved base type of the field. Renderers decide how a constraint is
spelled; the mapper only decides which ones apply.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..logging_config import get_logger
from .errors import SchemaError, UnsupportedFacetError
from .resolver import (
    NUMERIC_KINDS,
    BaseKind,
    DescriptorTree,
    ResolvedField,
    TypeDescriptor,
)
from .schema import ArrayType, Primitive, PrimitiveKind

logger = get_logger(__name__)

Number = Union[int, float, Decimal]

# String formats that stay strings and become Format constraints
DERIVED_FORMATS = ("email", "hostname", "ipv4", "ipv6")


@dataclass(frozen=True)
class NotBlank:
    kind: ClassVar[str] = "not_blank"


@dataclass(frozen=True)
class Pattern:
    regex: str

    kind: ClassVar[str] = "pattern"


@dataclass(frozen=True)
class Size:
    """Length bounds of a string or binary, or element count of a collection."""

    min: Optional[int] = None
    max: Optional[int] = None

    kind: ClassVar[str] = "size"


@dataclass(frozen=True)
class Range:
    min: Optional[Number] = None
    max: Optional[Number] = None

    kind: ClassVar[str] = "range"


@dataclass(frozen=True)
class Format:
    format: str

    kind: ClassVar[str] = "format"


@dataclass(frozen=True)
class Custom:
    """
    A named validation rule the core does not interpret.

    ``params`` may carry per-language spellings, e.g. ``{"python": "mod.func"}``.
    """

    name: str
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)

    kind: ClassVar[str] = "custom"


Constraint = Union[NotBlank, Pattern, Size, Range, Format, Custom]

CONSTRAINT_TYPES = (NotBlank, Pattern, Size, Range, Format, Custom)


def _is_plain_string(descriptor: TypeDescriptor) -> bool:
    return descriptor.base_kind is BaseKind.STRING and not descriptor.is_collection


def _is_sized(descriptor: TypeDescriptor) -> bool:
    if descriptor.is_collection:
        return True
    return descriptor.base_kind in (BaseKind.STRING, BaseKind.BINARY)


def _is_numeric(descriptor: TypeDescriptor) -> bool:
    return descriptor.base_kind in NUMERIC_KINDS and not descriptor.is_collection


def _type_constraints(item: ResolvedField) -> Tuple[Any, ...]:
    effective = item.effective_type
    return effective.constraints if isinstance(effective, Primitive) else ()


def _describe_target(descriptor: TypeDescriptor) -> str:
    if descriptor.is_collection:
        return f"{descriptor.collection_shape.value} of {descriptor.base_kind.value}"
    return descriptor.base_kind.value


@dataclass(frozen=True)
class ConstraintTable:
    """Mapped constraints per (type id, field name)."""

    entries: Mapping[str, Mapping[str, Tuple[Constraint, ...]]]

    def __post_init__(self):
        frozen = {
            type_id: MappingProxyType(dict(fields)) for type_id, fields in self.entries.items()
        }
        object.__setattr__(self, "entries", MappingProxyType(frozen))

    def get(self, type_id: str, field_name: str) -> Tuple[Constraint, ...]:
        return self.entries.get(type_id, {}).get(field_name, ())

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return sum(len(fields) for fields in self.entries.values())


class ConstraintMapper:
    """Maps resolved fields to ordered, type-checked constraint lists."""

    def __init__(self, infer_not_blank: bool = False):
        """
        Initialize the mapper.

        Args:
            infer_not_blank: Prepend NotBlank to every non-nullable plain
                string field that does not declare it
        """
        self.infer_not_blank = infer_not_blank

    def map(self, item: ResolvedField, type_id: Optional[str] = None, scope=None) -> Tuple[Constraint, ...]:
        """
        Map one field to its constraints.

        The order is: inferred NotBlank, constraints of a referenced named
        primitive, declared constraints in source order, then derived Format
        and Size constraints.

        Raises:
            UnsupportedFacetError: A constraint conflicts with the field type,
                is malformed, or its kind appears twice
        """
        owner = type_id or item.declared_in
        descriptor = item.descriptor
        declared = list(_type_constraints(item)) + list(item.source.constraints)

        for constraint in declared:
            if not isinstance(constraint, CONSTRAINT_TYPES):
                raise SchemaError(
                    f"Field '{item.name}' declares an unknown constraint {constraint!r}",
                    type_id=owner,
                    scope=scope,
                )

        constraints: List[Constraint] = []
        if (
            self.infer_not_blank
            and _is_plain_string(descriptor)
            and not descriptor.nullable
            and not any(isinstance(c, NotBlank) for c in declared)
        ):
            constraints.append(NotBlank())

        constraints.extend(declared)
        constraints.extend(self._derived(item))

        seen: Dict[str, Constraint] = {}
        for constraint in constraints:
            if constraint.kind in seen:
                raise UnsupportedFacetError(
                    f"Field '{item.name}' has more than one {constraint.kind} constraint",
                    type_id=owner,
                    scope=scope,
                )
            seen[constraint.kind] = constraint
            self._check(item, constraint, owner, scope)

        return tuple(constraints)

    def map_tree(self, tree: DescriptorTree) -> ConstraintTable:
        """Map every field of every object type in the tree."""
        entries: Dict[str, Dict[str, Tuple[Constraint, ...]]] = {}
        for node in tree.objects():
            entries[node.type_id] = {
                item.name: self.map(item, node.type_id, node.scope) for item in node.fields
            }
            logger.debug("Mapped constraints for %s", node.type_id)

        table = ConstraintTable(entries)
        logger.info("Mapped %d field constraint lists", len(table))
        return table

    def _derived(self, item: ResolvedField) -> List[Constraint]:
        derived: List[Constraint] = []
        effective = item.effective_type

        if (
            isinstance(effective, Primitive)
            and effective.kind is PrimitiveKind.STRING
            and (effective.format or "").lower() in DERIVED_FORMATS
        ):
            derived.append(Format(effective.format.lower()))

        if isinstance(effective, ArrayType) and (
            effective.min_items is not None or effective.max_items is not None
        ):
            derived.append(Size(effective.min_items, effective.max_items))

        return derived

    def _check(self, item: ResolvedField, constraint: Constraint, owner: str, scope):
        descriptor = item.descriptor

        def fail(reason: str):
            raise UnsupportedFacetError(
                f"Field '{item.name}' ({_describe_target(descriptor)}): {reason}",
                type_id=owner,
                scope=scope,
            )

        if isinstance(constraint, (NotBlank, Pattern, Format)):
            if not _is_plain_string(descriptor):
                fail(f"{constraint.kind} requires a string type")
        elif isinstance(constraint, Size):
            if not _is_sized(descriptor):
                fail("size requires a string, binary or collection type")
        elif isinstance(constraint, Range):
            if not _is_numeric(descriptor):
                fail("range requires a numeric type")

        if isinstance(constraint, Pattern):
            try:
                re.compile(constraint.regex)
            except re.error as e:
                fail(f"invalid pattern {constraint.regex!r}: {e}")

        if isinstance(constraint, (Size, Range)):
            if constraint.min is None and constraint.max is None:
                fail(f"{constraint.kind} without bounds")
            if constraint.min is not None and constraint.max is not None and constraint.min > constraint.max:
                fail(f"{constraint.kind} minimum {constraint.min} exceeds maximum {constraint.max}")
            if isinstance(constraint, Size) and constraint.min is not None and constraint.min < 0:
                fail("size minimum must not be negative")

        if isinstance(constraint, Format) and not constraint.format:
            fail("format without a name")
        if isinstance(constraint, Custom) and not constraint.name:
            fail("custom constraint without a name")
