"""
Go-specific type system for code generation.

Maps resolved descriptors onto Go types, struct tags and imports. Types
of other namespaces are imported as packages under an alias built from
their namespace path.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from ...core.constraints import Constraint, Custom, Format, NotBlank, Pattern, Range, Size
from ...core.errors import UnsupportedTargetMappingError
from ...core.generator import RenderContext
from ...core.resolver import NUMERIC_KINDS, BaseKind, CollectionShape, ResolvedField, TypeDescriptor
from ...core.templates import quote_string as go_string


@dataclass(frozen=True)
class GoType:
    """
    Immutable representation of a Go type with its metadata.

    Carries everything needed to write a struct field: the type expression,
    the imports it needs and the validation rules implied by the type.
    """

    name: str  # The Go type expression (e.g., "string", "*UserDto")
    base_name: str = field(default="")  # Name without pointer
    is_pointer: bool = field(default=False)
    imports_needed: FrozenSet[str] = field(default_factory=frozenset)
    type_rules: Tuple[str, ...] = field(default=())  # validate rules implied by the type

    def __post_init__(self):
        if not self.base_name:
            object.__setattr__(self, "base_name", self.name.lstrip("*"))

    def as_pointer(self) -> "GoType":
        """Return a pointer version of this type."""
        if self.is_pointer:
            return self

        return GoType(
            name=f"*{self.name}",
            base_name=self.base_name,
            is_pointer=True,
            imports_needed=self.imports_needed,
            type_rules=self.type_rules,
        )


GO_SCALAR_TYPES: Dict[BaseKind, GoType] = {
    BaseKind.STRING: GoType("string"),
    BaseKind.INT32: GoType("int32"),
    BaseKind.INT64: GoType("int64"),
    BaseKind.FLOAT: GoType("float32"),
    BaseKind.DOUBLE: GoType("float64"),
    BaseKind.DECIMAL: GoType("float64"),
    BaseKind.BOOLEAN: GoType("bool"),
    BaseKind.DATE: GoType("string", type_rules=("datetime=2006-01-02",)),
    BaseKind.DATE_TIME: GoType("time.Time", imports_needed=frozenset({"time"})),
    BaseKind.DURATION: GoType("string"),
    BaseKind.UUID: GoType("string", type_rules=("uuid",)),
    BaseKind.URI: GoType("string", type_rules=("uri",)),
    BaseKind.BINARY: GoType("[]byte"),
}

# Kinds whose zero value is valid data; never tagged "required"
VALUE_KINDS = NUMERIC_KINDS | {BaseKind.BOOLEAN}

FORMAT_RULES = {
    "email": "email",
    "hostname": "hostname",
    "ipv4": "ipv4",
    "ipv6": "ipv6",
}


def package_alias(namespace: Sequence[str], root_length: int) -> str:
    """Import alias of a namespace: its segments below the root, joined."""
    segments = list(namespace[root_length:]) or list(namespace[-1:]) or ["model"]
    return re.sub(r"[^a-z0-9]", "", "".join(segments).lower()) or "model"


class GoImports:
    """Imports of one Go source file."""

    def __init__(self, module: str, namespace: Tuple[str, ...], root_length: int):
        self.module = module.rstrip("/")
        self.namespace = namespace
        self.root_length = root_length
        self.standard: Set[str] = set()
        self._packages: Dict[Tuple[str, ...], str] = {}
        self._aliases: Set[str] = set()

    def import_path(self, namespace: Tuple[str, ...]) -> str:
        path = "/".join(namespace)
        return f"{self.module}/{path}" if self.module else path

    def use_standard(self, path: str):
        self.standard.add(path)

    def qualify(self, namespace: Tuple[str, ...], type_name: str) -> str:
        """Type name as written in this file, importing its package."""
        if namespace == self.namespace:
            return type_name

        alias = self._packages.get(namespace)
        if alias is None:
            base = package_alias(namespace, self.root_length)
            alias = base
            counter = 2
            while alias in self._aliases:
                alias = f"{base}{counter}"
                counter += 1
            self._aliases.add(alias)
            self._packages[namespace] = alias
        return f"{alias}.{type_name}"

    def groups(self) -> List[List[str]]:
        """Standard library imports first, then generated packages."""
        standard = [go_string(path) for path in sorted(self.standard)]
        local = sorted(
            f"{alias} {go_string(self.import_path(namespace))}" for namespace, alias in self._packages.items()
        )
        return [group for group in (standard, local) if group]


class GoTypeMapper:
    """
    Central engine for mapping resolved fields to Go types and tags.
    """

    def __init__(self, context: RenderContext, imports: GoImports,
                 fail: Callable[[str], UnsupportedTargetMappingError]):
        self.context = context
        self.imports = imports
        self.fail = fail

    def map_descriptor(self, descriptor: TypeDescriptor) -> GoType:
        """Map a descriptor without considering optionality."""
        if descriptor.item is not None:
            inner = self.map_descriptor(descriptor.item)
            if descriptor.collection_shape is CollectionShape.MAP:
                name = f"map[string]{inner.name}"
            else:
                name = f"[]{inner.name}"
            return GoType(name, imports_needed=inner.imports_needed)

        if descriptor.referenced_type is not None:
            target = self.context.name(descriptor.referenced_type)
            return GoType(self.imports.qualify(target.namespace, target.type_name))

        return GO_SCALAR_TYPES[descriptor.base_kind]

    def map_field_type(self, item: ResolvedField) -> GoType:
        """
        Map a field to its Go type.

        Nullable scalars and links become pointers; slices and maps are
        already nilable.
        """
        go_type = self.map_descriptor(item.descriptor)
        for path in go_type.imports_needed:
            self.imports.use_standard(path)
        if item.descriptor.nullable and not item.descriptor.is_collection and go_type.name != "[]byte":
            go_type = go_type.as_pointer()
        return go_type

    def json_tag(self, item: ResolvedField) -> str:
        options = [item.name]
        if item.descriptor.nullable:
            options.append("omitempty")
        return f"json:{go_string(','.join(options))}"

    def validate_rules(self, item: ResolvedField, go_type: GoType, constraints: Sequence[Constraint]) -> List[str]:
        """
        Rules of the ``validate`` tag of a field.

        Raises:
            UnsupportedTargetMappingError: A constraint has no validator rule
        """
        descriptor = item.descriptor
        rules: List[str] = []

        if descriptor.nullable:
            rules.append("omitempty")
        elif descriptor.is_collection or descriptor.base_kind not in VALUE_KINDS:
            rules.append("required")

        if not descriptor.is_collection:
            rules.extend(go_type.type_rules)

        for constraint in constraints:
            for rule in self._rules(constraint, item):
                if rule not in rules:
                    rules.append(rule)

        if descriptor.collection_shape is CollectionShape.SET:
            rules.append("unique")
        if descriptor.is_collection and descriptor.leaf().base_kind is BaseKind.OBJECT:
            rules.append("dive")

        if rules == ["omitempty"]:
            return []
        return rules

    def _rules(self, constraint: Constraint, item: ResolvedField) -> List[str]:
        if isinstance(constraint, NotBlank):
            return ["min=1"] if item.descriptor.nullable else ["required"]

        if isinstance(constraint, Pattern):
            raise self.fail(f"field '{item.name}' has a pattern; the validator has no regular expression rule")

        if isinstance(constraint, Size):
            rules = []
            if constraint.min is not None:
                rules.append(f"min={constraint.min}")
            if constraint.max is not None:
                rules.append(f"max={constraint.max}")
            return rules

        if isinstance(constraint, Range):
            rules = []
            if constraint.min is not None:
                rules.append(f"gte={constraint.min}")
            if constraint.max is not None:
                rules.append(f"lte={constraint.max}")
            return rules

        if isinstance(constraint, Format):
            rule = FORMAT_RULES.get(constraint.format)
            if rule is None:
                raise self.fail(f"format '{constraint.format}' has no validator rule")
            return [rule]

        if isinstance(constraint, Custom):
            rule: Optional[str] = constraint.params.get("go")
            if not rule:
                raise self.fail(f"custom constraint '{constraint.name}' has no go validator rule")
            return [rule]

        raise self.fail(f"unknown constraint {constraint!r}")


def namespace_cycle(context: RenderContext, start: Tuple[str, ...]) -> Optional[List[Tuple[str, ...]]]:
    """
    Package import cycle through a namespace, if any.

    Returns:
        The namespaces of the cycle, starting and ending with ``start``
    """
    edges: Dict[Tuple[str, ...], Set[Tuple[str, ...]]] = {}
    for node in context.tree.objects():
        source = context.name(node.type_id).namespace
        for ref in context.tree.references_of(node.type_id):
            target = context.names.get(ref)
            if target is not None and target.namespace != source:
                edges.setdefault(source, set()).add(target.namespace)

    parents: Dict[Tuple[str, ...], Tuple[str, ...]] = {}
    pending = [start]
    while pending:
        current = pending.pop()
        for target in sorted(edges.get(current, ())):
            if target == start:
                path = [current]
                while path[-1] != start:
                    path.append(parents[path[-1]])
                return list(reversed(path)) + [start]
            if target not in parents:
                parents[target] = current
                pending.append(target)
    return None
