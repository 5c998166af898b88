"""
Type resolution for code generation.

Walks the SchemaGraph and produces a DescriptorTree: an arena of resolved
types indexed by type id. Object-to-object relations are kept as named
links (type id lookups) and never inlined, so self-referential and
mutually-referential schemas resolve in a single pass. Aliases (top-level
primitive, array, map or reference definitions) are inlined into the
fields that use them.
"""

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Set, Tuple, Union

from ..logging_config import get_logger
from .errors import CyclicCompositionError, DuplicateDefinitionError, SchemaError
from .schema import (
    ArrayType,
    EnumType,
    Field,
    MapType,
    NamespaceScope,
    ObjectType,
    Primitive,
    PrimitiveKind,
    Reference,
    SchemaGraph,
    SchemaType,
)

logger = get_logger(__name__)


class BaseKind(Enum):
    """Language-neutral base kinds of resolved fields."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "date-time"
    DURATION = "duration"
    UUID = "uuid"
    URI = "uri"
    BINARY = "binary"
    OBJECT = "object"
    ENUM = "enum"


NUMERIC_KINDS = frozenset(
    {BaseKind.INT32, BaseKind.INT64, BaseKind.FLOAT, BaseKind.DOUBLE, BaseKind.DECIMAL}
)

STRING_FORMAT_KINDS = {
    "date": BaseKind.DATE,
    "date-time": BaseKind.DATE_TIME,
    "duration": BaseKind.DURATION,
    "uuid": BaseKind.UUID,
    "uri": BaseKind.URI,
    "binary": BaseKind.BINARY,
    "byte": BaseKind.BINARY,
}


class CollectionShape(Enum):
    NONE = "none"
    LIST = "list"
    SET = "set"
    MAP = "map"


class Optionality(Enum):
    PRESENT = "present"
    NULLABLE = "nullable"


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Resolved, language-neutral type of one field (or collection item).

    For collections, ``item`` holds the element (or map value) descriptor and
    ``base_kind`` / ``referenced_type`` repeat the innermost element's.
    """

    base_kind: BaseKind
    optionality: Optionality = Optionality.PRESENT
    collection_shape: CollectionShape = CollectionShape.NONE
    referenced_type: Optional[str] = None
    item: Optional["TypeDescriptor"] = None
    schema_format: Optional[str] = None
    recursive: bool = False  # link closes a reference cycle

    @property
    def nullable(self) -> bool:
        return self.optionality is Optionality.NULLABLE

    @property
    def is_collection(self) -> bool:
        return self.collection_shape is not CollectionShape.NONE

    @property
    def is_link(self) -> bool:
        """Direct (non-collection) named link to an object or enum."""
        return not self.is_collection and self.referenced_type is not None

    def with_optionality(self, optionality: Optionality) -> "TypeDescriptor":
        return replace(self, optionality=optionality)

    def leaf(self) -> "TypeDescriptor":
        descriptor = self
        while descriptor.item is not None:
            descriptor = descriptor.item
        return descriptor

    def references(self) -> Iterator[str]:
        """All type ids linked from this descriptor, items included."""
        if self.item is not None:
            yield from self.item.references()
        elif self.referenced_type is not None:
            yield self.referenced_type


@dataclass(frozen=True)
class ResolvedField:
    name: str
    descriptor: TypeDescriptor
    effective_type: SchemaType  # declared type with aliases followed
    source: Field
    declared_in: str

    @property
    def description(self) -> Optional[str]:
        return self.source.description

    @property
    def default(self):
        return self.source.default

    @property
    def deprecated(self) -> bool:
        return self.source.deprecated

    @property
    def deprecation_message(self) -> Optional[str]:
        return self.source.deprecation_message


@dataclass(frozen=True)
class ResolvedObject:
    type_id: str
    name: str
    scope: NamespaceScope
    fields: Tuple[ResolvedField, ...]
    description: Optional[str] = None
    deprecated: bool = False
    deprecation_message: Optional[str] = None

    kind = "object"

    def get_field(self, name: str) -> Optional[ResolvedField]:
        for item in self.fields:
            if item.name == name:
                return item
        return None


@dataclass(frozen=True)
class ResolvedEnum:
    type_id: str
    name: str
    scope: NamespaceScope
    variants: Tuple[str, ...]
    description: Optional[str] = None
    deprecated: bool = False
    deprecation_message: Optional[str] = None

    kind = "enum"


@dataclass(frozen=True)
class ResolvedAlias:
    """A top-level non-named definition; inlined where used, never rendered."""

    type_id: str
    name: str
    scope: NamespaceScope
    descriptor: TypeDescriptor
    effective_type: SchemaType

    kind = "alias"


ResolvedNode = Union[ResolvedObject, ResolvedEnum, ResolvedAlias]


@dataclass(frozen=True)
class DescriptorTree:
    """Arena of resolved types, one node per declared type, in graph order."""

    nodes: Mapping[str, ResolvedNode]

    def __post_init__(self):
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def __getitem__(self, type_id: str) -> ResolvedNode:
        return self.nodes[type_id]

    def __contains__(self, type_id: str) -> bool:
        return type_id in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, type_id: str) -> Optional[ResolvedNode]:
        return self.nodes.get(type_id)

    def objects(self) -> List[ResolvedObject]:
        return [node for node in self.nodes.values() if isinstance(node, ResolvedObject)]

    def enums(self) -> List[ResolvedEnum]:
        return [node for node in self.nodes.values() if isinstance(node, ResolvedEnum)]

    def renderable(self) -> List[Union[ResolvedObject, ResolvedEnum]]:
        """Objects and enums in declaration order."""
        return [
            node
            for node in self.nodes.values()
            if isinstance(node, (ResolvedObject, ResolvedEnum))
        ]

    def references_of(self, type_id: str) -> Set[str]:
        """Type ids directly linked from the fields of a type."""
        node = self.nodes[type_id]
        if not isinstance(node, ResolvedObject):
            return set()
        return {ref for item in node.fields for ref in item.descriptor.references()}


def compute_nullability(required: bool, nullable_by_schema: bool, has_default: bool) -> bool:
    """
    Decide whether a field is absent-capable.

    An optional field is nullable unless it has a default; a required field
    is nullable only when the schema marks it nullable explicitly.
    """
    if required:
        return nullable_by_schema
    return not has_default


def primitive_base_kind(primitive: Primitive) -> BaseKind:
    """Map a primitive type and format onto a base kind."""
    fmt = (primitive.format or "").lower()
    if primitive.kind is PrimitiveKind.STRING:
        return STRING_FORMAT_KINDS.get(fmt, BaseKind.STRING)
    if primitive.kind is PrimitiveKind.INTEGER:
        return BaseKind.INT64 if fmt == "int64" else BaseKind.INT32
    if primitive.kind is PrimitiveKind.NUMBER:
        if fmt == "float":
            return BaseKind.FLOAT
        if fmt == "double":
            return BaseKind.DOUBLE
        return BaseKind.DECIMAL
    return BaseKind.BOOLEAN


class TypeResolver:
    """Resolves a SchemaGraph into a DescriptorTree."""

    def resolve(self, graph: SchemaGraph) -> DescriptorTree:
        """
        Resolve every definition of the graph.

        Raises:
            UnresolvedReferenceError: A reference has no matching definition
            CyclicCompositionError: A type contains itself through required,
                non-collection links, or an alias/composition chain loops
            DuplicateDefinitionError: Composition contributes a field twice
        """
        tree = _ResolutionRun(graph).execute()
        logger.info(
            "Resolved %d types (%d objects, %d enums)",
            len(tree),
            len(tree.objects()),
            len(tree.enums()),
        )
        return tree


def resolve(graph: SchemaGraph) -> DescriptorTree:
    """Convenience function to resolve a graph."""
    return TypeResolver().resolve(graph)


class _ResolutionRun:
    """State of one resolution; discarded when the tree is built."""

    def __init__(self, graph: SchemaGraph):
        self.graph = graph
        self.nodes: Dict[str, ResolvedNode] = {}
        self.in_progress: List[str] = []

    def execute(self) -> DescriptorTree:
        for type_id in self.graph:
            self.node(type_id)

        ordered = {type_id: self.nodes[type_id] for type_id in self.graph}
        ordered = self._mark_recursive_links(ordered)
        self._check_containment_cycles(ordered)
        return DescriptorTree(ordered)

    def node(self, type_id: str, referrer: Optional[str] = None) -> ResolvedNode:
        if type_id in self.nodes:
            return self.nodes[type_id]

        definition = self.graph.lookup(type_id, referrer)

        if type_id in self.in_progress:
            cycle = self.in_progress[self.in_progress.index(type_id):] + [type_id]
            raise CyclicCompositionError(
                f"Definition contains itself: {' -> '.join(cycle)}",
                type_id=type_id,
                scope=self.graph.scope_of(type_id),
            )

        self.in_progress.append(type_id)
        try:
            node = self._resolve_definition(type_id, definition)
        finally:
            self.in_progress.pop()

        self.nodes[type_id] = node
        logger.debug("Resolved %s %s", node.kind, type_id)
        return node

    def _resolve_definition(self, type_id: str, definition: SchemaType) -> ResolvedNode:
        scope = self.graph.scope_of(type_id)

        if isinstance(definition, ObjectType):
            return ResolvedObject(
                type_id=type_id,
                name=definition.name,
                scope=scope,
                fields=self._object_fields(type_id, definition),
                description=definition.description,
                deprecated=definition.deprecated,
                deprecation_message=definition.deprecation_message,
            )

        if isinstance(definition, EnumType):
            seen = set()
            for variant in definition.variants:
                if variant in seen:
                    raise DuplicateDefinitionError(
                        f"Enum variant '{variant}' declared twice", type_id=type_id, scope=scope
                    )
                seen.add(variant)
            return ResolvedEnum(
                type_id=type_id,
                name=definition.name,
                scope=scope,
                variants=definition.variants,
                description=definition.description,
                deprecated=definition.deprecated,
                deprecation_message=definition.deprecation_message,
            )

        descriptor, effective = self._describe(definition, type_id)
        return ResolvedAlias(
            type_id=type_id,
            name=self.graph.name_of(type_id),
            scope=scope,
            descriptor=descriptor,
            effective_type=effective,
        )

    def _object_fields(self, type_id: str, definition: ObjectType) -> Tuple[ResolvedField, ...]:
        collected: List[ResolvedField] = []

        for part in definition.all_of:
            if isinstance(part, Reference):
                collected.extend(self._composition_part(type_id, part.target_id).fields)
            else:
                collected.extend(self._field(type_id, item) for item in part.fields)

        collected.extend(self._field(type_id, item) for item in definition.fields)

        seen = set()
        for item in collected:
            if item.name in seen:
                raise DuplicateDefinitionError(
                    f"Field '{item.name}' is defined more than once",
                    type_id=type_id,
                    scope=self.graph.scope_of(type_id),
                )
            seen.add(item.name)

        return tuple(collected)

    def _composition_part(self, owner: str, target_id: str) -> ResolvedObject:
        node = self.node(target_id, referrer=owner)
        if isinstance(node, ResolvedAlias) and node.descriptor.is_link:
            return self._composition_part(owner, node.descriptor.referenced_type)
        if not isinstance(node, ResolvedObject):
            raise SchemaError(
                f"Composition part '{target_id}' is not an object type",
                type_id=owner,
                scope=self.graph.scope_of(owner),
            )
        return node

    def _field(self, owner: str, item: Field) -> ResolvedField:
        descriptor, effective = self._describe(item.type, owner)
        nullable = compute_nullability(item.required, item.nullable, item.has_default)
        descriptor = descriptor.with_optionality(
            Optionality.NULLABLE if nullable else Optionality.PRESENT
        )
        return ResolvedField(
            name=item.name,
            descriptor=descriptor,
            effective_type=effective,
            source=item,
            declared_in=owner,
        )

    def _describe(self, schema_type: SchemaType, owner: str) -> Tuple[TypeDescriptor, SchemaType]:
        if isinstance(schema_type, Primitive):
            return (
                TypeDescriptor(
                    base_kind=primitive_base_kind(schema_type),
                    schema_format=schema_type.format,
                ),
                schema_type,
            )

        if isinstance(schema_type, ArrayType):
            item, _ = self._describe(schema_type.element_type, owner)
            shape = CollectionShape.SET if schema_type.unique_items else CollectionShape.LIST
            return self._collection(item, shape), schema_type

        if isinstance(schema_type, MapType):
            item, _ = self._describe(schema_type.value_type, owner)
            return self._collection(item, CollectionShape.MAP), schema_type

        if isinstance(schema_type, Reference):
            target_id = schema_type.target_id
            target = self.graph.lookup(target_id, referrer=owner)
            if isinstance(target, ObjectType):
                return TypeDescriptor(BaseKind.OBJECT, referenced_type=target_id), schema_type
            if isinstance(target, EnumType):
                return TypeDescriptor(BaseKind.ENUM, referenced_type=target_id), schema_type
            alias = self.node(target_id, referrer=owner)
            return alias.descriptor, alias.effective_type

        raise SchemaError(
            f"Unexpected inline {type(schema_type).__name__}",
            type_id=owner,
            scope=self.graph.scope_of(owner),
        )

    @staticmethod
    def _collection(item: TypeDescriptor, shape: CollectionShape) -> TypeDescriptor:
        leaf = item.leaf()
        return TypeDescriptor(
            base_kind=leaf.base_kind,
            collection_shape=shape,
            referenced_type=leaf.referenced_type,
            item=item,
            schema_format=leaf.schema_format,
        )

    def _mark_recursive_links(self, nodes: Dict[str, ResolvedNode]) -> Dict[str, ResolvedNode]:
        """Flag links whose target can reach back to the owning type."""
        edges: Dict[str, Set[str]] = {}
        for type_id, node in nodes.items():
            if isinstance(node, ResolvedObject):
                edges[type_id] = {
                    ref
                    for item in node.fields
                    for ref in item.descriptor.references()
                    if isinstance(nodes.get(ref), ResolvedObject)
                }

        reachable_cache: Dict[str, Set[str]] = {}

        def reachable(start: str) -> Set[str]:
            if start not in reachable_cache:
                seen: Set[str] = set()
                pending = list(edges.get(start, ()))
                while pending:
                    current = pending.pop()
                    if current in seen:
                        continue
                    seen.add(current)
                    pending.extend(edges.get(current, ()))
                reachable_cache[start] = seen
            return reachable_cache[start]

        marked: Dict[str, ResolvedNode] = {}
        for type_id, node in nodes.items():
            if isinstance(node, ResolvedObject) and edges[type_id]:
                fields = tuple(
                    replace(
                        item,
                        descriptor=_mark_links(
                            item.descriptor, lambda target: type_id in reachable(target)
                        ),
                    )
                    for item in node.fields
                )
                node = replace(node, fields=fields)
            marked[type_id] = node
        return marked

    def _check_containment_cycles(self, nodes: Dict[str, ResolvedNode]):
        """A required, non-collection chain of links back to a type is an infinite value."""
        edges: Dict[str, List[str]] = {}
        for type_id, node in nodes.items():
            if isinstance(node, ResolvedObject):
                edges[type_id] = [
                    item.descriptor.referenced_type
                    for item in node.fields
                    if item.descriptor.is_link
                    and item.descriptor.base_kind is BaseKind.OBJECT
                    and not item.descriptor.nullable
                ]

        cycle = _find_cycle(edges)
        if cycle:
            raise CyclicCompositionError(
                f"Type contains itself through required fields: {' -> '.join(cycle)}",
                type_id=cycle[0],
                scope=self.graph.scope_of(cycle[0]),
            )


def _mark_links(descriptor: TypeDescriptor, is_recursive: Callable[[str], bool]) -> TypeDescriptor:
    if descriptor.item is not None:
        item = _mark_links(descriptor.item, is_recursive)
        return replace(descriptor, item=item, recursive=item.leaf().recursive)
    if descriptor.base_kind is BaseKind.OBJECT and descriptor.referenced_type:
        return replace(descriptor, recursive=is_recursive(descriptor.referenced_type))
    return descriptor


def _find_cycle(edges: Dict[str, List[str]]) -> Optional[List[str]]:
    """Iterative depth-first search; returns the first cycle found as a path."""
    white, grey, black = 0, 1, 2
    color = {node: white for node in edges}

    for root in edges:
        if color[root] != white:
            continue
        color[root] = grey
        path = [root]
        stack = [iter(edges[root])]

        while stack:
            advanced = False
            for child in stack[-1]:
                state = color.get(child, black)
                if state == grey:
                    return path[path.index(child):] + [child]
                if state == white:
                    color[child] = grey
                    path.append(child)
                    stack.append(iter(edges[child]))
                    advanced = True
                    break
            if not advanced:
                color[path.pop()] = black
                stack.pop()

    return None
