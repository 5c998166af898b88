"""
JVM type mapping for Java and Kotlin renderers.

Maps resolved descriptors onto type expressions and tracks the imports
they need, falling back to fully qualified names when two referenced
types share a simple name.
"""

from typing import Callable, Dict, List, Optional

from ...core.generator import RenderContext
from ...core.resolver import BaseKind, CollectionShape, TypeDescriptor

# Unqualified names need no import
JAVA_SCALAR_TYPES: Dict[BaseKind, str] = {
    BaseKind.STRING: "String",
    BaseKind.INT32: "Integer",
    BaseKind.INT64: "Long",
    BaseKind.FLOAT: "Float",
    BaseKind.DOUBLE: "Double",
    BaseKind.DECIMAL: "java.math.BigDecimal",
    BaseKind.BOOLEAN: "Boolean",
    BaseKind.DATE: "java.time.LocalDate",
    BaseKind.DATE_TIME: "java.time.LocalDateTime",
    BaseKind.DURATION: "java.time.Duration",
    BaseKind.UUID: "java.util.UUID",
    BaseKind.URI: "java.net.URI",
    BaseKind.BINARY: "byte[]",
}

JAVA_COLLECTION_TYPES: Dict[CollectionShape, str] = {
    CollectionShape.LIST: "java.util.List",
    CollectionShape.SET: "java.util.Set",
    CollectionShape.MAP: "java.util.Map",
}

IMPLICIT_PACKAGES = {"java.lang"}


class ImportSet:
    """Imports of one JVM source file."""

    def __init__(self, package: str, own_name: str, implicit_packages=IMPLICIT_PACKAGES):
        self.package = package
        self.implicit_packages = frozenset(implicit_packages)
        self.imports = set()
        self._simple_names: Dict[str, str] = {own_name: f"{package}.{own_name}" if package else own_name}

    def use(self, qualified: str) -> str:
        """
        Reference a type, importing it when its simple name is free.

        Returns:
            The name to write in source: simple if imported or local,
            fully qualified otherwise
        """
        package, _, simple = qualified.rpartition(".")
        if not package:
            return qualified

        existing = self._simple_names.get(simple)
        if existing is not None:
            return simple if existing == qualified else qualified

        self._simple_names[simple] = qualified
        if package != self.package and package not in self.implicit_packages:
            self.imports.add(qualified)
        return simple

    def sorted_imports(self) -> List[str]:
        return sorted(self.imports)

    def java_groups(self) -> List[List[str]]:
        """Third-party imports first, then the java.* group."""
        others = sorted(imp for imp in self.imports if not imp.startswith("java."))
        java = sorted(imp for imp in self.imports if imp.startswith("java."))
        return [group for group in (others, java) if group]


class JvmTypeMapper:
    """Maps descriptors onto JVM type expressions."""

    def __init__(
        self,
        context: RenderContext,
        imports: ImportSet,
        scalar_types: Dict[BaseKind, str] = None,
        collection_types: Dict[CollectionShape, str] = None,
        item_annotation: Optional[Callable[[TypeDescriptor], str]] = None,
    ):
        """
        Initialize the mapper.

        Args:
            context: Render context for cross-type name lookups
            imports: Import set of the file being rendered
            scalar_types: Base kind to (qualified) type name
            collection_types: Collection shape to (qualified) generic type
            item_annotation: Annotation text placed before collection
                element types, e.g. ``@NotNull``
        """
        self.context = context
        self.imports = imports
        self.scalar_types = scalar_types or JAVA_SCALAR_TYPES
        self.collection_types = collection_types or JAVA_COLLECTION_TYPES
        self.item_annotation = item_annotation

    def type_expr(self, descriptor: TypeDescriptor) -> str:
        if descriptor.item is not None:
            inner = self.type_expr(descriptor.item)
            annotation = self.item_annotation(descriptor.item) if self.item_annotation else ""
            if annotation:
                inner = f"{annotation} {inner}"
            generic = self.imports.use(self.collection_types[descriptor.collection_shape])
            if descriptor.collection_shape is CollectionShape.MAP:
                return f"{generic}<{self.imports.use(self.scalar_types[BaseKind.STRING])}, {inner}>"
            return f"{generic}<{inner}>"

        if descriptor.referenced_type is not None:
            return self.imports.use(self.context.name(descriptor.referenced_type).qualified_name)

        return self.imports.use(self.scalar_types[descriptor.base_kind])
