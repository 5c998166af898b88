"""
Python type mapping for pydantic models.

Maps resolved descriptors onto annotations and collects the imports they
need. References that close a cycle are written as string annotations
and imported at the end of the module.
"""

import json
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set, Tuple

from ...core.constraints import Constraint, Custom, Format, NotBlank, Pattern, Range, Size
from ...core.errors import UnsupportedTargetMappingError
from ...core.generator import RenderContext
from ...core.resolver import BaseKind, CollectionShape, ResolvedField, TypeDescriptor

SCALAR_TYPES: Dict[BaseKind, Tuple[str, str]] = {
    BaseKind.STRING: ("", "str"),
    BaseKind.INT32: ("", "int"),
    BaseKind.INT64: ("", "int"),
    BaseKind.FLOAT: ("", "float"),
    BaseKind.DOUBLE: ("", "float"),
    BaseKind.DECIMAL: ("decimal", "Decimal"),
    BaseKind.BOOLEAN: ("", "bool"),
    BaseKind.DATE: ("datetime", "date"),
    BaseKind.DATE_TIME: ("datetime", "datetime"),
    BaseKind.DURATION: ("datetime", "timedelta"),
    BaseKind.UUID: ("uuid", "UUID"),
    BaseKind.URI: ("pydantic", "AnyUrl"),
    BaseKind.BINARY: ("", "bytes"),
}

# String formats expressed as dedicated types
FORMAT_TYPES: Dict[str, Tuple[str, str]] = {
    "email": ("pydantic", "EmailStr"),
    "ipv4": ("ipaddress", "IPv4Address"),
    "ipv6": ("ipaddress", "IPv6Address"),
}

PARSED_DEFAULTS = {
    BaseKind.DATE: ".fromisoformat",
    BaseKind.DATE_TIME: ".fromisoformat",
    BaseKind.UUID: "",
    BaseKind.URI: "",
}

UNPARSED_DEFAULT_KINDS = {BaseKind.OBJECT, BaseKind.BINARY, BaseKind.DURATION}

STDLIB_MODULES = {"datetime", "decimal", "enum", "ipaddress", "typing", "uuid"}
THIRD_PARTY_MODULES = {"annotated_types", "pydantic"}


def py_string(value) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(str(value), ensure_ascii=False)


class PythonImports:
    """Imports of one generated module."""

    def __init__(self, own_module: str, own_name: str):
        self._bound: Dict[str, Tuple[str, str]] = {own_name: (own_module, own_name)}
        self._imports: Dict[str, Set[str]] = {}
        self._deferred: Dict[str, Set[str]] = {}

    def use(self, module: str, name: str, deferred: bool = False) -> str:
        """
        Import a name from a module.

        Returns:
            The local name, aliased when the plain name is taken
        """
        if not module:
            return name

        key = (module, name)
        local = name
        counter = 2
        while local in self._bound and self._bound[local] != key:
            local = f"{name}{counter}"
            counter += 1

        if local not in self._bound:
            self._bound[local] = key
            target = self._deferred if deferred else self._imports
            target.setdefault(module, set()).add(name if local == name else f"{name} as {local}")
        return local

    def lines(self) -> List[str]:
        """Import statements in stdlib, third-party, local groups."""
        groups: List[List[str]] = [[], [], []]
        for module in sorted(self._imports):
            if module.split(".")[0] in STDLIB_MODULES:
                index = 0
            elif module.split(".")[0] in THIRD_PARTY_MODULES:
                index = 1
            else:
                index = 2
            groups[index].append(f"from {module} import {', '.join(sorted(self._imports[module]))}")

        result: List[str] = []
        for group in groups:
            if group:
                if result:
                    result.append("")
                result.extend(group)
        return result

    def deferred_lines(self) -> List[str]:
        return [f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(self._deferred.items())]


def _number(value, imports: PythonImports) -> str:
    if isinstance(value, Decimal):
        return f"{imports.use('decimal', 'Decimal')}({py_string(value)})"
    return repr(value)


class PythonTypeMapper:
    """Maps resolved fields onto pydantic annotations."""

    def __init__(self, context: RenderContext, imports: PythonImports, type_id: str,
                 fail: Callable[[str], UnsupportedTargetMappingError]):
        self.context = context
        self.imports = imports
        self.type_id = type_id
        self.fail = fail

    def reference(self, target_id: str, recursive: bool) -> str:
        name = self.context.name(target_id)
        if target_id == self.type_id:
            return py_string(name.type_name)
        if recursive:
            return py_string(self.imports.use(name.module, name.type_name, deferred=True))
        return self.imports.use(name.module, name.type_name)

    def type_expr(self, descriptor: TypeDescriptor) -> str:
        if descriptor.item is not None:
            if descriptor.collection_shape is CollectionShape.SET and descriptor.item.base_kind is BaseKind.OBJECT:
                raise self.fail("sets of models are not supported; models are not hashable")
            inner = self.type_expr(descriptor.item)
            if descriptor.collection_shape is CollectionShape.LIST:
                return f"list[{inner}]"
            if descriptor.collection_shape is CollectionShape.SET:
                return f"set[{inner}]"
            return f"dict[str, {inner}]"

        if descriptor.referenced_type is not None:
            return self.reference(descriptor.referenced_type, descriptor.recursive)

        module, name = SCALAR_TYPES[descriptor.base_kind]
        return self.imports.use(module, name)

    def annotation(self, item: ResolvedField, constraints: Tuple[Constraint, ...], validate: bool) -> str:
        """
        Full annotation of a field, constraint metadata included.

        Raises:
            UnsupportedTargetMappingError: A constraint has no pydantic form
        """
        descriptor = item.descriptor
        base = self.type_expr(descriptor)
        metadata: List[str] = []

        for constraint in constraints:
            if isinstance(constraint, Format):
                # The type carries the format even without validation metadata
                if constraint.format not in FORMAT_TYPES:
                    raise self.fail(f"format '{constraint.format}' has no pydantic type")
                base = self.imports.use(*FORMAT_TYPES[constraint.format])
            elif validate:
                metadata.append(self._metadata(constraint))

        if metadata:
            annotated = self.imports.use("typing", "Annotated")
            base = f"{annotated}[{base}, {', '.join(metadata)}]"

        if descriptor.nullable:
            # A forward reference cannot take part in a runtime union
            if base.startswith('"'):
                return f'"{base[1:-1]} | None"'
            return f"{base} | None"
        return base

    def default(self, item: ResolvedField) -> str:
        """
        Python expression of a field default.

        Raises:
            UnsupportedTargetMappingError: For collection, object, binary and
                duration defaults, or values that do not fit the field type
        """
        value = item.default
        descriptor = item.descriptor
        kind = descriptor.base_kind

        if descriptor.is_collection or isinstance(value, (list, dict)) or kind in UNPARSED_DEFAULT_KINDS:
            raise self.fail(f"field '{item.name}' has an unsupported default {value!r}")

        if kind is BaseKind.ENUM:
            name = self.context.name(descriptor.referenced_type)
            variant = name.variant_names.get(str(value))
            if variant is None:
                raise self.fail(f"default {value!r} of field '{item.name}' is not a variant of {name.type_name}")
            return f"{self.imports.use(name.module, name.type_name)}.{variant}"

        try:
            if kind is BaseKind.STRING:
                return py_string(value)
            if kind is BaseKind.BOOLEAN:
                if not isinstance(value, bool):
                    raise ValueError(value)
                return repr(value)
            if kind in (BaseKind.INT32, BaseKind.INT64):
                if isinstance(value, bool) or int(value) != value:
                    raise ValueError(value)
                return repr(int(value))
            if kind in (BaseKind.FLOAT, BaseKind.DOUBLE):
                return repr(float(value))
            if kind is BaseKind.DECIMAL:
                return f"{self.imports.use('decimal', 'Decimal')}({py_string(Decimal(str(value)))})"
        except (ArithmeticError, TypeError, ValueError):
            raise self.fail(f"default {value!r} of field '{item.name}' does not match its type") from None

        module, name = SCALAR_TYPES[kind]
        factory = PARSED_DEFAULTS[kind]
        return f"{self.imports.use(module, name)}{factory}({py_string(value)})"

    def _metadata(self, constraint: Constraint) -> str:
        if isinstance(constraint, NotBlank):
            # Truthy for non-blank strings
            return f"{self.imports.use('annotated_types', 'Predicate')}(str.strip)"

        if isinstance(constraint, Pattern):
            return f"{self.imports.use('pydantic', 'StringConstraints')}(pattern={py_string(constraint.regex)})"

        if isinstance(constraint, Size):
            length = self.imports.use("annotated_types", "Len")
            if constraint.max is None:
                return f"{length}({constraint.min})"
            return f"{length}({constraint.min or 0}, {constraint.max})"

        if isinstance(constraint, Range):
            bounds = []
            if constraint.min is not None:
                bounds.append(f"ge={_number(constraint.min, self.imports)}")
            if constraint.max is not None:
                bounds.append(f"le={_number(constraint.max, self.imports)}")
            return f"{self.imports.use('annotated_types', 'Interval')}({', '.join(bounds)})"

        if isinstance(constraint, Custom):
            target: Optional[str] = constraint.params.get("python")
            if not target or "." not in target:
                raise self.fail(f"custom constraint '{constraint.name}' has no python validator")
            module, _, function = target.rpartition(".")
            validator = self.imports.use(module, function)
            return f"{self.imports.use('pydantic', 'AfterValidator')}({validator})"

        raise self.fail(f"unknown constraint {constraint!r}")
