"""
Kotlin type mapping and literals.
"""

import re
from typing import Callable, Dict

from ...core.errors import UnsupportedTargetMappingError
from ...core.generator import RenderContext
from ...core.resolver import BaseKind, CollectionShape, ResolvedField
from ...core.templates import quote_string
from ..java.types import ImportSet

KOTLIN_SCALAR_TYPES: Dict[BaseKind, str] = {
    BaseKind.STRING: "String",
    BaseKind.INT32: "Int",
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
    BaseKind.BINARY: "ByteArray",
}

KOTLIN_COLLECTION_TYPES: Dict[CollectionShape, str] = {
    CollectionShape.LIST: "List",
    CollectionShape.SET: "Set",
    CollectionShape.MAP: "Map",
}

KOTLIN_IMPLICIT_PACKAGES = {"kotlin", "kotlin.collections", "java.lang"}

PARSED_KINDS = {
    BaseKind.DATE: "parse",
    BaseKind.DATE_TIME: "parse",
    BaseKind.DURATION: "parse",
    BaseKind.UUID: "fromString",
    BaseKind.URI: "create",
}


def kotlin_string(value) -> str:
    """String literal with template expressions escaped."""
    return re.sub(r"\$(?=[A-Za-z_{])", r"\\$", quote_string(value))


def default_literal(
    item: ResolvedField,
    context: RenderContext,
    imports: ImportSet,
    fail: Callable[[str], UnsupportedTargetMappingError],
) -> str:
    """
    Kotlin initializer expression of a field default.

    Raises:
        UnsupportedTargetMappingError: For collection, object and binary
            defaults, or values that do not fit the field type
    """
    value = item.default
    descriptor = item.descriptor
    kind = descriptor.base_kind

    if descriptor.is_collection or isinstance(value, (list, dict)) or kind in (BaseKind.OBJECT, BaseKind.BINARY):
        raise fail(f"field '{item.name}' has a non-scalar default {value!r}")

    if kind is BaseKind.ENUM:
        name = context.name(descriptor.referenced_type)
        variant = name.variant_names.get(str(value))
        if variant is None:
            raise fail(f"default {value!r} of field '{item.name}' is not a variant of {name.type_name}")
        return f"{imports.use(name.qualified_name)}.{variant}"

    try:
        if kind is BaseKind.STRING:
            return kotlin_string(value)
        if kind is BaseKind.BOOLEAN:
            if not isinstance(value, bool):
                raise ValueError(value)
            return "true" if value else "false"
        if kind in (BaseKind.INT32, BaseKind.INT64):
            if isinstance(value, bool) or int(value) != value:
                raise ValueError(value)
            return str(int(value)) if kind is BaseKind.INT32 else f"{int(value)}L"
        if kind is BaseKind.FLOAT:
            return f"{float(value)}f"
        if kind is BaseKind.DOUBLE:
            return repr(float(value))
        if kind is BaseKind.DECIMAL:
            return f"{imports.use(KOTLIN_SCALAR_TYPES[kind])}({kotlin_string(value)})"
    except (ArithmeticError, TypeError, ValueError):
        raise fail(f"default {value!r} of field '{item.name}' does not match its type") from None

    factory = PARSED_KINDS[kind]
    return f"{imports.use(KOTLIN_SCALAR_TYPES[kind])}.{factory}({kotlin_string(value)})"
