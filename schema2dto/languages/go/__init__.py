"""
Go code generator module.

Generates structs with json and validate tags, and string enums.
"""

from .generator import GoRenderer
from .naming import GO_BUILTIN_TYPES, GO_RESERVED_WORDS, go_casing
from .types import GoImports, GoType, GoTypeMapper

__all__ = [
    "GoRenderer",
    "GO_BUILTIN_TYPES",
    "GO_RESERVED_WORDS",
    "go_casing",
    "GoImports",
    "GoType",
    "GoTypeMapper",
]
