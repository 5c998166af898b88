"""
Go-specific naming utilities.

Handles Go reserved words, builtins, and the naming rules of generated
packages, structs and constants.
"""

from ...core.naming import CasingPolicy, NamingCase


# Go reserved words
GO_RESERVED_WORDS = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Go builtin types and functions
GO_BUILTIN_TYPES = {
    "bool",
    "byte",
    "complex64",
    "complex128",
    "error",
    "float32",
    "float64",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "rune",
    "string",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
    "append",
    "cap",
    "close",
    "complex",
    "copy",
    "delete",
    "imag",
    "len",
    "make",
    "new",
    "panic",
    "print",
    "println",
    "real",
    "recover",
}


def go_casing() -> CasingPolicy:
    """
    Default naming rules for Go structs and string enums.

    Fields are exported; enum constants live in the package scope and are
    therefore prefixed with their type name.
    """
    return CasingPolicy(
        type_case=NamingCase.PASCAL_CASE,
        field_case=NamingCase.PASCAL_CASE,
        variant_case=NamingCase.PASCAL_CASE,
        namespace_case=NamingCase.SNAKE_CASE,
        file_case=NamingCase.SNAKE_CASE,
        reserved_words=frozenset(GO_RESERVED_WORDS),
        builtin_types=frozenset(GO_BUILTIN_TYPES),
        qualify_variants=True,
    )


def package_name(namespace) -> str:
    """Package clause of a namespace: its last segment."""
    return namespace[-1] if namespace else "model"
