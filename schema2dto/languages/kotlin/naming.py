"""
Kotlin-specific naming utilities.

Handles Kotlin hard keywords and naming conventions.
"""

from ...core.naming import CasingPolicy, NamingCase


# Hard keywords cannot be used as identifiers without backticks
KOTLIN_RESERVED_WORDS = {
    "as",
    "break",
    "class",
    "continue",
    "do",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "in",
    "interface",
    "is",
    "null",
    "object",
    "package",
    "return",
    "super",
    "this",
    "throw",
    "true",
    "try",
    "typealias",
    "typeof",
    "val",
    "var",
    "when",
    "while",
}


def kotlin_casing() -> CasingPolicy:
    """Default naming rules for Kotlin data classes and enum classes."""
    return CasingPolicy(
        type_case=NamingCase.PASCAL_CASE,
        field_case=NamingCase.CAMEL_CASE,
        variant_case=NamingCase.ORIGINAL,
        namespace_case=NamingCase.SNAKE_CASE,
        file_case=NamingCase.ORIGINAL,
        reserved_words=frozenset(KOTLIN_RESERVED_WORDS),
    )
