"""
Java-specific naming utilities.

Handles Java reserved words and naming conventions.
"""

from ...core.naming import CasingPolicy, NamingCase


# Java reserved words and literals
JAVA_RESERVED_WORDS = {
    "abstract",
    "assert",
    "boolean",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "continue",
    "default",
    "do",
    "double",
    "else",
    "enum",
    "extends",
    "final",
    "finally",
    "float",
    "for",
    "goto",
    "if",
    "implements",
    "import",
    "instanceof",
    "int",
    "interface",
    "long",
    "native",
    "new",
    "package",
    "private",
    "protected",
    "public",
    "return",
    "short",
    "static",
    "strictfp",
    "super",
    "switch",
    "synchronized",
    "this",
    "throw",
    "throws",
    "transient",
    "try",
    "void",
    "volatile",
    "while",
    "true",
    "false",
    "null",
    "record",
    "var",
    "yield",
}


def java_casing() -> CasingPolicy:
    """Default naming rules for Java records and enums."""
    return CasingPolicy(
        type_case=NamingCase.PASCAL_CASE,
        field_case=NamingCase.CAMEL_CASE,
        variant_case=NamingCase.ORIGINAL,
        namespace_case=NamingCase.SNAKE_CASE,
        file_case=NamingCase.ORIGINAL,
        reserved_words=frozenset(JAVA_RESERVED_WORDS),
    )
