"""
Python-specific naming utilities.

Handles Python reserved words and the names a pydantic model field must
not shadow.
"""

from ...core.naming import CasingPolicy, NamingCase


# Python reserved keywords
PYTHON_RESERVED_WORDS = {
    "False",
    "None",
    "True",
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
}

# Names used in generated annotations, and BaseModel attributes
PYTHON_SHADOWED_NAMES = {
    # Types
    "bool",
    "bytes",
    "date",
    "datetime",
    "dict",
    "float",
    "int",
    "list",
    "set",
    "str",
    "timedelta",
    # BaseModel
    "copy",
    "json",
    "schema",
    "schema_json",
    "validate",
    "construct",
    "model_config",
    "model_fields",
    "model_computed_fields",
    "model_extra",
    "model_fields_set",
    "model_construct",
    "model_copy",
    "model_dump",
    "model_dump_json",
    "model_json_schema",
    "model_post_init",
    "model_rebuild",
    "model_validate",
    "model_validate_json",
    "model_validate_strings",
}


def python_casing() -> CasingPolicy:
    """Default naming rules for pydantic models and enums."""
    return CasingPolicy(
        type_case=NamingCase.PASCAL_CASE,
        field_case=NamingCase.SNAKE_CASE,
        variant_case=NamingCase.SCREAMING_SNAKE,
        namespace_case=NamingCase.SNAKE_CASE,
        file_case=NamingCase.SNAKE_CASE,
        reserved_words=frozenset(PYTHON_RESERVED_WORDS),
        builtin_types=frozenset(PYTHON_SHADOWED_NAMES),
    )
