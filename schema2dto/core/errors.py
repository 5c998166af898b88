"""
Error taxonomy for the generation pipeline.

Structural errors describe a malformed or ambiguous schema and abort the
whole run before rendering starts. Target mapping errors are raised by a
single renderer for a single type and only remove that output unit.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class SchemaError(GeneratorError):
    """A structural problem in the schema graph."""

    def __init__(self, message: str, type_id: Optional[str] = None, scope=None):
        self.type_id = type_id
        self.scope = scope
        self.detail = message
        location = []
        if type_id:
            location.append(f"type '{type_id}'")
        if scope is not None:
            location.append(f"scope '{scope}'")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class UnresolvedReferenceError(SchemaError):
    """A reference points at a type id the graph does not define."""


class CyclicCompositionError(SchemaError):
    """A type contains itself through required, non-collection links."""


class UnsupportedFacetError(SchemaError):
    """A validation facet conflicts with the resolved type of its field."""


class DuplicateDefinitionError(SchemaError):
    """Two definitions map to the same name inside one namespace."""


class UnsupportedTargetMappingError(GeneratorError):
    """A renderer cannot express a resolved type in its target language."""

    def __init__(self, message: str, type_id: str, language: str):
        self.type_id = type_id
        self.language = language
        self.detail = message
        super().__init__(f"[{language}] {type_id}: {message}")
