"""
Java code generator module.

Generates Java records and enums with Bean Validation, Jackson and
MicroProfile OpenAPI annotations.
"""

from .annotations import AnnotationBuilder
from .generator import JavaRenderer
from .naming import JAVA_RESERVED_WORDS, java_casing
from .types import ImportSet, JvmTypeMapper

__all__ = [
    "JavaRenderer",
    "AnnotationBuilder",
    "ImportSet",
    "JvmTypeMapper",
    "JAVA_RESERVED_WORDS",
    "java_casing",
]
