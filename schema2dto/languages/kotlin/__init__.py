"""
Kotlin code generator module.

Generates ``@JvmRecord`` data classes and enum classes sharing the JVM
annotation set of the Java generator.
"""

from .generator import KotlinRenderer
from .naming import KOTLIN_RESERVED_WORDS, kotlin_casing
from .types import default_literal, kotlin_string

__all__ = [
    "KotlinRenderer",
    "KOTLIN_RESERVED_WORDS",
    "kotlin_casing",
    "default_literal",
    "kotlin_string",
]
