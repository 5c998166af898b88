"""
Python code generator module.

Generates pydantic v2 models and string enums.
"""

from .generator import PythonRenderer
from .naming import PYTHON_RESERVED_WORDS, PYTHON_SHADOWED_NAMES, python_casing
from .types import PythonImports, PythonTypeMapper

__all__ = [
    "PythonRenderer",
    "PYTHON_RESERVED_WORDS",
    "PYTHON_SHADOWED_NAMES",
    "python_casing",
    "PythonImports",
    "PythonTypeMapper",
]
