"""
Language-specific renderers.

One sub-package per target language; each provides a renderer, its
reserved words, default casing policy and templates.
"""

from .go import GoRenderer
from .java import JavaRenderer
from .kotlin import KotlinRenderer
from .python import PythonRenderer

__all__ = ["GoRenderer", "JavaRenderer", "KotlinRenderer", "PythonRenderer"]
