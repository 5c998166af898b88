"""
schema2dto: typed DTO generation from OpenAPI and JSON Schema documents.

Resolves a schema graph into language-neutral descriptors and renders
Java records, Kotlin data classes, pydantic models and Go structs.
"""

from .core.config import ConfigManager, GeneratorConfig, load_config
from .core.errors import (
    CyclicCompositionError,
    DuplicateDefinitionError,
    GeneratorError,
    SchemaError,
    UnresolvedReferenceError,
    UnsupportedFacetError,
    UnsupportedTargetMappingError,
)
from .core.generator import GenerationResult, RenderedUnit, generate_code
from .core.schema import NamespaceScope, SchemaGraph
from .emitter import EmitterError, FileEmitter, emit_all
from .loader import LoaderError, build_schema_graph, load_document, load_schema_graph, merge_graphs
from .registry import RegistryError, RendererRegistry, create_default_registry

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "GeneratorConfig",
    "load_config",
    "CyclicCompositionError",
    "DuplicateDefinitionError",
    "GeneratorError",
    "SchemaError",
    "UnresolvedReferenceError",
    "UnsupportedFacetError",
    "UnsupportedTargetMappingError",
    "GenerationResult",
    "RenderedUnit",
    "generate_code",
    "NamespaceScope",
    "SchemaGraph",
    "EmitterError",
    "FileEmitter",
    "emit_all",
    "LoaderError",
    "build_schema_graph",
    "load_document",
    "load_schema_graph",
    "merge_graphs",
    "RegistryError",
    "RendererRegistry",
    "create_default_registry",
]
