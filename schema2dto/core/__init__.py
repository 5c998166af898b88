"""
Language-independent core of the generator.

Schema graph, type resolution, constraint mapping, naming, templates,
configuration and the generation pipeline.
"""

from .config import ConfigError, ConfigManager, GeneratorConfig, load_config, validate_config
from .constraints import ConstraintMapper, ConstraintTable, Custom, Format, NotBlank, Pattern, Range, Size
from .errors import (
    CyclicCompositionError,
    DuplicateDefinitionError,
    GeneratorError,
    SchemaError,
    UnresolvedReferenceError,
    UnsupportedFacetError,
    UnsupportedTargetMappingError,
)
from .generator import GenerationResult, RenderContext, RenderedUnit, Renderer, format_code, generate_code
from .naming import CanonicalName, CasingPolicy, NameSanitizer, NameTable, NamingCase, NamingStrategy
from .resolver import (
    BaseKind,
    CollectionShape,
    DescriptorTree,
    Optionality,
    ResolvedEnum,
    ResolvedField,
    ResolvedObject,
    TypeDescriptor,
    TypeResolver,
    compute_nullability,
    resolve,
)
from .schema import (
    DEFAULT_SCOPE,
    ArrayType,
    EnumType,
    Field,
    MapType,
    NamespaceScope,
    ObjectType,
    Primitive,
    PrimitiveKind,
    Reference,
    SchemaGraph,
)
from .templates import TemplateEngine, TemplateError
