"""
Renderer interface and the generation pipeline.

Defines the capability every target language implements and runs the
stages in order: resolution, constraint mapping, naming, then rendering
of one unit per (type, language) pair.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from ..logging_config import get_logger
from .config import GeneratorConfig
from .constraints import Constraint, ConstraintMapper, ConstraintTable
from .errors import UnsupportedTargetMappingError
from .naming import CanonicalName, CasingPolicy, NameTable, NamingStrategy
from .resolver import DescriptorTree, ResolvedEnum, ResolvedObject, TypeResolver
from .schema import NamespaceScope, SchemaGraph

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderContext:
    """Everything a renderer may read; shared read-only between workers."""

    tree: DescriptorTree
    constraints: ConstraintTable
    names: NameTable
    config: GeneratorConfig
    language: str

    def node(self, type_id: str) -> Union[ResolvedObject, ResolvedEnum]:
        return self.tree[type_id]

    def name(self, type_id: str) -> CanonicalName:
        return self.names[type_id]

    def constraints_for(self, type_id: str, field_name: str) -> Tuple[Constraint, ...]:
        return self.constraints.get(type_id, field_name)

    def fail(self, type_id: str, message: str) -> UnsupportedTargetMappingError:
        return UnsupportedTargetMappingError(message, type_id=type_id, language=self.language)


@runtime_checkable
class Renderer(Protocol):
    """Capability implemented once per target language."""

    language_name: str
    file_extension: str
    max_blank_lines: int

    def default_casing(self) -> CasingPolicy:
        """Naming rules of the language before configuration overrides."""
        ...

    def render(self, type_id: str, context: RenderContext) -> str:
        """
        Render the source text of one object or enum type.

        Raises:
            UnsupportedTargetMappingError: If the type cannot be expressed
        """
        ...


@dataclass(frozen=True)
class RenderedUnit:
    """Final source text of one type for one language."""

    scope: NamespaceScope
    type_id: str
    type_name: str
    language: str
    path: str
    text: str

    @property
    def key(self) -> Tuple[Any, str, str]:
        return (self.scope.key, self.type_name, self.language)


@dataclass
class GenerationResult:
    """Container for generation results and metadata."""

    units: List[RenderedUnit] = field(default_factory=list)
    failures: List[UnsupportedTargetMappingError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failures

    def units_for(self, language: str) -> List[RenderedUnit]:
        return [unit for unit in self.units if unit.language == language]

    def get(self, type_id: str, language: str) -> Optional[RenderedUnit]:
        for unit in self.units:
            if unit.type_id == type_id and unit.language == language:
                return unit
        return None


def format_code(code: str, max_blank_lines: int = 2) -> str:
    """
    Apply basic formatting to generated code.

    Strips trailing whitespace, collapses runs of blank lines and ends the
    text with exactly one newline.

    Args:
        code: Raw generated code
        max_blank_lines: Longest allowed run of blank lines

    Returns:
        Formatted code
    """
    lines = code.split("\n")
    formatted_lines = []
    blank_count = 0

    for line in lines:
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if formatted_lines and blank_count <= max_blank_lines:
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    while formatted_lines and not formatted_lines[-1]:
        formatted_lines.pop()

    return "\n".join(formatted_lines) + "\n"


def render_unit(renderer: Renderer, type_id: str, context: RenderContext, prefix: str = "") -> RenderedUnit:
    """Render one type and wrap it with its output path."""
    name = context.name(type_id)
    text = format_code(renderer.render(type_id, context), renderer.max_blank_lines)
    path = name.path(renderer.file_extension)
    if prefix:
        path = f"{prefix}/{path}"
    return RenderedUnit(
        scope=name.scope,
        type_id=type_id,
        type_name=name.type_name,
        language=renderer.language_name,
        path=path,
        text=text,
    )


def _render_job(job) -> Union[RenderedUnit, UnsupportedTargetMappingError]:
    renderer, type_id, context, prefix = job
    try:
        return render_unit(renderer, type_id, context, prefix)
    except UnsupportedTargetMappingError as e:
        return e


def generate_code(graph: SchemaGraph, config: GeneratorConfig, registry=None) -> GenerationResult:
    """
    Generate source code for every type of a graph in every configured language.

    Structural schema errors abort the run before any rendering starts.
    Target mapping errors only remove the affected unit and are collected
    in the result.

    Args:
        graph: Loaded schema graph
        config: Run configuration
        registry: Renderer registry; the default registry when omitted

    Returns:
        GenerationResult with units, failures, warnings and metadata

    Raises:
        SchemaError: On unresolved references, cycles, facet conflicts or
            duplicate definitions
        RegistryError: If a configured language is unknown
    """
    if registry is None:
        from ..registry import create_default_registry

        registry = create_default_registry()

    renderers: List[Renderer] = []
    for language in config.languages:
        renderer = registry.create(language, config)
        if all(r.language_name != renderer.language_name for r in renderers):
            renderers.append(renderer)

    tree = TypeResolver().resolve(graph)
    constraints = ConstraintMapper(infer_not_blank=config.infer_not_blank).map_tree(tree)

    # Every name table is complete before the first renderer starts
    contexts: Dict[str, RenderContext] = {}
    for renderer in renderers:
        policy = config.casing_for(renderer.language_name, renderer.default_casing())
        contexts[renderer.language_name] = RenderContext(
            tree=tree,
            constraints=constraints,
            names=NamingStrategy(policy).build_table(tree),
            config=config,
            language=renderer.language_name,
        )

    result = GenerationResult()
    for node in tree.objects():
        if not node.fields:
            result.warnings.append(f"Type '{node.type_id}' has no fields")

    nested = len(renderers) > 1
    jobs = [
        (renderer, node.type_id, contexts[renderer.language_name], renderer.language_name if nested else "")
        for renderer in renderers
        for node in tree.renderable()
    ]

    workers = max(1, config.max_workers)
    logger.info("Rendering %d units with %d workers", len(jobs), workers)
    if workers == 1:
        outcomes = [_render_job(job) for job in jobs]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(_render_job, jobs))

    for outcome in outcomes:
        if isinstance(outcome, UnsupportedTargetMappingError):
            logger.warning("Skipped unit: %s", outcome)
            result.failures.append(outcome)
        else:
            result.units.append(outcome)

    result.metadata = {
        "languages": [renderer.language_name for renderer in renderers],
        "type_count": len(tree),
        "unit_count": len(result.units),
        "failure_count": len(result.failures),
        "namespaces": {
            language: [".".join(ns) for ns in context.names.namespaces()]
            for language, context in contexts.items()
        },
    }
    return result
