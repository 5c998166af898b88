"""
Kotlin code generator implementation.

Renders each object type as a ``@JvmRecord`` data class and each enum as
an enum class, with the same annotations as the Java renderer applied to
the backing fields.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import RenderContext
from ...core.naming import CanonicalName, CasingPolicy
from ...core.resolver import ResolvedEnum, ResolvedObject
from ...core.templates import TemplateEngine
from ..java.annotations import AnnotationBuilder, doc_comment_lines
from ..java.types import ImportSet, JvmTypeMapper
from .naming import kotlin_casing
from .types import (
    KOTLIN_COLLECTION_TYPES,
    KOTLIN_IMPLICIT_PACKAGES,
    KOTLIN_SCALAR_TYPES,
    default_literal,
    kotlin_string,
)


class KotlinRenderer:
    """Renderer for Kotlin data classes and enum classes."""

    language_name = "kotlin"
    file_extension = ".kt"
    max_blank_lines = 1

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Kotlin renderer with configuration."""
        self.config = config or GeneratorConfig()
        self.annotations = AnnotationBuilder(self.config, kotlin=True, string_literal=kotlin_string)
        self.template_engine = TemplateEngine(
            self.get_template_directory(), self.config.indent_size, self.config.use_tabs
        )

    def get_template_directory(self) -> Path:
        """Return the Kotlin templates directory."""
        return Path(__file__).parent / "templates"

    def default_casing(self) -> CasingPolicy:
        return kotlin_casing()

    def render(self, type_id: str, context: RenderContext) -> str:
        """Render one data class or enum class source file."""
        node = context.node(type_id)
        name = context.name(type_id)
        imports = ImportSet(name.package, name.type_name, KOTLIN_IMPLICIT_PACKAGES)

        if isinstance(node, ResolvedEnum):
            return self._render_enum(node, name, imports)
        return self._render_data_class(node, name, imports, context)

    def _render_data_class(self, node: ResolvedObject, name: CanonicalName, imports: ImportSet,
                           context: RenderContext) -> str:
        def fail(message: str):
            return context.fail(node.type_id, message)

        if not node.fields:
            raise fail("a data class needs at least one property")

        mapper = JvmTypeMapper(
            context,
            imports,
            scalar_types=KOTLIN_SCALAR_TYPES,
            collection_types=KOTLIN_COLLECTION_TYPES,
            item_annotation=self.annotations.item_annotation(imports),
        )

        fields: List[Dict[str, Any]] = []
        for index, item in enumerate(node.fields):
            field_name = name.field_name(item.name)
            annotations = self.annotations.field_annotations(
                item, field_name, context.constraints_for(node.type_id, item.name), fail
            )
            rendered = [annotation.render(imports, use_sites=True) for annotation in annotations]

            declaration = f"val {field_name}: {mapper.type_expr(item.descriptor)}"
            if item.descriptor.nullable:
                initializer = "null"
                if item.default is not None:
                    initializer = default_literal(item, context, imports, fail)
                declaration = f"{declaration}? = {initializer}"
            if index < len(node.fields) - 1:
                declaration += ","

            fields.append({"annotations": rendered, "declaration": declaration})

        type_annotations = [annotation.render(imports) for annotation in self.annotations.type_annotations(node)]

        return self.template_engine.render_template(
            "data_class.kt.j2",
            {
                "package": name.package,
                "imports": imports.sorted_imports(),
                "doc_lines": doc_comment_lines(
                    self.config, node.description, node.deprecated, node.deprecation_message
                ),
                "annotations": type_annotations,
                "type_name": name.type_name,
                "fields": fields,
            },
        )

    def _render_enum(self, node: ResolvedEnum, name: CanonicalName, imports: ImportSet) -> str:
        constants = []
        for value in node.variants:
            variant_name = name.variant_name(value)
            annotation = self.annotations.variant_annotation(value, variant_name)
            if annotation is not None:
                constants.append(f"{annotation.render(imports)} {variant_name}")
            else:
                constants.append(variant_name)

        type_annotations = [annotation.render(imports) for annotation in self.annotations.type_annotations(node)]

        return self.template_engine.render_template(
            "enum_class.kt.j2",
            {
                "package": name.package,
                "imports": imports.sorted_imports(),
                "doc_lines": doc_comment_lines(
                    self.config, node.description, node.deprecated, node.deprecation_message
                ),
                "annotations": type_annotations,
                "type_name": name.type_name,
                "constants": ", ".join(constants),
            },
        )
