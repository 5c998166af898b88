"""
Java code generator implementation.

Renders each object type as a Java record and each enum as a Java enum,
annotated for Jakarta Bean Validation, Jackson and MicroProfile OpenAPI.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import RenderContext
from ...core.naming import CanonicalName, CasingPolicy
from ...core.resolver import ResolvedEnum, ResolvedObject
from ...core.templates import TemplateEngine
from .annotations import AnnotationBuilder, doc_comment_lines
from .naming import java_casing
from .types import ImportSet, JvmTypeMapper


class JavaRenderer:
    """Renderer for Java records and enums."""

    language_name = "java"
    file_extension = ".java"
    max_blank_lines = 1

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Java renderer with configuration."""
        self.config = config or GeneratorConfig()
        self.annotations = AnnotationBuilder(self.config)
        self.template_engine = TemplateEngine(
            self.get_template_directory(), self.config.indent_size, self.config.use_tabs
        )

    def get_template_directory(self) -> Path:
        """Return the Java templates directory."""
        return Path(__file__).parent / "templates"

    def default_casing(self) -> CasingPolicy:
        return java_casing()

    def render(self, type_id: str, context: RenderContext) -> str:
        """Render one record or enum source file."""
        node = context.node(type_id)
        name = context.name(type_id)
        imports = ImportSet(name.package, name.type_name)

        if isinstance(node, ResolvedEnum):
            return self._render_enum(node, name, imports)
        return self._render_record(node, name, imports, context)

    def _render_record(self, node: ResolvedObject, name: CanonicalName, imports: ImportSet,
                       context: RenderContext) -> str:
        mapper = JvmTypeMapper(context, imports, item_annotation=self.annotations.item_annotation(imports))

        def fail(message: str):
            return context.fail(node.type_id, message)

        fields: List[Dict[str, Any]] = []
        for index, item in enumerate(node.fields):
            field_name = name.field_name(item.name)
            annotations = self.annotations.field_annotations(
                item, field_name, context.constraints_for(node.type_id, item.name), fail
            )
            rendered = [annotation.render(imports) for annotation in annotations]
            comma = "," if index < len(node.fields) - 1 else ""
            fields.append(
                {
                    "annotations": rendered,
                    "declaration": f"{mapper.type_expr(item.descriptor)} {field_name}{comma}",
                }
            )

        type_annotations = [annotation.render(imports) for annotation in self.annotations.type_annotations(node)]

        return self.template_engine.render_template(
            "record.java.j2",
            {
                "package": name.package,
                "import_groups": imports.java_groups(),
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
            "enum.java.j2",
            {
                "package": name.package,
                "import_groups": imports.java_groups(),
                "doc_lines": doc_comment_lines(
                    self.config, node.description, node.deprecated, node.deprecation_message
                ),
                "annotations": type_annotations,
                "type_name": name.type_name,
                "constants": ", ".join(constants),
            },
        )
