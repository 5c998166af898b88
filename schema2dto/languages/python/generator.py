"""
Python code generator implementation.

Renders each object type as a pydantic model and each enum as a string
enum, one module per type.
"""

from pathlib import Path
from typing import List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import RenderContext
from ...core.naming import CanonicalName, CasingPolicy
from ...core.resolver import ResolvedEnum, ResolvedField, ResolvedObject
from ...core.templates import TemplateEngine
from .naming import python_casing
from .types import PythonImports, PythonTypeMapper, py_string


def docstring(config: GeneratorConfig, description: Optional[str], deprecated: bool = False,
              deprecation_message: Optional[str] = None) -> str:
    """Class docstring, empty when there is nothing to say."""
    body = []
    if config.add_comments and description and description.strip():
        body.extend(line.rstrip() for line in description.strip().splitlines())
    if deprecated:
        if body:
            body.append("")
        body.append(f".. deprecated:: {deprecation_message or 'Deprecated'}")
    if not body:
        return ""

    text = "\n".join(body).replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if len(body) == 1:
        return f'"""{text}"""'
    return f'"""\n{text}\n"""'


class PythonRenderer:
    """Renderer for pydantic models and string enums."""

    language_name = "python"
    file_extension = ".py"
    max_blank_lines = 2

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Python renderer with configuration."""
        self.config = config or GeneratorConfig()
        self.template_engine = TemplateEngine(
            self.get_template_directory(), self.config.indent_size, self.config.use_tabs
        )

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def default_casing(self) -> CasingPolicy:
        return python_casing()

    def render(self, type_id: str, context: RenderContext) -> str:
        """Render one model or enum module."""
        node = context.node(type_id)
        name = context.name(type_id)
        imports = PythonImports(name.module, name.type_name)

        if isinstance(node, ResolvedEnum):
            return self._render_enum(node, name, imports)
        return self._render_model(node, name, imports, context)

    def _render_model(self, node: ResolvedObject, name: CanonicalName, imports: PythonImports,
                      context: RenderContext) -> str:
        def fail(message: str):
            return context.fail(node.type_id, message)

        mapper = PythonTypeMapper(context, imports, node.type_id, fail)
        base_class = imports.use("pydantic", "BaseModel")

        fields = []
        aliased = False
        for item in node.fields:
            field_name = name.field_name(item.name)
            annotation = mapper.annotation(
                item, context.constraints_for(node.type_id, item.name), self.config.add_validation
            )
            aliased = aliased or field_name != item.name
            fields.append(f"{field_name}: {annotation}{self._assignment(item, field_name, mapper, imports)}")

        model_config = ""
        if aliased:
            model_config = f"model_config = {imports.use('pydantic', 'ConfigDict')}(populate_by_name=True)"

        return self.template_engine.render_template(
            "model.py.j2",
            {
                "imports": imports.lines(),
                "deferred_imports": imports.deferred_lines(),
                "type_name": name.type_name,
                "base_class": base_class,
                "doc": docstring(self.config, node.description, node.deprecated, node.deprecation_message),
                "model_config": model_config,
                "fields": fields,
            },
        )

    def _assignment(self, item: ResolvedField, field_name: str, mapper: PythonTypeMapper,
                    imports: PythonImports) -> str:
        """The ``= ...`` part of a field declaration."""
        default = None
        # Unlike the JVM and Go renderers, defaults apply to non-nullable fields too
        if item.default is not None:
            default = mapper.default(item)
        elif item.descriptor.nullable:
            default = "None"

        params: List[str] = []
        if field_name != item.name:
            params.append(f"alias={py_string(item.name)}")
        if self.config.add_schema_annotations and item.description and item.description.strip():
            params.append(f"description={py_string(item.description.strip())}")
        if item.deprecated:
            params.append(f"deprecated={py_string(item.deprecation_message or 'Deprecated')}")

        if not params:
            return f" = {default}" if default is not None else ""
        if default is not None:
            params.insert(0, f"default={default}")
        return f" = {imports.use('pydantic', 'Field')}({', '.join(params)})"

    def _render_enum(self, node: ResolvedEnum, name: CanonicalName, imports: PythonImports) -> str:
        members = [f"{name.variant_name(value)} = {py_string(value)}" for value in node.variants]
        base_classes = f"str, {imports.use('enum', 'Enum')}"

        return self.template_engine.render_template(
            "enum.py.j2",
            {
                "imports": imports.lines(),
                "type_name": name.type_name,
                "base_classes": base_classes,
                "doc": docstring(self.config, node.description, node.deprecated, node.deprecation_message),
                "members": members,
            },
        )
