"""
Go code generator implementation.

Generates one Go file per type: structs with json and validate tags for
objects, string types with a constant block for enums.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from ...core.config import GeneratorConfig
from ...core.generator import RenderContext
from ...core.naming import CanonicalName, CasingPolicy
from ...core.resolver import ResolvedEnum, ResolvedObject
from ...core.templates import TemplateEngine
from .naming import go_casing, package_name
from .types import GoImports, GoTypeMapper, go_string, namespace_cycle

GENERATED_HEADER = "// Code generated by schema2dto. DO NOT EDIT."


def comment_lines(text: Optional[str]) -> List[str]:
    if not text or not text.strip():
        return []
    return [f"// {line.rstrip()}".rstrip() for line in text.strip().splitlines()]


def align(rows: List[Tuple[str, ...]]) -> List[str]:
    """Pad every column but the last to a common width, gofmt style."""
    if not rows:
        return []
    widths = [max(len(row[column]) for row in rows) for column in range(len(rows[0]) - 1)]
    lines = []
    for row in rows:
        cells = [cell.ljust(widths[column]) for column, cell in enumerate(row[:-1])]
        lines.append(" ".join(cells + [row[-1]]).rstrip())
    return lines


class GoRenderer:
    """Code generator for Go structs and string enums."""

    language_name = "go"
    file_extension = ".go"
    max_blank_lines = 1

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Go generator with configuration."""
        self.config = config or GeneratorConfig()
        self.module = str(self.config.custom.get("go_module", ""))

        # gofmt indents with tabs
        self.template_engine = TemplateEngine(self.get_template_directory(), use_tabs=True)

    def get_template_directory(self) -> Path:
        """Return the Go templates directory."""
        return Path(__file__).parent / "templates"

    def default_casing(self) -> CasingPolicy:
        return go_casing()

    def render(self, type_id: str, context: RenderContext) -> str:
        """Render one struct or enum source file."""
        node = context.node(type_id)
        name = context.name(type_id)

        if isinstance(node, ResolvedEnum):
            return self._render_enum(node, name)
        return self._render_struct(node, name, context)

    def _doc_lines(self, type_name: str, description: Optional[str], deprecated: bool,
                   deprecation_message: Optional[str]) -> List[str]:
        lines = []
        if self.config.add_comments and description and description.strip():
            lines = comment_lines(f"{type_name} {description.strip()}")
        if deprecated:
            if lines:
                lines.append("//")
            lines.append(f"// Deprecated: {deprecation_message or 'Deprecated'}")
        return lines

    def _render_struct(self, node: ResolvedObject, name: CanonicalName, context: RenderContext) -> str:
        def fail(message: str):
            return context.fail(node.type_id, message)

        cycle = namespace_cycle(context, name.namespace)
        if cycle is not None:
            packages = " -> ".join("/".join(namespace) or package_name(namespace) for namespace in cycle)
            raise fail(f"package import cycle: {packages}")

        imports = GoImports(self.module, name.namespace, len(context.config.root_namespace))
        mapper = GoTypeMapper(context, imports, fail)

        lines: List[str] = []
        run: List[Tuple[str, str, str]] = []
        for item in node.fields:
            go_type = mapper.map_field_type(item)
            tags = [mapper.json_tag(item)]
            if self.config.add_validation:
                rules = mapper.validate_rules(item, go_type, context.constraints_for(node.type_id, item.name))
                if rules:
                    tags.append(f"validate:{go_string(','.join(rules))}")

            comments = []
            if self.config.add_comments:
                comments.extend(comment_lines(item.description))
                if item.default is not None and item.descriptor.nullable:
                    comments.append(f"// Default: {item.default}")
            if item.deprecated:
                if comments:
                    comments.append("//")
                comments.append(f"// Deprecated: {item.deprecation_message or 'Deprecated'}")

            # Comment lines end an alignment block
            if comments:
                lines.extend(align(run))
                lines.extend(comments)
                run = []
            run.append((name.field_name(item.name), go_type.name, f"`{' '.join(tags)}`"))
        lines.extend(align(run))

        return self.template_engine.render_template(
            "struct.go.j2",
            {
                "header": GENERATED_HEADER,
                "package": package_name(name.namespace),
                "import_groups": imports.groups(),
                "doc_lines": self._doc_lines(
                    name.type_name, node.description, node.deprecated, node.deprecation_message
                ),
                "type_name": name.type_name,
                "lines": lines,
            },
        )

    def _render_enum(self, node: ResolvedEnum, name: CanonicalName) -> str:
        rows = [
            (name.variant_name(value), name.type_name, f"= {go_string(value)}")
            for value in node.variants
        ]

        return self.template_engine.render_template(
            "enum.go.j2",
            {
                "header": GENERATED_HEADER,
                "package": package_name(name.namespace),
                "doc_lines": self._doc_lines(
                    name.type_name, node.description, node.deprecated, node.deprecation_message
                ),
                "type_name": name.type_name,
                "constants": align(rows),
            },
        )
