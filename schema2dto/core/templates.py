"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for code generation.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment, FileSystemLoader, StrictUndefined, TemplateError as JinjaError


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None, indent_size: int = 4, use_tabs: bool = False):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files
            indent_size: Spaces per indentation level
            use_tabs: Indent with tabs instead of spaces
        """
        self.template_dir = template_dir
        self.indent_unit = "\t" if use_tabs else " " * indent_size
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        if self.template_dir and self.template_dir.exists():
            loader = FileSystemLoader(str(self.template_dir))
        else:
            loader = DictLoader({})

        # Generated source is not markup; nothing is escaped
        self._env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        # Add custom filters for code generation
        self._env.filters["indent_code"] = self._indent_filter
        self._env.globals["indent"] = self.indent_unit

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except JinjaError as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    # Template filters for code generation

    def _indent_filter(self, value: str, levels: int = 1) -> str:
        """Indent all non-blank lines of a string."""
        indent = self.indent_unit * levels
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else line for line in lines)


def quote_string(value: Any) -> str:
    """Double-quoted string literal for C-family languages."""
    text = str(value)
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{text}"'
