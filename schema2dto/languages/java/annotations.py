"""
Annotation builder shared by the JVM renderers.

Produces the Jakarta Bean Validation, Jackson and MicroProfile OpenAPI
annotations of types, fields and enum constants. Kotlin renders the same
annotations with use-site targets.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from ...core.config import GeneratorConfig
from ...core.constraints import Constraint, Custom, Format, NotBlank, Pattern, Range, Size
from ...core.errors import UnsupportedTargetMappingError
from ...core.resolver import BaseKind, ResolvedField, TypeDescriptor
from ...core.templates import quote_string
from .types import ImportSet

CONSTRAINTS_PACKAGE = "jakarta.validation.constraints"
VALID = "jakarta.validation.Valid"
NOT_NULL = f"{CONSTRAINTS_PACKAGE}.NotNull"
SCHEMA = "org.eclipse.microprofile.openapi.annotations.media.Schema"
JSON_FORMAT = "com.fasterxml.jackson.annotation.JsonFormat"
JSON_PROPERTY = "com.fasterxml.jackson.annotation.JsonProperty"

DATE_PATTERNS = {
    BaseKind.DATE: "yyyy-MM-dd",
    BaseKind.DATE_TIME: "yyyy-MM-dd'T'HH:mm:ss",
}

FORMAT_ANNOTATIONS = {
    "email": f"{CONSTRAINTS_PACKAGE}.Email",
}

BLANK_DESCRIPTION = "TBD"


@dataclass(frozen=True)
class Annotation:
    qualified_name: str
    args: str = ""
    use_site: str = ""  # Kotlin use-site target

    def render(self, imports: ImportSet, use_sites: bool = False) -> str:
        name = imports.use(self.qualified_name)
        target = f"{self.use_site}:" if use_sites and self.use_site else ""
        args = f"({self.args})" if self.args else ""
        return f"@{target}{name}{args}"


def default_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_integral(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, (float, Decimal)):
        return value == int(value)
    return False


class AnnotationBuilder:
    """Builds JVM annotations from resolved types and mapped constraints."""

    def __init__(self, config: GeneratorConfig, kotlin: bool = False,
                 string_literal: Callable[[str], str] = quote_string):
        self.config = config
        self.kotlin = kotlin
        self.literal = string_literal

    def _description(self, text: Optional[str]) -> str:
        return self.literal(text.strip() if text and text.strip() else BLANK_DESCRIPTION)

    def _deprecated(self, message: Optional[str]) -> Annotation:
        if self.kotlin:
            return Annotation("kotlin.Deprecated", self.literal(message or "Deprecated"))
        return Annotation("java.lang.Deprecated")

    def type_annotations(self, node) -> List[Annotation]:
        """Annotations of a record, data class or enum."""
        result = []
        if self.config.add_schema_annotations:
            params = [f"name = {self.literal(node.name)}", f"description = {self._description(node.description)}"]
            if node.deprecated:
                params.append("deprecated = true")
            result.append(Annotation(SCHEMA, ", ".join(params)))
        if node.deprecated:
            result.append(self._deprecated(node.deprecation_message))
        return result

    def field_annotations(
        self,
        item: ResolvedField,
        field_name: str,
        constraints: Sequence[Constraint],
        fail: Callable[[str], UnsupportedTargetMappingError],
    ) -> List[Annotation]:
        """
        Annotations of one record component or constructor property.

        Raises:
            UnsupportedTargetMappingError: A constraint has no annotation
        """
        descriptor = item.descriptor
        result = []

        if self.config.add_schema_annotations:
            result.append(Annotation(SCHEMA, self._schema_params(item, field_name, constraints), "field"))

        if field_name != item.name:
            result.append(Annotation(JSON_PROPERTY, self.literal(item.name)))

        if self.config.add_validation:
            if descriptor.leaf().base_kind is BaseKind.OBJECT:
                result.append(Annotation(VALID, use_site="field"))
            if not descriptor.nullable and not any(isinstance(c, NotBlank) for c in constraints):
                result.append(Annotation(NOT_NULL, use_site="field"))
            for constraint in constraints:
                result.extend(self._constraint(constraint, descriptor, fail))

        if not descriptor.is_collection and descriptor.base_kind in DATE_PATTERNS:
            pattern = DATE_PATTERNS[descriptor.base_kind]
            result.append(Annotation(JSON_FORMAT, f"pattern = {self.literal(pattern)}", "field"))

        if item.deprecated:
            result.append(self._deprecated(item.deprecation_message))

        return result

    def item_annotation(self, imports: ImportSet) -> Callable[[TypeDescriptor], str]:
        """Annotation text for collection element types."""

        def annotate(descriptor: TypeDescriptor) -> str:
            if not self.config.add_validation:
                return ""
            return Annotation(NOT_NULL).render(imports)

        return annotate

    def variant_annotation(self, value: str, variant_name: str) -> Optional[Annotation]:
        if value == variant_name:
            return None
        return Annotation(JSON_PROPERTY, self.literal(value))

    def _schema_params(self, item: ResolvedField, field_name: str, constraints: Sequence[Constraint]) -> str:
        descriptor = item.descriptor
        params = []
        if field_name != item.name:
            params.append(f"name = {self.literal(item.name)}")
        params.append(f"description = {self._description(item.description)}")
        if item.source.required:
            params.append("required = true")
        if not descriptor.is_collection and descriptor.schema_format:
            params.append(f"format = {self.literal(descriptor.schema_format)}")
        for constraint in constraints:
            if isinstance(constraint, Pattern):
                params.append(f"pattern = {self.literal(constraint.regex)}")
        if descriptor.nullable and item.default is not None:
            params.append(f"defaultValue = {self.literal(default_text(item.default))}")
        if item.deprecated:
            params.append("deprecated = true")
        return ", ".join(params)

    def _constraint(self, constraint: Constraint, descriptor: TypeDescriptor,
                    fail: Callable[[str], UnsupportedTargetMappingError]) -> List[Annotation]:
        if isinstance(constraint, NotBlank):
            return [Annotation(f"{CONSTRAINTS_PACKAGE}.NotBlank", use_site="field")]

        if isinstance(constraint, Pattern):
            return [Annotation(f"{CONSTRAINTS_PACKAGE}.Pattern", f"regexp = {self.literal(constraint.regex)}", "field")]

        if isinstance(constraint, Size):
            params = []
            if constraint.min is not None:
                params.append(f"min = {constraint.min}")
            if constraint.max is not None:
                params.append(f"max = {constraint.max}")
            return [Annotation(f"{CONSTRAINTS_PACKAGE}.Size", ", ".join(params), "field")]

        if isinstance(constraint, Range):
            return self._range(constraint, descriptor)

        if isinstance(constraint, Format):
            qualified = FORMAT_ANNOTATIONS.get(constraint.format)
            if qualified is None:
                raise fail(f"format '{constraint.format}' has no validation annotation")
            return [Annotation(qualified, use_site="field")]

        if isinstance(constraint, Custom):
            return [Annotation(constraint.name, use_site="field")]

        raise fail(f"unknown constraint {constraint!r}")

    def _range(self, constraint: Range, descriptor: TypeDescriptor) -> List[Annotation]:
        integral = descriptor.base_kind in (BaseKind.INT32, BaseKind.INT64) and all(
            bound is None or _is_integral(bound) for bound in (constraint.min, constraint.max)
        )
        result = []
        if integral:
            if constraint.min is not None:
                result.append(Annotation(f"{CONSTRAINTS_PACKAGE}.Min", str(int(constraint.min)), "field"))
            if constraint.max is not None:
                result.append(Annotation(f"{CONSTRAINTS_PACKAGE}.Max", str(int(constraint.max)), "field"))
        else:
            if constraint.min is not None:
                result.append(Annotation(f"{CONSTRAINTS_PACKAGE}.DecimalMin", self.literal(str(constraint.min)), "field"))
            if constraint.max is not None:
                result.append(Annotation(f"{CONSTRAINTS_PACKAGE}.DecimalMax", self.literal(str(constraint.max)), "field"))
        return result


def doc_comment_lines(config: GeneratorConfig, description: Optional[str], deprecated: bool = False,
                      deprecation_message: Optional[str] = None) -> List[str]:
    """
    Javadoc / KDoc block of a type.

    The description goes into the comment only when it is not already
    carried by a ``@Schema`` annotation.
    """
    body = []
    if config.add_comments and not config.add_schema_annotations and description and description.strip():
        body.extend(line.rstrip() for line in description.strip().splitlines())
    if deprecated:
        body.append(f"@deprecated {deprecation_message or 'Deprecated'}")
    if not body:
        return []
    return ["/**"] + [f" * {line}".rstrip().replace("*/", "*&#47;") for line in body] + [" */"]
