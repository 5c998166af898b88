"""Loading of OpenAPI and JSON Schema documents into a SchemaGraph.

This module reads JSON or YAML documents from files and URLs with proper
error handling, and converts their schema definitions into the normalized
graph the generation pipeline consumes.
"""

import json
import posixpath
import re
from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Tuple
from urllib.parse import urlparse

import requests
import yaml

from .core.constraints import Custom, Pattern, Range, Size
from .core.errors import DuplicateDefinitionError
from .core.schema import (
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
    SchemaType,
)
from .logging_config import get_logger

logger = get_logger(__name__)

# Where definitions live, in lookup order
DEFINITION_SECTIONS = (("components", "schemas"), ("definitions",), ("$defs",))

EXT_VALIDATION_CONSTRAINT = "x-validation-constraint"
EXT_VALIDATION_PARAMS = "x-validation-params"
EXT_NULLABLE = "x-nullable"
EXT_MODEL_SUBDIR = "x-model-subdir"
EXT_API_VERSION = "x-api-version"
EXT_DEPRECATION_MESSAGE = "x-deprecation-message"

PRIMITIVE_KINDS = {kind.value: kind for kind in PrimitiveKind}

# Ranges are inclusive; exclusive bounds are not mapped
EXCLUSIVE_FACETS = ("exclusiveMinimum", "exclusiveMaximum")


class LoaderError(Exception):
    """Exception raised for schema document loading errors."""

    pass


def is_url(source: str) -> bool:
    parsed = urlparse(str(source))
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_text(text: str, source: str) -> Dict[str, Any]:
    try:
        if source.lower().endswith(".json"):
            document = json.loads(text)
        else:
            # YAML is a superset of JSON
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error("Invalid document %s: %s", source, e)
        raise LoaderError(f"Invalid document {source}: {e}") from e

    if not isinstance(document, dict):
        raise LoaderError(f"Document root must be a mapping: {source}")
    return document


def load_document_from_file(file_path) -> Dict[str, Any]:
    """Load a JSON or YAML document from a local file.

    Raises:
        LoaderError: If the file is missing, unreadable or malformed.
    """
    path = Path(file_path)
    logger.debug("Loading schema document from file: %s", path)

    if not path.exists():
        logger.error("File not found: %s", path)
        raise LoaderError(f"File not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Error reading file %s: %s", path, e)
        raise LoaderError(f"Error reading file {path}: {e}") from e

    document = _parse_text(text, str(path))
    logger.info("Loaded schema document %s", path)
    return document


def load_document_from_url(url: str, timeout: int = 30) -> Dict[str, Any]:
    """Load a JSON or YAML document from a URL.

    Raises:
        LoaderError: If the URL is invalid, the request fails or the
            response is not a valid document.
    """
    logger.debug("Loading schema document from URL: %s", url)

    if not is_url(url):
        logger.error("Invalid URL format: %s", url)
        raise LoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout:
        logger.error("Request timeout for URL: %s", url)
        raise LoaderError(f"Request timeout for URL: {url}") from None
    except requests.exceptions.ConnectionError as e:
        logger.error("Connection error for URL %s: %s", url, e)
        raise LoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error %s for URL: %s", e.response.status_code, url)
        raise LoaderError(f"HTTP error {e.response.status_code} for URL: {url}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e)
        raise LoaderError(f"Request error for URL {url}: {e}") from e

    document = _parse_text(response.text, urlparse(url).path or url)
    logger.info("Loaded schema document %s", url)
    return document


def load_document(source, timeout: int = 30) -> Dict[str, Any]:
    """Load a document from either a file path or an HTTP(S) URL."""
    if is_url(str(source)):
        return load_document_from_url(str(source), timeout)
    return load_document_from_file(source)


def _pascal(text: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^A-Za-z0-9]+", text) if part)


def _escape_pointer(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


class _GraphBuilder:
    """Converts the definitions of one document into graph entries."""

    def __init__(self, document: Dict[str, Any], source: str):
        self.document = document
        self.source = source
        self.types: Dict[str, SchemaType] = {}
        self.scopes: Dict[str, NamespaceScope] = {}
        self.external: List[str] = []
        info = document.get("info") if isinstance(document.get("info"), dict) else {}
        self.document_version = info.get("version")
        self.document_subdir = document.get(EXT_MODEL_SUBDIR, "")

    def type_id(self, pointer: str) -> str:
        return f"{self.source}#{pointer}"

    def resolve_ref(self, ref: str) -> str:
        """Type id of a ``$ref``, relative to this document."""
        location, _, pointer = ref.partition("#")
        if not location:
            return self.type_id(pointer)
        if is_url(location) or not self.source or is_url(self.source):
            target = location
        else:
            target = posixpath.normpath(posixpath.join(posixpath.dirname(self.source), location))
        if target not in self.external:
            self.external.append(target)
        return f"{target}#{pointer}"

    def definitions(self) -> List[Tuple[str, str, Dict[str, Any]]]:
        """(pointer, name, schema) of every top-level definition."""
        found = []
        for path in DEFINITION_SECTIONS:
            section: Any = self.document
            for key in path:
                section = section.get(key) if isinstance(section, dict) else None
            if not isinstance(section, dict):
                continue
            prefix = "/" + "/".join(_escape_pointer(key) for key in path)
            for name, schema in section.items():
                if not isinstance(schema, dict):
                    raise LoaderError(f"Definition '{name}' in {self.source or '<document>'} is not a mapping")
                found.append((f"{prefix}/{_escape_pointer(name)}", name, schema))

        # A standalone JSON Schema is itself the definition
        if not found and ("properties" in self.document or "enum" in self.document):
            name = self.document.get("title") or Path(self.source or "Root").stem
            found.append(("", _pascal(name) or "Root", self.document))
        return found

    def build(self) -> SchemaGraph:
        for pointer, name, schema in self.definitions():
            self.add_definition(pointer, name, schema, self.scope_for(schema))
        logger.info("Read %d definitions from %s", len(self.types), self.source or "<document>")
        return SchemaGraph(self.types, self.scopes)

    def scope_for(self, schema: Dict[str, Any]) -> NamespaceScope:
        version = schema.get(EXT_API_VERSION, self.document_version)
        return NamespaceScope(
            package=str(schema.get(EXT_MODEL_SUBDIR, self.document_subdir) or ""),
            version=str(version) if version is not None else None,
        )

    def add_definition(self, pointer: str, name: str, schema: Dict[str, Any], scope: NamespaceScope) -> str:
        type_id = self.type_id(pointer)
        if type_id in self.types:
            raise DuplicateDefinitionError(f"Definition '{name}' is declared twice", type_id=type_id, scope=scope)
        self.scopes[type_id] = scope
        # Reserve the id before converting, so nested hoisting keeps order
        self.types[type_id] = Primitive(PrimitiveKind.STRING)
        self.types[type_id] = self.definition(pointer, name, schema, scope)
        logger.debug("Read definition %s", type_id)
        return type_id

    def definition(self, pointer: str, name: str, schema: Dict[str, Any], scope: NamespaceScope) -> SchemaType:
        schema, _ = self.strip_null(schema, pointer)
        deprecated = bool(schema.get("deprecated", False))
        message = schema.get(EXT_DEPRECATION_MESSAGE)

        if "enum" in schema:
            return EnumType(
                name=name,
                variants=tuple(str(value) for value in schema["enum"] if value is not None),
                description=schema.get("description"),
                deprecated=deprecated,
                deprecation_message=message,
            )

        if self.is_object(schema):
            parts = []
            for index, part in enumerate(schema.get("allOf", ())):
                part, _ = self.strip_null(part, f"{pointer}/allOf/{index}")
                if "$ref" in part:
                    parts.append(Reference(self.resolve_ref(part["$ref"])))
                else:
                    parts.append(
                        ObjectType(name=name, fields=self.fields(f"{pointer}/allOf/{index}", name, part, scope))
                    )
            return ObjectType(
                name=name,
                fields=self.fields(pointer, name, schema, scope),
                description=schema.get("description"),
                all_of=tuple(parts),
                deprecated=deprecated,
                deprecation_message=message,
            )

        # Aliases: primitives, arrays, maps and references
        alias = self.field_type(pointer, name, schema, scope)
        if isinstance(alias, Primitive):
            return replace(alias, constraints=self.constraints(schema, self.type_id(pointer)))
        return alias

    @staticmethod
    def is_object(schema: Dict[str, Any]) -> bool:
        if "properties" in schema or "allOf" in schema:
            return True
        return schema.get("type") == "object" and not isinstance(schema.get("additionalProperties"), dict)

    def strip_null(self, schema: Dict[str, Any], pointer: str) -> Tuple[Dict[str, Any], bool]:
        """
        Remove nullability markers from a schema.

        Returns:
            The schema without markers and whether any marker was present
        """
        if not isinstance(schema, dict):
            raise LoaderError(f"Schema at {self.type_id(pointer)} is not a mapping")
        if "anyOf" in schema:
            raise LoaderError(f"'anyOf' is not supported ({self.type_id(pointer)})")

        nullable = bool(schema.get("nullable", False) or schema.get(EXT_NULLABLE, False))
        result = dict(schema)

        kind = result.get("type")
        if isinstance(kind, list):
            others = [item for item in kind if item != "null"]
            nullable = nullable or len(others) < len(kind)
            if len(others) != 1:
                raise LoaderError(f"Union type {kind} is not supported ({self.type_id(pointer)})")
            result["type"] = others[0]

        if "oneOf" in result:
            branches = result.pop("oneOf")
            non_null = [branch for branch in branches if branch.get("type") != "null"]
            nullable = nullable or len(non_null) < len(branches)
            if not non_null:
                raise LoaderError(f"'oneOf' needs a non-null branch ({self.type_id(pointer)})")
            # Only the first non-null branch is used
            result.update(non_null[0])

        if "allOf" in result and len(result["allOf"]) == 1 and "properties" not in result:
            single = result.pop("allOf")[0]
            result.update(single)

        return result, nullable

    def fields(self, pointer: str, owner: str, schema: Dict[str, Any], scope: NamespaceScope) -> Tuple[Field, ...]:
        required = set(schema.get("required", ()))
        result = []
        for prop, prop_schema in (schema.get("properties") or {}).items():
            prop_pointer = f"{pointer}/properties/{_escape_pointer(prop)}"
            stripped, nullable = self.strip_null(prop_schema, prop_pointer)
            result.append(
                Field(
                    name=prop,
                    type=self.field_type(prop_pointer, owner + _pascal(prop), stripped, scope),
                    required=prop in required,
                    nullable=nullable,
                    default=stripped.get("default"),
                    description=stripped.get("description"),
                    constraints=self.constraints(stripped, self.type_id(prop_pointer)),
                    deprecated=bool(stripped.get("deprecated", False)),
                    deprecation_message=stripped.get(EXT_DEPRECATION_MESSAGE),
                )
            )
        return tuple(result)

    def field_type(self, pointer: str, hint: str, schema: Dict[str, Any], scope: NamespaceScope) -> SchemaType:
        """Type of a property, array item or map value; named types are hoisted."""
        schema, _ = self.strip_null(schema, pointer)

        if "$ref" in schema:
            return Reference(self.resolve_ref(schema["$ref"]))

        if "enum" in schema or self.is_object(schema):
            return Reference(self.add_definition(pointer, hint, schema, scope))

        kind = schema.get("type")
        if kind == "array" or "items" in schema:
            return ArrayType(
                element_type=self.field_type(f"{pointer}/items", f"{hint}Item", schema.get("items") or {}, scope),
                min_items=schema.get("minItems"),
                max_items=schema.get("maxItems"),
                unique_items=bool(schema.get("uniqueItems", False)),
            )

        if kind == "object":
            values = schema["additionalProperties"]
            return MapType(self.field_type(f"{pointer}/additionalProperties", f"{hint}Value", values, scope))

        if kind not in PRIMITIVE_KINDS:
            raise LoaderError(f"Unsupported schema type {kind!r} ({self.type_id(pointer)})")
        return Primitive(PRIMITIVE_KINDS[kind], schema.get("format"))

    @staticmethod
    def constraints(schema: Dict[str, Any], location: str = "") -> Tuple[Any, ...]:
        """Declared validation facets of a property or named primitive, in a fixed order."""
        result = []
        if "pattern" in schema:
            result.append(Pattern(schema["pattern"]))
        if "minLength" in schema or "maxLength" in schema:
            result.append(Size(schema.get("minLength"), schema.get("maxLength")))
        if "minimum" in schema or "maximum" in schema:
            result.append(Range(_number(schema.get("minimum")), _number(schema.get("maximum"))))
        if EXT_VALIDATION_CONSTRAINT in schema:
            result.append(Custom(schema[EXT_VALIDATION_CONSTRAINT], dict(schema.get(EXT_VALIDATION_PARAMS) or {})))
        for facet in EXCLUSIVE_FACETS:
            if facet in schema:
                logger.warning("Skipping unsupported facet '%s' at %s", facet, location or "<schema>")
        return tuple(result)


def _number(value):
    if value is None or isinstance(value, int):
        return value
    return Decimal(str(value))


def build_schema_graph(document: Dict[str, Any], source: str = "") -> SchemaGraph:
    """
    Convert the definitions of one document into a SchemaGraph.

    References into other documents are kept as type ids of the form
    ``<path>#<pointer>``; :func:`load_schema_graph` loads those documents.

    Raises:
        LoaderError: On unsupported schema constructs
    """
    return _GraphBuilder(document, source).build()


def merge_graphs(*graphs: SchemaGraph) -> SchemaGraph:
    """
    Combine several graphs into one.

    Raises:
        DuplicateDefinitionError: If two graphs define one type id differently
    """
    types: Dict[str, SchemaType] = {}
    scopes: Dict[str, NamespaceScope] = {}
    for graph in graphs:
        for type_id in graph:
            definition = graph.types[type_id]
            if type_id in types and types[type_id] != definition:
                raise DuplicateDefinitionError(
                    "Type is defined differently by two documents",
                    type_id=type_id,
                    scope=graph.scope_of(type_id),
                )
            types[type_id] = definition
            scopes[type_id] = graph.scope_of(type_id)
    return SchemaGraph(types, scopes)


def load_schema_graph(*sources, timeout: int = 30) -> SchemaGraph:
    """
    Load documents and every document they reference into one graph.

    Args:
        *sources: File paths or URLs
        timeout: Request timeout for URLs, in seconds
    """
    pending = [str(source) for source in sources]
    loaded: Dict[str, SchemaGraph] = {}
    while pending:
        source = pending.pop(0)
        key = source if is_url(source) else Path(source).as_posix()
        if key in loaded:
            continue
        builder = _GraphBuilder(load_document(source, timeout), key)
        loaded[key] = builder.build()
        pending.extend(target for target in builder.external if target not in loaded)
    return merge_graphs(*loaded.values())
