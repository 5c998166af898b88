"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions, keyword conflicts, and the
canonical naming of generated types: every renderable type gets a type
name, a namespace (package/module path) derived from its NamespaceScope,
an output file stem, and sanitized field and variant names. The full
name table is built before rendering and shared read-only by renderers.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Set, Tuple

from ..logging_config import get_logger
from .errors import DuplicateDefinitionError
from .resolver import DescriptorTree, ResolvedEnum, ResolvedObject
from .schema import NamespaceScope

logger = get_logger(__name__)


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    KEBAB_CASE = "kebab"  # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME
    ORIGINAL = "original"  # as declared, invalid characters replaced


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None,
                 suffix_on_conflict: str = "_"):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin names that must not be shadowed
            suffix_on_conflict: Suffix appended to reserved names
        """
        self.reserved_words = frozenset(reserved_words or ())
        self.builtin_types = frozenset(builtin_types or ())
        self.suffix_on_conflict = suffix_on_conflict

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.SNAKE_CASE) -> str:
        """
        Sanitize a name for safe use in target language.

        Args:
            name: Original name to sanitize
            target_case: Desired case style

        Returns:
            Sanitized name safe for use
        """
        words = split_words(name)
        converted = self._convert_case(name, words, target_case)

        if not converted:
            converted = "field"

        if converted[0].isdigit():
            prefix = "X" if target_case == NamingCase.PASCAL_CASE else "_"
            converted = f"{prefix}{converted}"

        return self._resolve_conflicts(converted)

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words or name in self.builtin_types

    def _convert_case(self, name: str, words: List[str], target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return "_".join(word.lower() for word in words)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return "_".join(word.upper() for word in words)
        elif target_case == NamingCase.KEBAB_CASE:
            return "-".join(word.lower() for word in words)
        elif target_case == NamingCase.PASCAL_CASE:
            return "".join(_capitalize(word) for word in words)
        elif target_case == NamingCase.CAMEL_CASE:
            if not words:
                return ""
            return words[0].lower() + "".join(_capitalize(word) for word in words[1:])
        else:
            return re.sub(r"[^A-Za-z0-9_]", "_", name).strip("_")

    def _resolve_conflicts(self, name: str) -> str:
        """Suffix names that clash with reserved words or builtins."""
        if self.is_reserved(name):
            return f"{name}{self.suffix_on_conflict}"
        return name


def split_words(name: str) -> List[str]:
    """
    Split an identifier into words.

    Handles separators, camelCase boundaries and acronyms:
    ``"HTTPServerURL"`` -> ``["HTTP", "Server", "URL"]``.
    """
    spaced = re.sub(r"[^A-Za-z0-9]+", " ", name)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", spaced)
    return spaced.split()


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


@dataclass(frozen=True)
class CasingPolicy:
    """Per-language naming rules, fixed for a whole run."""

    type_case: NamingCase = NamingCase.PASCAL_CASE
    field_case: NamingCase = NamingCase.CAMEL_CASE
    variant_case: NamingCase = NamingCase.ORIGINAL
    namespace_case: NamingCase = NamingCase.SNAKE_CASE
    file_case: NamingCase = NamingCase.ORIGINAL  # applied to the type name
    type_suffix: str = "Dto"
    root_namespace: Tuple[str, ...] = ()
    reserved_words: FrozenSet[str] = frozenset()
    builtin_types: FrozenSet[str] = frozenset()
    reserved_suffix: str = "_"
    qualify_variants: bool = False  # prefix variant names with the type name

    def __post_init__(self):
        object.__setattr__(self, "root_namespace", tuple(self.root_namespace))
        object.__setattr__(self, "reserved_words", frozenset(self.reserved_words))
        object.__setattr__(self, "builtin_types", frozenset(self.builtin_types))


@dataclass(frozen=True)
class CanonicalName:
    """Final identifiers of one generated type."""

    type_id: str
    scope: NamespaceScope
    schema_name: str
    type_name: str
    namespace: Tuple[str, ...]
    file_stem: str
    field_names: Mapping[str, str] = field(default_factory=dict, hash=False)
    variant_names: Mapping[str, str] = field(default_factory=dict, hash=False)

    @property
    def package(self) -> str:
        return ".".join(self.namespace)

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.type_name}" if self.namespace else self.type_name

    @property
    def module(self) -> str:
        """Dotted module path of the output file."""
        return ".".join(self.namespace + (self.file_stem,))

    def path(self, extension: str) -> str:
        return str(PurePosixPath(*self.namespace, f"{self.file_stem}{extension}"))

    def field_name(self, name: str) -> str:
        return self.field_names[name]

    def variant_name(self, value: str) -> str:
        return self.variant_names[value]


@dataclass(frozen=True)
class NameTable:
    """Canonical names of every renderable type, keyed by type id."""

    names: Mapping[str, CanonicalName]

    def __post_init__(self):
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))

    def __getitem__(self, type_id: str) -> CanonicalName:
        return self.names[type_id]

    def __contains__(self, type_id: str) -> bool:
        return type_id in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def get(self, type_id: str) -> Optional[CanonicalName]:
        return self.names.get(type_id)

    def namespaces(self) -> List[Tuple[str, ...]]:
        """Distinct namespaces in first-seen order."""
        return list(dict.fromkeys(name.namespace for name in self.names.values()))


class NamingStrategy:
    """Derives collision-free identifiers from schema names and scopes."""

    def __init__(self, policy: CasingPolicy):
        self.policy = policy
        self.sanitizer = NameSanitizer(
            policy.reserved_words, policy.builtin_types, policy.reserved_suffix
        )

    def namespace(self, scope: NamespaceScope) -> Tuple[str, ...]:
        """Namespace path: root, then scope package segments, then version."""
        segments = [
            self.sanitizer.sanitize_name(segment, self.policy.namespace_case)
            for segment in scope.segments
        ]
        if scope.version:
            version = re.sub(r"[^A-Za-z0-9]+", "_", scope.version).strip("_")
            if version[:1].isdigit():
                version = f"v{version}"
            segments.append(self.sanitizer.sanitize_name(version, self.policy.namespace_case))
        return self.policy.root_namespace + tuple(segments)

    def type_name(self, schema_name: str) -> str:
        return self.sanitizer.sanitize_name(schema_name, self.policy.type_case) + self.policy.type_suffix

    def field_name(self, name: str) -> str:
        return self.sanitizer.sanitize_name(name, self.policy.field_case)

    def variant_name(self, value: str, type_name: str = "") -> str:
        if self.policy.qualify_variants:
            return type_name + self.sanitizer.sanitize_name(value, NamingCase.PASCAL_CASE)
        return self.sanitizer.sanitize_name(value, self.policy.variant_case)

    def name(self, schema_name: str, scope: NamespaceScope, type_id: Optional[str] = None) -> CanonicalName:
        """Canonical name of a type, without member names."""
        type_name = self.type_name(schema_name)
        if self.policy.file_case == NamingCase.ORIGINAL:
            file_stem = type_name
        else:
            file_stem = self.sanitizer.sanitize_name(type_name, self.policy.file_case)
        return CanonicalName(
            type_id=type_id or schema_name,
            scope=scope,
            schema_name=schema_name,
            type_name=type_name,
            namespace=self.namespace(scope),
            file_stem=file_stem,
        )

    def build_table(self, tree: DescriptorTree) -> NameTable:
        """
        Name every object and enum in the tree.

        Raises:
            DuplicateDefinitionError: Two types share a name or output file
                inside one namespace, or two members of a type share a name
        """
        names: Dict[str, CanonicalName] = {}
        by_name: Dict[Tuple[Tuple[str, ...], str], str] = {}
        by_file: Dict[Tuple[Tuple[str, ...], str], str] = {}

        for node in tree.renderable():
            canonical = self.name(node.name, node.scope, node.type_id)

            key = (canonical.namespace, canonical.type_name)
            if key in by_name:
                raise DuplicateDefinitionError(
                    f"Type name '{canonical.type_name}' is also used by '{by_name[key]}'",
                    type_id=node.type_id,
                    scope=node.scope,
                )
            by_name[key] = node.type_id

            # Case-insensitive file systems
            file_key = (canonical.namespace, canonical.file_stem.casefold())
            if file_key in by_file:
                raise DuplicateDefinitionError(
                    f"Output file '{canonical.file_stem}' is also used by '{by_file[file_key]}'",
                    type_id=node.type_id,
                    scope=node.scope,
                )
            by_file[file_key] = node.type_id

            if isinstance(node, ResolvedObject):
                members = self._members(node, [item.name for item in node.fields], self.field_name, "Field")
                canonical = replace(canonical, field_names=MappingProxyType(members))
            elif isinstance(node, ResolvedEnum):
                members = self._members(
                    node,
                    list(node.variants),
                    lambda value: self.variant_name(value, canonical.type_name),
                    "Enum variant",
                )
                canonical = replace(canonical, variant_names=MappingProxyType(members))
                if self.policy.qualify_variants:
                    # Qualified variants share the namespace with type names
                    for variant in members.values():
                        key = (canonical.namespace, variant)
                        if key in by_name:
                            raise DuplicateDefinitionError(
                                f"Enum variant '{variant}' is also used by '{by_name[key]}'",
                                type_id=node.type_id,
                                scope=node.scope,
                            )
                        by_name[key] = node.type_id

            names[node.type_id] = canonical
            logger.debug("Named %s as %s", node.type_id, canonical.qualified_name)

        table = NameTable(names)
        logger.info("Named %d types in %d namespaces", len(table), len(table.namespaces()))
        return table

    @staticmethod
    def _members(node, originals: List[str], convert, label: str) -> Dict[str, str]:
        members: Dict[str, str] = {}
        taken: Dict[str, str] = {}
        for original in originals:
            converted = convert(original)
            if converted in taken:
                raise DuplicateDefinitionError(
                    f"{label} '{original}' and '{taken[converted]}' both map to '{converted}'",
                    type_id=node.type_id,
                    scope=node.scope,
                )
            taken[converted] = original
            members[original] = converted
        return members
