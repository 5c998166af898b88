"""
Renderer registry for managing available target languages.

Maps language names and aliases to renderer factories. A registry is
built per run; there is no process-wide instance.
"""

from typing import Any, Callable, Dict, List, Optional

from .core.config import GeneratorConfig
from .core.generator import Renderer

RendererFactory = Callable[[GeneratorConfig], Renderer]


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


class RendererRegistry:
    """Registry for managing available renderers."""

    def __init__(self):
        """Initialize empty registry."""
        self._factories: Dict[str, RendererFactory] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        factory: RendererFactory,
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a renderer factory for a language.

        Args:
            language: Primary language name (e.g., 'java', 'go')
            factory: Callable creating a renderer from a GeneratorConfig
            aliases: Alternative names for this language
            replace: If True, replace an existing registration

        Raises:
            RegistryError: If the factory is not callable or names conflict
        """
        if not callable(factory):
            raise RegistryError(f"Renderer factory for '{language}' is not callable")

        language_key = language.lower()

        if language_key in self._factories and not replace:
            raise RegistryError(f"Language '{language}' is already registered")
        if language_key in self._aliases:
            raise RegistryError(f"Language '{language}' is already an alias of '{self._aliases[language_key]}'")

        self._factories[language_key] = factory

        for alias in aliases or []:
            alias_key = alias.lower()

            # Skip if alias is the same as primary
            if alias_key == language_key:
                continue

            if alias_key in self._factories:
                raise RegistryError(f"Alias '{alias}' conflicts with existing primary language")
            if alias_key in self._aliases and self._aliases[alias_key] != language_key:
                raise RegistryError(f"Alias '{alias}' already points to '{self._aliases[alias_key]}'")

            self._aliases[alias_key] = language_key

    def unregister(self, language: str):
        """
        Unregister a language and its aliases.

        Args:
            language: Language name to unregister
        """
        language_key = language.lower()
        self._factories.pop(language_key, None)

        for alias in [alias for alias, target in self._aliases.items() if target == language_key]:
            del self._aliases[alias]

    def resolve_name(self, language: str) -> str:
        """
        Resolve a language name or alias to its primary name.

        Raises:
            RegistryError: If language not found
        """
        language_key = language.lower()

        if language_key in self._factories:
            return language_key
        if language_key in self._aliases:
            return self._aliases[language_key]

        raise RegistryError(
            f"No renderer registered for language: {language}. "
            f"Available: {', '.join(self.list_languages())}"
        )

    def create(self, language: str, config: Optional[GeneratorConfig] = None) -> Renderer:
        """
        Create a renderer for a language.

        Args:
            language: Language name or alias
            config: Run configuration; defaults when omitted

        Returns:
            Configured renderer instance

        Raises:
            RegistryError: If the language is unknown or the factory does not
                produce a renderer
        """
        factory = self._factories[self.resolve_name(language)]
        renderer = factory(config or GeneratorConfig())

        if not isinstance(renderer, Renderer):
            raise RegistryError(f"Factory for '{language}' did not return a renderer")

        return renderer

    def list_languages(self) -> List[str]:
        """Get list of registered primary language names."""
        return sorted(self._factories.keys())

    def get_aliases_for_language(self, language: str) -> List[str]:
        """
        Get all aliases for a specific language.

        Args:
            language: Primary language name

        Returns:
            List of aliases for this language
        """
        language_key = language.lower()
        return sorted(alias for alias, target in self._aliases.items() if target == language_key)

    def is_supported(self, language: str) -> bool:
        """
        Check if language is supported.

        Args:
            language: Language name or alias

        Returns:
            True if supported
        """
        language_key = language.lower()
        return language_key in self._factories or language_key in self._aliases

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """
        Get information about a registered language.

        Args:
            language: Language name or alias

        Returns:
            Dict with language information

        Raises:
            RegistryError: If language not found
        """
        language_key = self.resolve_name(language)
        renderer = self.create(language_key)
        policy = renderer.default_casing()

        return {
            "name": renderer.language_name,
            "class": type(renderer).__name__,
            "file_extension": renderer.file_extension,
            "aliases": self.get_aliases_for_language(language_key),
            "module": type(renderer).__module__,
            "type_case": policy.type_case.value,
            "field_case": policy.field_case.value,
            "variant_case": policy.variant_case.value,
        }

    def list_all_language_info(self) -> Dict[str, Dict[str, Any]]:
        """Get information about all registered languages."""
        return {language: self.get_language_info(language) for language in self.list_languages()}


def create_default_registry() -> RendererRegistry:
    """
    Create a registry with every built-in renderer.

    This is the single source of truth for renderer registration.
    """
    from .languages.go import GoRenderer
    from .languages.java import JavaRenderer
    from .languages.kotlin import KotlinRenderer
    from .languages.python import PythonRenderer

    registry = RendererRegistry()
    registry.register("java", JavaRenderer)
    registry.register("kotlin", KotlinRenderer, aliases=["kt"])
    registry.register("python", PythonRenderer, aliases=["py"])
    registry.register("go", GoRenderer, aliases=["golang"])
    return registry
