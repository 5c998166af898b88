"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
Configuration objects are immutable and passed explicitly to each run.
"""

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .naming import CasingPolicy, NamingCase


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


CASING_KEYS = ("type_case", "field_case", "variant_case", "namespace_case", "file_case")


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration of one generation run."""

    # Targets and output
    languages: Tuple[str, ...] = ("java",)
    output_dir: str = "generated"
    root_package: str = "generated.model"
    type_suffix: str = "Dto"

    # Code style settings
    indent_size: int = 4
    use_tabs: bool = False

    # Additional metadata
    add_comments: bool = True
    add_schema_annotations: bool = True
    add_validation: bool = True
    infer_not_blank: bool = False

    # Rendering workers; 1 renders inline
    max_workers: int = 4

    # Per-language casing overrides, e.g. {"python": {"field_case": "camel"}}
    casing: Mapping[str, Mapping[str, str]] = field(default_factory=dict, hash=False)

    # Custom settings (language-specific)
    custom: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        languages = self.languages
        if isinstance(languages, str):
            languages = (languages,)
        object.__setattr__(self, "languages", tuple(languages))
        object.__setattr__(
            self,
            "casing",
            MappingProxyType({lang: MappingProxyType(dict(values)) for lang, values in self.casing.items()}),
        )
        object.__setattr__(self, "custom", MappingProxyType(dict(self.custom)))

    @property
    def root_namespace(self) -> Tuple[str, ...]:
        return tuple(part for part in self.root_package.split(".") if part)

    def with_overrides(self, **overrides) -> "GeneratorConfig":
        return replace(self, **overrides)

    def casing_for(self, language: str, base: CasingPolicy) -> CasingPolicy:
        """
        Combine a renderer's default casing policy with this configuration.

        Raises:
            ConfigError: If an override names an unknown key or case style
        """
        changes: Dict[str, Any] = {
            "type_suffix": self.type_suffix,
            "root_namespace": self.root_namespace,
        }
        for key, value in self.casing.get(language, {}).items():
            if key not in CASING_KEYS:
                raise ConfigError(f"Unknown casing option for {language}: {key}")
            try:
                changes[key] = NamingCase(value)
            except ValueError:
                raise ConfigError(f"Invalid {key} for {language}: {value}") from None
        return replace(base, **changes)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name == "languages":
                value = list(value)
            elif item.name == "casing":
                value = {lang: dict(values) for lang, values in value.items()}
            elif item.name == "custom":
                value = dict(value)
            result[item.name] = value
        return result


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration manager.

        Args:
            defaults: Base values applied before files and overrides
        """
        self._defaults: Dict[str, Any] = dict(defaults or {})

    def get_config(self, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        # Start with defaults
        base_config = dict(self._defaults)

        # Load from file if provided
        if config_file:
            base_config.update(self._load_config_file(config_file))

        # Apply custom overrides
        if custom_config:
            for key, value in custom_config.items():
                if key in ("custom", "casing") and isinstance(value, dict):
                    merged = dict(base_config.get(key, {}))
                    merged.update(value)
                    value = merged
                base_config[key] = value

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        # Extract known fields
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Add custom fields to the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        try:
            return GeneratorConfig(**config_args)
        except (TypeError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {str(e)}") from e

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = config.to_dict()
        custom = config_dict.pop("custom")
        # Custom settings are stored flat, as they are read
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e


def validate_config(config: GeneratorConfig, known_languages: Optional[List[str]] = None) -> List[str]:
    """
    Validate a configuration.

    Returns:
        List of validation warnings/errors
    """
    warnings = []

    if not config.languages:
        warnings.append("No target languages selected")

    if known_languages is not None:
        for language in config.languages:
            if language not in known_languages:
                warnings.append(f"Unknown language: {language}")

    valid_cases = {case.value for case in NamingCase}
    for language, values in config.casing.items():
        for key, value in values.items():
            if key not in CASING_KEYS:
                warnings.append(f"Unknown casing option for {language}: {key}")
            elif value not in valid_cases:
                warnings.append(f"Invalid {key} for {language}: {value}")

    for segment in config.root_package.split("."):
        if segment and not segment.isidentifier():
            warnings.append(f"Invalid root package segment: {segment}")

    if config.type_suffix and not re.fullmatch(r"[A-Za-z0-9_]*", config.type_suffix):
        warnings.append(f"Invalid type suffix: {config.type_suffix}")

    if config.indent_size < 1:
        warnings.append(f"Invalid indent_size: {config.indent_size}")

    if config.max_workers < 1:
        warnings.append(f"Invalid max_workers: {config.max_workers}")

    if "go" in config.languages and not config.custom.get("go_module"):
        warnings.append("No go_module configured; cross-package imports use the root package path")

    return warnings


def load_config(custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    return ConfigManager().get_config(custom_config, config_file)
