"""
Command line interface.

Loads schema documents, generates DTO sources for the selected languages
and writes them, with rich console output.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .core.config import ConfigError, GeneratorConfig, load_config, validate_config
from .core.errors import SchemaError
from .core.generator import GenerationResult, generate_code
from .core.naming import NamingCase
from .core.templates import TemplateError
from .emitter import EmitterError, FileEmitter, emit_all
from .loader import LoaderError, load_schema_graph
from .logging_config import configure_logging, get_logger
from .registry import RegistryError, RendererRegistry, create_default_registry

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2

# Pygments lexer names
SYNTAX_NAMES = {"java": "java", "kotlin": "kotlin", "python": "python", "go": "go"}

console = Console()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema2dto",
        description="Generate typed DTO sources from OpenAPI and JSON Schema documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schema2dto generate openapi.yaml -l java -o build/generated
  schema2dto generate shop.yaml users.yaml -l kotlin -l python -o out
  schema2dto generate --url https://example.com/openapi.json -l go --go-module example.com/api
  schema2dto languages
  schema2dto language-info kotlin
        """.strip(),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate DTO sources")
    generate.add_argument("schemas", nargs="*", metavar="SCHEMA", help="Schema documents (JSON or YAML)")
    generate.add_argument("--url", action="append", default=[], help="Schema document URL")
    generate.add_argument(
        "--language", "-l", action="append", dest="languages", metavar="LANG", help="Target language (repeatable)"
    )
    generate.add_argument("--output", "-o", dest="output_dir", help="Output directory")
    generate.add_argument("--config", help="Configuration file path (JSON)")
    generate.add_argument("--root-package", help="Root package/namespace of generated types")
    generate.add_argument("--type-suffix", help="Suffix appended to type names (default: Dto)")
    generate.add_argument("--no-comments", action="store_true", help="Don't add doc comments")
    generate.add_argument("--no-validation", action="store_true", help="Don't add validation rules")
    generate.add_argument(
        "--no-schema-annotations", action="store_true", help="Don't add OpenAPI schema annotations"
    )
    generate.add_argument(
        "--infer-not-blank", action="store_true", help="Require non-blank values for non-nullable strings"
    )
    generate.add_argument(
        "--field-case",
        choices=[case.value for case in NamingCase],
        help="Naming case for fields, in every selected language",
    )
    generate.add_argument("--go-module", help="Go module path prefixed to package imports")
    generate.add_argument("--workers", type=int, dest="max_workers", help="Rendering threads")
    generate.add_argument("--dry-run", action="store_true", help="Print sources instead of writing them")
    generate.set_defaults(func=_handle_generate)

    languages = subparsers.add_parser("languages", help="List supported languages")
    languages.set_defaults(func=_handle_languages)

    info = subparsers.add_parser("language-info", help="Show details about a language")
    info.add_argument("language", help="Language name or alias")
    info.set_defaults(func=_handle_language_info)

    return parser


def build_config(args: argparse.Namespace, registry: Optional[RendererRegistry] = None) -> GeneratorConfig:
    """Merge the configuration file with command line overrides."""
    overrides: Dict[str, Any] = {}
    if args.languages:
        overrides["languages"] = args.languages
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.root_package is not None:
        overrides["root_package"] = args.root_package
    if args.type_suffix is not None:
        overrides["type_suffix"] = args.type_suffix
    if args.no_comments:
        overrides["add_comments"] = False
    if args.no_validation:
        overrides["add_validation"] = False
    if args.no_schema_annotations:
        overrides["add_schema_annotations"] = False
    if args.infer_not_blank:
        overrides["infer_not_blank"] = True
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.go_module:
        overrides["custom"] = {"go_module": args.go_module}

    config = load_config(custom_config=overrides, config_file=args.config)

    if args.field_case:
        casing = {language: dict(values) for language, values in config.casing.items()}
        for language in config.languages:
            if registry is not None:
                language = registry.resolve_name(language)
            casing.setdefault(language, {})["field_case"] = args.field_case
        config = config.with_overrides(casing=casing)

    return config


def _handle_generate(args: argparse.Namespace, registry: RendererRegistry) -> int:
    sources: List[str] = list(args.schemas) + list(args.url)
    if not sources:
        console.print("[red]✗[/red] At least one schema document or --url is required")
        return EXIT_ERROR

    config = build_config(args, registry)
    for warning in validate_config(config, registry.list_languages() + _all_aliases(registry)):
        console.print(f"[yellow]⚠️  {warning}[/yellow]")

    graph = load_schema_graph(*sources)
    result = generate_code(graph, config, registry)

    if args.dry_run:
        _print_sources(result)
    else:
        paths = emit_all(result, FileEmitter(config.output_dir))
        console.print(f"[green]✓[/green] Wrote {len(paths)} files to [cyan]{Path(config.output_dir)}[/cyan]")

    _print_summary(result, args.verbose)

    if result.failures:
        return EXIT_PARTIAL
    return EXIT_OK


def _all_aliases(registry: RendererRegistry) -> List[str]:
    return [alias for language in registry.list_languages() for alias in registry.get_aliases_for_language(language)]


def _print_sources(result: GenerationResult):
    for unit in result.units:
        console.print(Panel(Syntax(unit.text, SYNTAX_NAMES.get(unit.language, "text")), title=unit.path))


def _print_summary(result: GenerationResult, verbose: bool):
    table = Table(title="📊 Generated Units", box=box.SIMPLE, header_style="bold cyan")
    table.add_column("Language", style="bold green")
    table.add_column("Units", justify="right")
    table.add_column("Failures", justify="right", style="red")

    for language in result.metadata.get("languages", []):
        failures = sum(1 for failure in result.failures if failure.language == language)
        table.add_row(language, str(len(result.units_for(language))), str(failures))

    console.print()
    console.print(table)

    if verbose:
        for unit in result.units:
            console.print(f"  [dim]{unit.language}[/dim] {unit.path}")

    if result.failures:
        console.print("\n[red]✗ Not generated:[/red]")
        for failure in result.failures:
            console.print(f"  [red]•[/red] {failure}")

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")


def _handle_languages(args: argparse.Namespace, registry: RendererRegistry) -> int:
    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Renderer", style="dim")
    table.add_column("Aliases", style="blue")

    for name, info in sorted(registry.list_all_language_info().items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(name, info["file_extension"], info["class"], aliases)

    console.print(table)
    return EXIT_OK


def _handle_language_info(args: argparse.Namespace, registry: RendererRegistry) -> int:
    if not registry.is_supported(args.language):
        console.print(f"[red]✗ Language '{args.language}' is not supported[/red]")
        console.print("[dim]Use 'schema2dto languages' to see available options[/dim]")
        return EXIT_ERROR

    info = registry.get_language_info(args.language)
    text = (
        f"[bold]Language:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Renderer:[/bold] {info['class']}\n"
        f"[bold]Module:[/bold] {info['module']}\n"
        f"[bold]Type case:[/bold] {info['type_case']}\n"
        f"[bold]Field case:[/bold] {info['field_case']}\n"
        f"[bold]Variant case:[/bold] {info['variant_case']}"
    )
    if info["aliases"]:
        text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print(Panel(text, title=f"🔧 {info['name'].title()} Renderer", border_style="green"))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``schema2dto`` command."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return args.func(args, create_default_registry())
    except (ConfigError, LoaderError, RegistryError, SchemaError, TemplateError, EmitterError) as e:
        logger.error("%s", e)
        console.print(f"[red]✗ Error:[/red] {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
