"""Click-based CLI for Taptik - configuration portability for AI-assisted IDEs."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from pydantic import ValidationError

from taptik import __version__
from taptik.config import (
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from taptik.config.schema import TaptikConfig
from taptik.context import Platform
from taptik.convert.engine import ConversionEngine, ConversionOptions
from taptik.exceptions import TaptikError
from taptik.logger import configure_logging
from taptik.metadata.generator import MetadataGenerator
from taptik.output import Console, create_console
from taptik.package.packager import Compression, PackageOptions, read_package_data, write_package
from taptik.pipeline import PipelineOptions, PortabilityPipeline
from taptik.sanitize.engine import SanitizationCache, SanitizationEngine
from taptik.validate.cache import ValidationCache
from taptik.validate.engine import ValidationEngine

PLATFORM_CHOICES = [platform.value for platform in Platform]

console = create_console()


class Session:
    """Loaded configuration and console shared by one command invocation."""

    def __init__(self, config: TaptikConfig, console: Console):
        self.config = config
        self.console = console


def _fail(message: str) -> NoReturn:
    console.print_error(message)
    sys.exit(1)


def _session(ctx: click.Context) -> Session:
    """Load configuration, set up logging and build the command console."""
    options = ctx.obj or {}
    try:
        config = load_config(options.get("config_path"))
    except (FileNotFoundError, TaptikError) as e:
        _fail(str(e))
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    verbose = options.get("verbose", False) or config.output.verbose
    configure_logging(verbose=verbose, log_file=config.output.log_file)
    return Session(config, create_console(verbose=verbose, colored=config.output.colored))


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {path}: {e}")
    except UnicodeDecodeError as e:
        _fail(f"Cannot read {path}: {e}")
    if not isinstance(data, dict):
        _fail(f"Expected a JSON object in {path}")
    return data


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


@click.group()
@click.version_option(version=__version__, prog_name="taptik")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Configuration file (default: ~/.config/taptik/config.yaml or $TAPTIK_CONFIG)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """Taptik - Configuration portability for AI-assisted IDEs.

    Sanitize, convert, describe, package and validate IDE configuration
    contexts for sharing.

    \b
    Platforms: claude-code, kiro-ide, cursor-ide
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write sanitized context here")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def sanitize(ctx: click.Context, file: Path, output: Optional[Path], as_json: bool) -> None:
    """Redact secrets from a configuration context.

    \b
    Example:
        taptik sanitize context.json -o context.sanitized.json
    """
    session = _session(ctx)
    context = _read_json(file)

    engine = SanitizationEngine(
        SanitizationCache(max_entries=session.config.cache.sanitization_max_entries),
        cache_key_length=session.config.cache.sanitization_key_length,
    )
    result = engine.sanitize(context)

    if output:
        _write_json(output, result.sanitized_data)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    session.console.print_sanitization_result(result)
    if output:
        session.console.print_success(f"Sanitized context written to {output}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the metadata as JSON")
@click.pass_context
def metadata(ctx: click.Context, file: Path, as_json: bool) -> None:
    """Generate searchable metadata for a configuration context."""
    session = _session(ctx)
    result = MetadataGenerator().generate(_read_json(file))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        session.console.print_metadata(result)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--to", "target", required=True, type=click.Choice(PLATFORM_CHOICES), help="Target platform")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write converted context here")
@click.option("--check", is_flag=True, help="Fail when the compatibility score is below the configured minimum")
@click.option("--force", "-f", is_flag=True, help="Convert even when compatibility is low")
@click.pass_context
def convert(
    ctx: click.Context,
    file: Path,
    target: str,
    output: Optional[Path],
    check: bool,
    force: bool,
) -> None:
    """Convert a configuration context to another platform.

    \b
    Example:
        taptik convert context.json --to kiro-ide -o kiro.json
    """
    session = _session(ctx)
    context = _read_json(file)

    engine = ConversionEngine(min_compatibility_score=session.config.conversion.min_compatibility_score)
    options = ConversionOptions(
        validate_compatibility=check or session.config.conversion.validate_compatibility,
        force=force,
    )
    result = engine.convert(context, target, options)
    session.console.print_conversion_result(result)

    if not result.success:
        sys.exit(1)

    if output and result.context is not None:
        _write_json(output, result.context)
        session.console.print_success(f"Converted context written to {output}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Package file to write")
@click.option("--to", "target", type=click.Choice(PLATFORM_CHOICES), help="Convert to this platform before packaging")
@click.option(
    "--compression",
    type=click.Choice([Compression.GZIP.value, Compression.NONE.value]),
    help="Compression mode (default from configuration)",
)
@click.option("--optimize/--no-optimize", default=None, help="Drop empty containers and collapse whitespace")
@click.option("--premium", is_flag=True, help="Validate against the premium size limit")
@click.option("--force", "-f", is_flag=True, help="Convert even when compatibility is low")
@click.pass_context
def package(
    ctx: click.Context,
    file: Path,
    output: Optional[Path],
    target: Optional[str],
    compression: Optional[str],
    optimize: Optional[bool],
    premium: bool,
    force: bool,
) -> None:
    """Run the full pipeline and write an upload-ready package.

    The context is sanitized, optionally converted, described, packaged
    and validated. Packages with critical secrets are never written.

    \b
    Example:
        taptik package context.json -o context.taptik --to cursor-ide
    """
    session = _session(ctx)
    context = _read_json(file)
    packaging = session.config.packaging

    options = PipelineOptions(
        conversion=ConversionOptions(
            validate_compatibility=session.config.conversion.validate_compatibility,
            force=force,
        ),
        package=PackageOptions(
            compression=Compression(compression) if compression else packaging.compression,
            format=packaging.format,
            optimize_size=packaging.optimize_size if optimize is None else optimize,
        ),
    )

    pipeline = PortabilityPipeline.from_config(session.config)
    result = pipeline.run(context, target_platform=target, is_premium=premium, options=options)

    written = None
    if output and result.upload_ready and result.package is not None:
        try:
            write_package(result.package, output)
        except (OSError, TaptikError) as e:
            _fail(f"Cannot write package: {e}")
        written = str(output)

    session.console.print_pipeline_result(result, path=written)

    if not result.upload_ready:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--premium", is_flag=True, help="Validate against the premium size limit")
@click.option("--json", "as_json", is_flag=True, help="Print the result and metrics as JSON")
@click.pass_context
def validate(ctx: click.Context, file: Path, premium: bool, as_json: bool) -> None:
    """Validate a package file for upload.

    Accepts gzip-compressed and plain JSON packages.
    """
    session = _session(ctx)
    try:
        data = read_package_data(file)
    except TaptikError as e:
        _fail(str(e))

    limits = session.config.limits
    engine = ValidationEngine(
        ValidationCache(ttl_seconds=session.config.cache.validation_ttl_seconds),
        max_size=limits.max_package_size,
        premium_max_size=limits.premium_max_package_size,
    )
    report = engine.validation_report(data, is_premium=premium)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        session.console.print_validation_result(report.result)

    if not report.result.is_valid:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("init")
@click.pass_context
def config_init(ctx: click.Context) -> None:
    """Create a default configuration file if none exists."""
    config_path, created = ensure_config_exists(ctx.obj.get("config_path") if ctx.obj else None)
    if created:
        console.print_success(f"Created configuration at {config_path}")
    else:
        console.print_info(f"Configuration already exists at {config_path}")


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration."""
    session = _session(ctx)
    config_path = ctx.obj.get("config_path") or get_config_path()
    session.console.print_config_summary(str(config_path), config_path.exists())
    click.echo(json.dumps(session.config.model_dump(mode="json"), indent=2))


@config.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    config_path = ctx.obj.get("config_path") or get_config_path()
    valid, errors = validate_config_file(config_path)
    if valid:
        console.print_success(f"Configuration is valid: {config_path}")
        return

    for error in errors:
        console.print_error(error)
    sys.exit(1)


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print the configuration file path."""
    click.echo(str(ctx.obj.get("config_path") or get_config_path()))


if __name__ == "__main__":
    cli()
