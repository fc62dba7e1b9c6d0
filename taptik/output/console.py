# Taptik Console Output
# Rich-based console output for user-friendly display

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taptik.convert.engine import ConversionResult
from taptik.convert.report import ConversionReport
from taptik.metadata.models import CloudMetadata
from taptik.package.packager import TaptikPackage
from taptik.pipeline import PipelineResult
from taptik.sanitize.engine import SanitizationResult, SecurityLevel
from taptik.validate.engine import ValidationResult

_LEVEL_STYLES = {
    SecurityLevel.SAFE: "green",
    SecurityLevel.WARNING: "yellow",
    SecurityLevel.BLOCKED: "red",
}


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for pipeline results.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(force_terminal=colored, no_color=not colored)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_sanitization_result(self, result: SanitizationResult) -> None:
        """
        Print sanitization summary, severity breakdown and findings.

        Args:
            result: Sanitization result to display.
        """
        style = _LEVEL_STYLES[result.security_level]
        breakdown = result.severity_breakdown
        self._console.print(
            Panel(
                f"Security level: [{style}]{result.security_level.value}[/{style}]\n"
                f"{result.report.summary}\n"
                f"Critical: {breakdown.critical}, medium: {breakdown.medium}, "
                f"low: {breakdown.low}, safe: {breakdown.safe}",
                title="Sanitization",
                border_style=style,
            )
        )

        for finding in result.findings:
            self._console.print(f"  [yellow]![/yellow] {escape(finding)}")

        if self.verbose and result.report.detailed_findings:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Category")
            table.add_column("Severity")
            table.add_column("Count", justify="right")
            for detail in result.report.detailed_findings:
                table.add_row(detail.category, detail.severity, str(detail.count))
            self._console.print(table)

        self._print_list("Recommendations", result.recommendations)

    def print_metadata(self, metadata: CloudMetadata) -> None:
        """Print generated metadata."""
        counts = metadata.component_count
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Title", metadata.title)
        if metadata.description:
            table.add_row("Description", metadata.description)
        table.add_row("Source", metadata.source_ide)
        table.add_row("Targets", ", ".join(metadata.target_ides))
        table.add_row("Complexity", f"{metadata.complexity_level.value} ({counts.total} components)")
        table.add_row(
            "Components",
            f"{counts.agents} agents, {counts.commands} commands, {counts.mcp_servers} MCP servers, "
            f"{counts.steering_rules} steering rules, {counts.instructions} instructions",
        )
        table.add_row("Tags", ", ".join(metadata.tags) or "-")
        table.add_row("Features", ", ".join(metadata.features) or "-")
        table.add_row("Compatibility", ", ".join(metadata.compatibility) or "-")
        if self.verbose:
            table.add_row("Keywords", ", ".join(metadata.search_keywords) or "-")
        self._console.print(Panel(table, title="Metadata", border_style="blue"))

    def print_conversion_result(self, result: ConversionResult) -> None:
        """Print conversion outcome with its feature mapping report."""
        report = ConversionReport.from_result(result)
        header = f"{result.source or 'unknown'} → {result.target}"

        if not result.success:
            self._console.print(f"[red]✗[/red] [bold]{header}[/bold]")
            if result.error:
                self.print_error(result.error)
        else:
            self._console.print(f"[green]✓[/green] [bold]{header}[/bold]")

        if result.compatibility:
            score = result.compatibility
            self._console.print(
                f"  Compatibility: {score.score}% ({score.rating}), "
                f"reversible: {'yes' if score.reversible else 'no'}, data loss: {report.data_loss}"
            )

        for approximation in result.approximations:
            self._console.print(
                f"  [cyan]~[/cyan] {approximation.source_feature} → {approximation.target_feature} "
                f"[dim]({approximation.confidence.value})[/dim]"
            )
        for feature in result.unsupported_features:
            self._console.print(f"  [red]×[/red] {feature} [dim](unsupported)[/dim]")
        for warning in result.warnings:
            self.print_warning(warning)

        self._print_list("Recommendations", report.recommendations)

    def print_package_summary(self, pkg: TaptikPackage, *, path: str | None = None) -> None:
        """Print package checksum, size and manifest."""
        lines = [
            f"Format: {pkg.format.value}",
            f"Compression: {pkg.compression.value}",
            f"Size: {pkg.size} bytes",
            f"Checksum: {pkg.checksum}",
            f"Files: {len(pkg.manifest.files)}, directories: {len(pkg.manifest.directories)}",
        ]
        if path:
            lines.insert(0, f"Written to: {path}")
        self._console.print(Panel("\n".join(lines), title="Package", border_style="blue"))

        if self.verbose:
            for member in pkg.manifest.files:
                self._console.print(f"  [dim]{member}[/dim]")

    def print_validation_result(self, result: ValidationResult) -> None:
        """Print validation verdict, score, errors and warnings."""
        style = "green" if result.is_valid else "red"
        verdict = "Valid" if result.is_valid else "Invalid"
        limit = result.size_limit
        self._console.print(
            Panel(
                f"[{style}]{verdict}[/{style}] (score {result.validation_score}/100)\n"
                f"Cloud compatible: {'yes' if result.cloud_compatible else 'no'}, "
                f"schema compliant: {'yes' if result.schema_compliant else 'no'}\n"
                f"Size: {limit.current}/{limit.maximum} bytes ({limit.percentage}%)",
                title="Validation",
                border_style=style,
            )
        )

        for error in result.errors:
            self._console.print(f"  [red]✗[/red] {escape(error)}")
        for warning in result.warnings:
            self._console.print(f"  [yellow]![/yellow] {escape(warning)}")

        if self.verbose and (result.feature_support.supported or result.feature_support.unsupported):
            support = result.feature_support
            self._console.print(f"  [dim]Supported features: {', '.join(support.supported) or '-'}[/dim]")
            self._console.print(f"  [dim]Unsupported features: {', '.join(support.unsupported) or '-'}[/dim]")

        self._print_list("Recommendations", result.recommendations)

    def print_pipeline_result(self, result: PipelineResult, *, path: str | None = None) -> None:
        """Print every stage of a pipeline run followed by a summary panel."""
        if result.sanitization:
            self.print_sanitization_result(result.sanitization)
        if result.conversion:
            self.print_conversion_result(result.conversion)
        if result.package:
            self.print_package_summary(result.package, path=path)
        if result.validation:
            self.print_validation_result(result.validation)

        for error in result.errors:
            self.print_error(error)

        if result.upload_ready:
            self._console.print(Panel("[green]Package is ready for upload[/green]", border_style="green"))
        elif result.success:
            self._console.print(
                Panel("[yellow]Package is valid but contains critical secrets[/yellow]", border_style="yellow")
            )
        else:
            self._console.print(Panel("[red]Package is not ready for upload[/red]", border_style="red"))

    def print_config_summary(self, config_path: str, exists: bool) -> None:
        """Print configuration summary."""
        state = "found" if exists else "not found, using defaults"
        self._console.print(
            Panel(
                f"Config: {config_path} ({state})",
                title="Taptik Configuration",
                border_style="blue",
            )
        )

    def _print_list(self, title: str, items: list[str]) -> None:
        if not items:
            return
        self._console.print(f"\n[bold]{title}:[/bold]")
        for item in items:
            self._console.print(f"  • {escape(item)}")


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
