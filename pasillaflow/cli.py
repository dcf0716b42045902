"""
Command-line interface for PasillaFlow
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__, check_dependencies, get_info
from .config import Config, get_default_config, load_config, save_config
from .config import validate_config as validate_config_func
from .core import PasillaFlowAnalysis
from .exceptions import PasillaFlowError
from .utils import setup_logging, validate_input_files


# Global context for CLI
class CLIContext:
    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[Config] = None
        self.verbose: bool = False
        self.quiet: bool = False
        self.log_file: Optional[Path] = None

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "WARNING" if self.quiet else "INFO"

    def get_config(self) -> Config:
        return self.config if self.config is not None else get_default_config()


def _fail(message: str, verbose: bool = False) -> None:
    click.echo(message, err=True)
    if verbose:
        import traceback

        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option(__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode (minimal output)")
@click.option("--log-file", type=click.Path(), help="Also write the log to this file")
@click.pass_context
def main(ctx, config, verbose, quiet, log_file):
    """
    PasillaFlow: differential expression analysis of the Pasilla RNA-seq study

    Fits treated vs untreated Drosophila samples (controlling for
    single-end vs paired-end sequencing), exports ranked result tables
    and renders diagnostic and result charts.
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet
    cli_ctx.log_file = Path(log_file) if log_file else None

    setup_logging(level=cli_ctx.log_level, log_file=cli_ctx.log_file)

    if config:
        cli_ctx.config_file = Path(config)
        try:
            cli_ctx.config = load_config(cli_ctx.config_file)
        except PasillaFlowError as e:
            _fail(f"Error: {e}")

    ctx.obj = cli_ctx


@main.command()
def info():
    """Show PasillaFlow package information"""

    info_data = get_info()

    click.echo("=" * 50)
    click.echo(f"PasillaFlow v{info_data['version']}")
    click.echo("=" * 50)
    click.echo(f"Description: {info_data['description']}")
    click.echo(f"Python version: {info_data['python_version']}")
    click.echo()

    click.echo("Available modules:")
    for module in info_data["modules"]:
        click.echo(f"  - {module}")
    click.echo()

    deps = check_dependencies()
    click.echo("Dependency status:")
    for dep, available in deps.items():
        status = "✓" if available else "✗"
        click.echo(f"  {status} {dep}")


@main.command()
@click.argument("output_file", type=click.Path())
@click.option(
    "--format",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format for configuration file",
)
def init_config(output_file, format):
    """Initialize a new PasillaFlow configuration file"""

    output_path = Path(output_file)

    if output_path.exists():
        if not click.confirm(f"File {output_path} already exists. Overwrite?"):
            click.echo("Configuration initialization cancelled.")
            return

    config = get_default_config()

    try:
        if format == "json":
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                json.dump(config.to_dict(), f, indent=2)
        else:
            save_config(config, output_path)
    except OSError as e:
        _fail(f"Error creating configuration file: {e}")

    click.echo(f"Configuration file created: {output_path}")
    click.echo("Edit this file to customize your analysis parameters.")


def _run_pipeline(cli_ctx: CLIContext, counts, design, output, steps):
    config = cli_ctx.get_config()
    if output:
        config.output_dir = str(output)

    try:
        analysis = PasillaFlowAnalysis(
            config=config, log_level=cli_ctx.log_level, setup_logs=False
        )
        analysis.run_full_pipeline(counts=counts, design=design, steps=steps)
    except (PasillaFlowError, ValueError) as e:
        _fail(f"Pipeline execution failed: {e}", cli_ctx.verbose)

    return analysis


def _echo_result(analysis: PasillaFlowAnalysis) -> None:
    result = analysis.results["differential_analysis"]
    click.echo(
        f"{result.comparison_name}: {result.n_significant} significant genes "
        f"({result.n_up_regulated} up, {result.n_down_regulated} down) "
        f"of {result.n_tested} tested"
    )
    click.echo(f"Top genes: {', '.join(result.top_genes)}")

    for name, path in result.output_files.items():
        click.echo(f"  ✓ {name}: {path}")


@main.command()
@click.option("--counts", type=click.Path(), help="Count matrix CSV file")
@click.option("--design", type=click.Path(), help="Sample design CSV file")
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.pass_context
def run(ctx, counts, design, output):
    """Run the complete PasillaFlow analysis pipeline"""

    cli_ctx = ctx.obj
    click.echo("Starting PasillaFlow analysis pipeline...")

    analysis = _run_pipeline(cli_ctx, counts, design, output, steps=None)
    _echo_result(analysis)

    figures = analysis.results["visualization"]
    n_files = sum(len(paths) for paths in figures.values())
    click.echo(f"Rendered {len(figures)} charts ({n_files} files)")

    total_time = analysis.get_execution_times().get("total", 0)
    click.echo(f"Total execution time: {total_time:.2f} seconds")


@main.command()
@click.option("--counts", type=click.Path(), help="Count matrix CSV file")
@click.option("--design", type=click.Path(), help="Sample design CSV file")
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.pass_context
def differential(ctx, counts, design, output):
    """Run differential analysis and export tables (no charts)"""

    cli_ctx = ctx.obj
    click.echo("Running differential analysis...")

    analysis = _run_pipeline(
        cli_ctx, counts, design, output, steps=["differential_analysis", "export"]
    )
    _echo_result(analysis)


@main.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate_config(config_file):
    """Validate a PasillaFlow configuration file"""

    try:
        config = load_config(config_file)
    except PasillaFlowError as e:
        _fail(f"Configuration validation failed: {e}")

    click.echo(f"Configuration loaded successfully: {config_file}")

    issues = validate_config_func(config) + validate_input_files(config)

    if not issues:
        click.echo("✓ Configuration is valid")
    else:
        click.echo("Configuration issues found:")
        for issue in issues:
            click.echo(f"  ✗ {issue}")
        sys.exit(1)


if __name__ == "__main__":
    main()
