"""
Main CLI entry point for import-order
"""

import logging
import sys
from pathlib import Path

import click

from import_order import __version__
from import_order.commands.explain import ExplainCommand
from import_order.commands.reorder import ReorderCommand
from import_order.core.config import PROJECT_CONFIG_NAME, Config
from import_order.core.errors import ParseError

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(
    version=__version__,
    prog_name="import-order",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress output",
)
@click.pass_context
def cli(
    ctx,
    config: str | None,
    verbose: bool,
    quiet: bool,
):
    """Canonical import and declaration ordering

    Rewrites the leading import block of JavaScript/TypeScript modules and
    the script preamble of Svelte components into a deterministic order:
    - Imports grouped by type/value and path kind
    - Component declarations grouped by role (props, state, derived, ...)
    """
    ctx.ensure_object(dict)

    # Load configuration
    if config:
        ctx.obj["config"] = Config.from_file(Path(config))
    else:
        ctx.obj["config"] = Config.load_hierarchy(Path.cwd())

    # Apply CLI flags
    if verbose or ctx.obj["config"].verbose:
        ctx.obj["config"].verbose = True
        logging.getLogger().setLevel(logging.DEBUG)

    if quiet or ctx.obj["config"].quiet:
        ctx.obj["config"].quiet = True
        logging.getLogger().setLevel(logging.WARNING)


@cli.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False),
    help="Git work tree to take changed files from (default: current directory)",
)
@click.option(
    "--since",
    help="Also process files changed since this commit reference",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without applying",
)
@click.option(
    "--check",
    is_flag=True,
    help="Exit with status 1 if any file would be reordered; write nothing",
)
@click.option(
    "--diff",
    "show_diff",
    is_flag=True,
    help="Show a unified diff of every change",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    help="Number of files processed concurrently",
)
@click.pass_context
def reorder(
    ctx,
    paths: tuple[Path, ...],
    repo: str | None,
    since: str | None,
    dry_run: bool,
    check: bool,
    show_diff: bool,
    jobs: int | None,
):
    """Reorder imports and component preambles

    Without PATHS the files changed in the Git work tree (modified, added,
    renamed and untracked) are processed. Directories are searched
    recursively.

    Examples:
        import-order reorder                      # Changed files of the repo
        import-order reorder src/lib              # A whole directory
        import-order reorder --check src          # CI: fail on unordered files
        import-order reorder --since main --diff  # Changes since main, with diff
    """
    config = ctx.obj["config"]
    config.dry_run = config.dry_run or dry_run
    config.check = config.check or check
    config.show_diff = config.show_diff or show_diff
    if repo:
        config.repo_path = repo
    if jobs:
        config.processing.max_workers = jobs
        config.processing.parallel_processing = jobs > 1

    errors = config.validate()
    if errors:
        for error in errors:
            click.echo(f"❌ {error}", err=True)
        sys.exit(1)

    command = ReorderCommand(config)
    try:
        summary = command.execute(list(paths), since=since)
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    if summary.check and summary.changed and not config.quiet:
        click.echo(f"{summary.changed} files would be reordered", err=True)

    sys.exit(summary.exit_code)


@cli.command()
@click.argument(
    "path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
def explain(ctx, path: Path):
    """Show how each statement of a file is classified

    Prints every import (or component preamble statement) with its
    category or bucket, its module path and its position after reordering.

    Examples:
        import-order explain src/lib/api.ts
        import-order explain src/routes/+page.svelte
    """
    command = ExplainCommand(ctx.obj["config"])
    try:
        command.execute(path)
    except ParseError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def init(ctx):
    """Initialize configuration in current directory

    Creates a default .import-order.yaml configuration file in the current
    directory.
    """
    config_path = Path.cwd() / PROJECT_CONFIG_NAME

    if config_path.exists():
        click.confirm(f"{config_path} already exists. Overwrite?", abort=True)

    default_config = Config()
    default_config.save(config_path)

    click.echo(f"Created configuration file: {config_path}")
    click.echo("Edit this file to customize your settings.")


def main():
    """Main entry point"""
    try:
        cli.main(obj={}, standalone_mode=False)
    except (KeyboardInterrupt, click.exceptions.Abort):
        click.echo("\nOperation cancelled by user.", err=True)
        sys.exit(130)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
