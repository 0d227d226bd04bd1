"""CLI for lume using Click.

Provides the `lume import-map`, `lume upgrade-check` and `lume version`
commands.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
import httpx

from lume.config import (
    ConfigError,
    LumeSettings,
    set_config_context,
)
from lume.exceptions import UpgradeCheckError
from lume.import_map import update_import_map_file
from lume.upgrade import VersionInfo, check_for_upgrade, get_current_version

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Use specific config file (skips discovery)",
)
@click.option(
    "-d",
    "--dir",
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory (default: current directory)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show debug logging",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    project_dir: Path | None,
    verbose: bool,
) -> None:
    """lume - static site generator utilities."""
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if project_dir is None:
        project_dir = Path.cwd()
    project_dir = project_dir.resolve()

    set_config_context(project_dir, explicit_config=config_file)

    try:
        settings = LumeSettings()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj["settings"] = settings
    ctx.obj["project_dir"] = project_dir


@cli.command("import-map")
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def import_map(ctx: click.Context, file: Path | None) -> None:
    """Create or update an import map file with lume's imports.

    FILE defaults to the `import_map_file` setting, relative to the
    project directory. Relative entries of an existing map are resolved
    against the file location.

    Examples:

        \b
        # Update ./import_map.json
        lume import-map

        \b
        # Use another file
        lume import-map .vscode/lume_import_map.json
    """
    settings: LumeSettings = ctx.obj["settings"]
    project_dir: Path = ctx.obj["project_dir"]

    if file is None:
        file = project_dir / settings.import_map_file

    updated = update_import_map_file(file, timeout=settings.http_timeout)

    if updated:
        click.echo(f"{click.style('Updated the file', fg='bright_green')} {file}")
    else:
        click.echo(
            f"{click.style('Created a new import map file', fg='bright_green')} {file}"
        )


def print_upgrade(info: VersionInfo) -> None:
    """Print an upgrade hint."""
    click.echo("----------------------------------------")
    click.echo(
        f"Update available {click.style(info.current, fg='cyan')}"
        f" → {click.style(info.latest, fg='green')}"
    )
    click.echo(f"Run {click.style(info.command, fg='cyan')} to update")
    click.echo("----------------------------------------")


@cli.command("upgrade-check")
@click.pass_context
def upgrade_check(ctx: click.Context) -> None:
    """Tell whether a newer lume is available.

    The check hits the network at most once per `upgrade_interval_hours`.
    A failed check is reported as a warning and never fails the command.
    """
    settings: LumeSettings = ctx.obj["settings"]

    if not settings.upgrade_check:
        logger.debug("Upgrade checks are disabled")
        return

    try:
        info = asyncio.run(check_for_upgrade(settings))
    except (httpx.HTTPError, UpgradeCheckError, OSError) as e:
        logger.warning("Could not check for upgrades: %s", e)
        return

    if info is not None:
        print_upgrade(info)


@cli.command()
def version() -> None:
    """Print the installed lume version."""
    click.echo(get_current_version())


if __name__ == "__main__":
    cli()
