"""dotnet-outdated CLI: report NuGet dependencies that lag behind their feeds.

Entry point for the ``dotnet-outdated`` command-line tool.

Usage::

    dotnet-outdated                              # Solution/project in the current directory
    dotnet-outdated ./src/App/App.csproj
    dotnet-outdated -t --transitive-depth 2      # Include transitive dependencies
    dotnet-outdated -vl Minor -pr Never          # Short aliases
    dotnet-outdated --no-restore --format json   # Use existing restore metadata

Exit codes:
    0 - Report produced (also when some latest versions are unknown).
    1 - Invalid options, no project found, restore failure, or no
        target framework could be analyzed.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from dotnet_outdated import __version__
from dotnet_outdated.cli.output import print_json_report, print_report
from dotnet_outdated.config import OutdatedConfig, load_config
from dotnet_outdated.core.graph.models import Project
from dotnet_outdated.core.resolution import ResolutionOrchestrator, ResolutionSummary
from dotnet_outdated.exceptions import OutdatedError
from dotnet_outdated.feeds import FeedCatalogClient
from dotnet_outdated.project import ProjectAnalyzer, discover_project

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _configure_logging(verbose: int) -> None:
    """WARNING by default, INFO with ``-v``, DEBUG with ``-vv``."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


async def _resolve(projects: list[Project], config: OutdatedConfig) -> ResolutionSummary:
    async with FeedCatalogClient(
        default_sources=config.sources, timeout=config.timeout
    ) as catalog:
        orchestrator = ResolutionOrchestrator(catalog, config.to_policy())
        summary = await orchestrator.resolve(projects)
        logger.debug("Issued %d feed queries", catalog.request_count)
        return summary


def run(
    path: Path,
    config: OutdatedConfig,
    *,
    restore: bool = True,
) -> tuple[list[Project], ResolutionSummary]:
    """Discover, analyze and resolve; the whole run minus reporting.

    Raises:
        OutdatedError: On any fatal failure.
    """
    policy = config.to_policy()
    project_file = discover_project(path)
    logger.info("Analyzing %s", project_file)
    projects = ProjectAnalyzer().analyze(
        project_file,
        transitive=config.transitive,
        depth=policy.transitive_depth,
        restore=restore,
    )
    summary = asyncio.run(_resolve(projects, config))
    return projects, summary


@click.command("dotnet-outdated")
@click.version_option(version=__version__, prog_name="dotnet-outdated")
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option(
    "-t", "--transitive", is_flag=True, default=False,
    help="Include transitive dependencies.",
)
@click.option(
    "-td", "--transitive-depth", type=int, default=None,
    help="Depth of transitive dependencies to analyze (default 1).",
)
@click.option(
    "-pr", "--pre-release", "pre_release",
    type=click.Choice(["Auto", "Always", "Never"], case_sensitive=False), default=None,
    help="When to report pre-release versions (default Auto).",
)
@click.option(
    "-vl", "--version-lock", "version_lock",
    type=click.Choice(["None", "Major", "Minor"], case_sensitive=False), default=None,
    help="Keep the latest version on the current major or minor line (default None).",
)
@click.option(
    "--include-auto-references", is_flag=True, default=False,
    help="Include packages referenced implicitly by the SDK.",
)
@click.option(
    "--no-restore", is_flag=True, default=False,
    help="Use existing restore metadata instead of running 'dotnet restore'.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]), default="text",
    help="Output format (default: text).",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
    help="Configuration file (default: ./.dotnet-outdated.yaml if present).",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
def cli(
    path: Path,
    transitive: bool,
    transitive_depth: int | None,
    pre_release: str | None,
    version_lock: str | None,
    include_auto_references: bool,
    no_restore: bool,
    output_format: str,
    config_path: Path | None,
    verbose: int,
) -> None:
    """Report NuGet dependencies that have newer versions available.

    PATH is a solution or project file, or a directory containing one
    (default: the current directory).
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_path).merged(
            transitive=True if transitive else None,
            transitive_depth=transitive_depth,
            pre_release=pre_release,
            version_lock=version_lock,
            include_auto_references=True if include_auto_references else None,
        )
        projects, summary = run(path, config, restore=not no_restore)
    except OutdatedError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_format == "json":
        print_json_report(projects, summary)
    else:
        print_report(projects, summary)


if __name__ == "__main__":
    cli()
