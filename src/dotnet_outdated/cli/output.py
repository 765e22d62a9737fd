"""Rich output formatting for the dotnet-outdated CLI.

Upgrade severity color mapping:
    MAJOR (or any pre-release) = red, MINOR = yellow, PATCH = green
"""

from __future__ import annotations

import json
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dotnet_outdated.core.graph.models import Dependency, Project, TargetProfile, UpgradeSeverity
from dotnet_outdated.core.resolution import ResolutionSummary, ResolutionWarning

_SEVERITY_STYLES: dict[UpgradeSeverity, str] = {
    UpgradeSeverity.MAJOR: "red",
    UpgradeSeverity.MINOR: "yellow",
    UpgradeSeverity.PATCH: "green",
}

UNKNOWN = "unknown"

console = Console()


def severity_style(severity: UpgradeSeverity) -> str:
    """Return the Rich style string for an upgrade severity."""
    return _SEVERITY_STYLES.get(severity, "white")


def _warning_keys(summary: ResolutionSummary) -> set[tuple[str, str, str]]:
    return {(w.project, w.profile, w.package.lower()) for w in summary.warnings}


def reported_dependencies(
    project: Project,
    profile: TargetProfile,
    failed: set[tuple[str, str, str]],
) -> list[Dependency]:
    """Dependencies worth a row: outdated ones and failed lookups.

    Direct dependencies come first, then transitive ones, each by name.
    """
    rows = [
        dep for dep in profile.dependencies
        if dep.is_outdated or (project.name, profile.name, dep.key) in failed
    ]
    return sorted(rows, key=lambda d: (d.is_transitive, d.key))


def print_legend() -> None:
    """Print the version color legend."""
    console.print("Version color legend:")
    console.print(
        Text("<red>".ljust(8), style="red"),
        ": Major version update or pre-release version. Possible breaking changes.",
        sep="",
    )
    console.print(
        Text("<yellow>".ljust(8), style="yellow"),
        ": Minor version update. Backwards-compatible features added.",
        sep="",
    )
    console.print(
        Text("<green>".ljust(8), style="green"),
        ": Patch version update. Backwards-compatible bug fixes.",
        sep="",
    )


def print_report(projects: list[Project], summary: ResolutionSummary) -> None:
    """Print one table per project profile, then warnings and the legend.

    Args:
        projects: Resolved projects.
        summary: The resolution summary for the run.
    """
    failed = _warning_keys(summary)
    for project in projects:
        console.print(Text(f"» {project.name}", style="bold yellow"))
        for profile in project.target_profiles:
            rows = reported_dependencies(project, profile, failed)
            if not rows:
                console.print(Text(f"  [{profile.name}]", style="cyan"))
                console.print("  [dim]-- No outdated dependencies --[/dim]")
                continue
            table = Table(
                title=Text(f"[{profile.name}]", style="cyan"),
                title_justify="left",
                show_header=True,
                header_style="bold",
            )
            table.add_column("Package", style="bold")
            table.add_column("Current", justify="right")
            table.add_column("", justify="center")
            table.add_column("Latest", justify="right")
            for dep in rows:
                name = Text(dep.description, style="dim" if dep.is_transitive else "bold")
                if dep.latest_version is None:
                    latest = Text(UNKNOWN, style="dim italic")
                else:
                    latest = Text(str(dep.latest_version), style=severity_style(dep.upgrade_severity))
                table.add_row(name, str(dep.resolved_version), "->", latest)
            console.print(table)
        for tfm, reason in project.skipped_profiles.items():
            console.print(Text(f"  [{tfm}] skipped: {reason}", style="red"))
        console.print()

    if summary.warnings:
        print_warnings(summary.warnings)
    print_legend()


def print_warnings(warnings: list[ResolutionWarning]) -> None:
    """Print the packages whose latest version could not be determined."""
    lines = "\n".join(
        f"{w.package} ({w.project} [{w.profile}]): {w.message}" for w in warnings
    )
    console.print(Panel(Text(lines), title="Unresolved packages", border_style="yellow"))


def _version_or_none(dep: Dependency) -> str | None:
    return None if dep.latest_version is None else str(dep.latest_version)


def build_json_report(projects: list[Project], summary: ResolutionSummary) -> dict[str, Any]:
    """Build the machine-readable report."""
    failed = _warning_keys(summary)
    return {
        "summary": {
            "resolved": summary.resolved,
            "unresolved": summary.unresolved,
            "outdated": summary.outdated,
        },
        "projects": [
            {
                "name": project.name,
                "file": str(project.file_path),
                "target_frameworks": [
                    {
                        "name": profile.name,
                        "dependencies": [
                            {
                                "name": dep.name,
                                "resolved_version": str(dep.resolved_version),
                                "latest_version": _version_or_none(dep),
                                "upgrade_severity": dep.upgrade_severity.name,
                                "is_transitive": dep.is_transitive,
                                "is_auto_referenced": dep.is_auto_referenced,
                                "depth": dep.depth,
                            }
                            for dep in reported_dependencies(project, profile, failed)
                        ],
                    }
                    for profile in project.target_profiles
                ],
                "skipped_target_frameworks": dict(project.skipped_profiles),
            }
            for project in projects
        ],
        "warnings": [
            {
                "project": w.project,
                "target_framework": w.profile,
                "package": w.package,
                "message": w.message,
            }
            for w in summary.warnings
        ],
    }


def print_json_report(projects: list[Project], summary: ResolutionSummary) -> None:
    """Print the report as JSON."""
    click.echo(json.dumps(build_json_report(projects, summary), indent=2))
