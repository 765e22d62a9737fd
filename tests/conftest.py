"""Shared fixtures for dotnet-outdated tests.

Restore metadata is built in memory with ``assets_factory`` so every test
states exactly the graph it needs. ``restored_project`` writes a project
file plus ``obj/project.assets.json`` to disk for the analysis and CLI
tests.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

AssetsFactory = Callable[..., dict[str, Any]]


def build_assets(
    direct: dict[str, Any],
    packages: dict[str, tuple[str, dict[str, str]]],
    *,
    framework: str = "net8.0",
    target_key: str | None = None,
    project_name: str = "App",
    sources: list[str] | None = None,
) -> dict[str, Any]:
    """Build a ``project.assets.json`` document for one framework.

    Args:
        direct: Package id -> requested range, or a full dependency entry
            dict (e.g. with ``autoReferenced``).
        packages: Package id -> (resolved version, {child id: range}).
        framework: Framework alias in ``project.frameworks``.
        target_key: Key of the restore target; defaults to *framework*.
        project_name: ``project.restore.projectName``.
        sources: Package sources; defaults to nuget.org.
    """
    target = {
        f"{name}/{version}": {"type": "package", "dependencies": dict(children)}
        for name, (version, children) in packages.items()
    }
    dependencies = {
        name: (entry if isinstance(entry, dict) else {"target": "Package", "version": entry})
        for name, entry in direct.items()
    }
    sources = sources if sources is not None else ["https://api.nuget.org/v3/index.json"]
    return {
        "version": 3,
        "targets": {target_key or framework: target},
        "project": {
            "version": "1.0.0",
            "restore": {
                "projectName": project_name,
                "sources": {s: {} for s in sources},
            },
            "frameworks": {framework: {"targetAlias": framework, "dependencies": dependencies}},
        },
    }


@pytest.fixture
def assets_factory() -> AssetsFactory:
    """Return the ``build_assets`` helper."""
    return build_assets


@pytest.fixture
def sample_assets() -> dict[str, Any]:
    """A small graph three levels deep with one auto-referenced package.

    Direct: Serilog.Sinks.Console, Newtonsoft.Json, NETStandard.Library (A)
    Depth 1: Serilog (via Serilog.Sinks.Console),
             Microsoft.NETCore.Platforms (via NETStandard.Library)
    Depth 2: System.Diagnostics.DiagnosticSource (via Serilog)
    """
    return build_assets(
        direct={
            "Serilog.Sinks.Console": "[5.0.1, )",
            "Newtonsoft.Json": "[13.0.1, )",
            "NETStandard.Library": {
                "target": "Package",
                "version": "[2.0.3, )",
                "autoReferenced": True,
            },
        },
        packages={
            "Serilog.Sinks.Console": ("5.0.1", {"Serilog": "3.1.1"}),
            "Serilog": ("3.1.1", {"System.Diagnostics.DiagnosticSource": "7.0.0"}),
            "System.Diagnostics.DiagnosticSource": ("7.0.0", {}),
            "Newtonsoft.Json": ("13.0.1", {}),
            "NETStandard.Library": ("2.0.3", {"Microsoft.NETCore.Platforms": "1.1.0"}),
            "Microsoft.NETCore.Platforms": ("1.1.0", {}),
        },
    )


def write_project(directory: Path, name: str, assets: dict[str, Any] | None) -> Path:
    """Write ``{name}.csproj`` and, when given, its restore metadata."""
    directory.mkdir(parents=True, exist_ok=True)
    project_file = directory / f"{name}.csproj"
    project_file.write_text('<Project Sdk="Microsoft.NET.Sdk" />\n')
    if assets is not None:
        obj = directory / "obj"
        obj.mkdir(exist_ok=True)
        (obj / "project.assets.json").write_text(json.dumps(assets))
    return project_file


@pytest.fixture
def restored_project(tmp_path: Path, sample_assets: dict[str, Any]) -> Path:
    """A project directory as ``dotnet restore`` would leave it."""
    return write_project(tmp_path / "App", "App", sample_assets)


@pytest.fixture
def project_writer() -> Callable[[Path, str, dict[str, Any] | None], Path]:
    """Return the ``write_project`` helper."""
    return write_project
