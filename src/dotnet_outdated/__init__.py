"""dotnet-outdated: report NuGet dependencies that lag behind their feeds."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
