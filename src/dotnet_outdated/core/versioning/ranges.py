"""NuGet version ranges in interval notation.

Supported forms, as written in project files and restore metadata:

- Minimum (inclusive): ``1.0`` or ``1.0.0``
- Exact: ``[1.0.0]``
- Intervals: ``[1.0,2.0)``, ``(1.0,)``, ``(,2.0]``, ``[1.0.0, )``
- Floating: ``*``, ``1.*``, ``1.0.*``, ``1.0.0-*``, ``1.0.0-beta*``,
  ``*-*``, ``1.*-*``

A floating range constrains only its lower bound here: during a restore
NuGet floats to the newest match, but once restored the range is
satisfied by any version at or above the floor.

References
----------
.. [NuGetRanges] "Version ranges." NuGet documentation.
   https://learn.microsoft.com/nuget/concepts/package-versioning#version-ranges
"""

from __future__ import annotations

from dataclasses import dataclass

from dotnet_outdated.core.versioning.version import NuGetVersion


@dataclass(frozen=True)
class VersionRange:
    """A version interval with optional, independently inclusive bounds.

    Attributes:
        min_version: Lower bound, or None for unbounded.
        min_inclusive: Whether ``min_version`` itself satisfies the range.
        max_version: Upper bound, or None for unbounded.
        max_inclusive: Whether ``max_version`` itself satisfies the range.
        is_floating: True for ``*`` style ranges.
        raw: The text the range was parsed from.
    """

    min_version: NuGetVersion | None = None
    min_inclusive: bool = True
    max_version: NuGetVersion | None = None
    max_inclusive: bool = False
    is_floating: bool = False
    raw: str = ""

    @classmethod
    def parse(cls, value: str) -> VersionRange:
        """Parse NuGet range notation.

        Raises:
            ValueError: If *value* is not a valid range.
        """
        text = value.strip()
        if not text:
            raise ValueError("Empty version range")

        if "*" in text:
            return cls._parse_floating(text)

        first, last = text[0], text[-1]
        if first not in "[(" and last not in "])":
            return cls(
                min_version=NuGetVersion.parse(text),
                min_inclusive=True,
                raw=text,
            )
        if first not in "[(" or last not in "])":
            raise ValueError(f"Unbalanced version range: {value!r}")

        inner = text[1:-1]
        min_inclusive = first == "["
        max_inclusive = last == "]"

        if "," not in inner:
            # Only "[1.0]" is legal without a comma.
            if not (min_inclusive and max_inclusive) or not inner.strip():
                raise ValueError(f"Invalid exact version range: {value!r}")
            exact = NuGetVersion.parse(inner)
            return cls(exact, True, exact, True, raw=text)

        lower_text, _, upper_text = inner.partition(",")
        if "," in upper_text:
            raise ValueError(f"Too many bounds in version range: {value!r}")
        lower = NuGetVersion.parse(lower_text) if lower_text.strip() else None
        upper = NuGetVersion.parse(upper_text) if upper_text.strip() else None
        if lower is None and upper is None:
            raise ValueError(f"Version range has no bounds: {value!r}")
        if lower is not None and upper is not None:
            if upper < lower or (upper == lower and not (min_inclusive and max_inclusive)):
                raise ValueError(f"Empty version range: {value!r}")
        return cls(lower, min_inclusive, upper, max_inclusive, raw=text)

    @classmethod
    def _parse_floating(cls, text: str) -> VersionRange:
        if text in ("*", "*-*"):
            return cls(is_floating=True, raw=text)

        numbers, sep, label = text.partition("-")
        if sep:
            if not label.endswith("*"):
                raise ValueError(f"Invalid floating range: {text!r}")
            label_prefix = label[:-1].rstrip(".")
            floor_label = label_prefix if label_prefix else "0"
        else:
            floor_label = ""

        parts = numbers.split(".")
        if parts[-1] == "*":
            parts = parts[:-1]
        if not parts or any(not p.isdigit() for p in parts):
            raise ValueError(f"Invalid floating range: {text!r}")

        floor = ".".join(parts)
        if floor_label:
            floor = f"{floor}-{floor_label}"
        return cls(
            min_version=NuGetVersion.parse(floor),
            min_inclusive=True,
            is_floating=True,
            raw=text,
        )

    def satisfies(self, version: NuGetVersion) -> bool:
        """Check whether *version* lies inside this range."""
        if self.min_version is not None:
            if self.min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        if self.raw:
            return self.raw
        lower = str(self.min_version) if self.min_version else ""
        upper = str(self.max_version) if self.max_version else ""
        return (
            f"{'[' if self.min_inclusive else '('}{lower}, "
            f"{upper}{']' if self.max_inclusive else ')'}"
        )
