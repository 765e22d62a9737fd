"""NuGet version value type with semantic-version precedence.

A NuGet version has up to four numeric components, an optional dot
separated pre-release label and optional build metadata::

    1.2.3
    1.2.3.4
    2.0.0-beta.2
    6.0.0-preview.7.21377.19+sha.abc

Ordering follows SemVer 2.0.0 precedence (section 11) extended with the
fourth ``revision`` component:

- numeric components compare numerically, left to right;
- a release sorts above every pre-release of the same numbers;
- pre-release identifiers compare one by one, numeric identifiers
  numerically and below alphanumeric ones, alphanumeric identifiers
  case-insensitively; a shorter identifier list sorts first when it is a
  prefix of the longer one;
- build metadata never affects precedence or equality.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
.. [NuGetVer] "Package versioning." NuGet documentation.
   https://learn.microsoft.com/nuget/concepts/package-versioning
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

_VERSION_RE = re.compile(
    r"^(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+))?"
    r"(?:\.(?P<patch>\d+))?"
    r"(?:\.(?P<revision>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+(?P<meta>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?$"
)


def _label_key(label: str) -> tuple[int, int, str]:
    """Sort key for one pre-release identifier."""
    if label.isdigit():
        return (0, int(label), "")
    return (1, 0, label.lower())


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """A parsed NuGet package version.

    Instances are immutable, hashable and totally ordered. Equality and
    hashing ignore build metadata and the original spelling, so ``1.0``
    and ``1.0.0+build`` are the same version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        revision: Fourth (legacy) component, 0 when absent.
        release_labels: Pre-release identifiers, empty for a release.
        metadata: Build metadata without the leading ``+``.
        original: The string the version was parsed from, if any.
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release_labels: tuple[str, ...] = ()
    metadata: str = ""
    original: str | None = field(default=None, repr=False)

    @classmethod
    def parse(cls, value: str) -> NuGetVersion:
        """Parse a version string.

        Args:
            value: Version text such as ``"1.2.3-beta.1"``.

        Returns:
            The parsed version.

        Raises:
            ValueError: If *value* is not a valid NuGet version.
        """
        if not isinstance(value, str):
            raise ValueError(f"Invalid NuGet version: {value!r}")
        text = value.strip()
        m = _VERSION_RE.match(text)
        if not m:
            raise ValueError(f"Invalid NuGet version: {value!r}")
        pre = m.group("pre")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor") or 0),
            patch=int(m.group("patch") or 0),
            revision=int(m.group("revision") or 0),
            release_labels=tuple(pre.split(".")) if pre else (),
            metadata=m.group("meta") or "",
            original=text,
        )

    @classmethod
    def try_parse(cls, value: str) -> NuGetVersion | None:
        """Parse *value*, returning None instead of raising."""
        try:
            return cls.parse(value)
        except ValueError:
            return None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release_labels)

    @property
    def release(self) -> str:
        """The pre-release label as written, e.g. ``"beta.2"``."""
        return ".".join(self.release_labels)

    def _sort_key(self) -> tuple:
        numbers = (self.major, self.minor, self.patch, self.revision)
        if not self.release_labels:
            return numbers + (1, ())
        return numbers + (0, tuple(_label_key(lbl) for lbl in self.release_labels))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        """Normalized form: revision only when non-zero, no metadata."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release_labels:
            text += f"-{self.release}"
        return text
