"""Ruby version tokens and their ordering."""

import re
from dataclasses import dataclass

from packaging.version import Version

NUMERIC_VERSION = re.compile(r"^\d+(\.\d+)+$")


def is_numeric_version(token) -> bool:
    """Check whether a token is a dotted numeric version (at least major.minor).

    Parameters
    ----------
    token : Any
        Token taken from configuration or the environment

    Returns
    -------
    bool
        True for tokens like ``3.3`` or ``3.3.1``
    """
    if isinstance(token, bool) or not isinstance(token, (str, int, float)):
        return False
    return NUMERIC_VERSION.match(str(token).strip()) is not None


@dataclass(frozen=True)
class RuntimeVersion:
    """A dotted numeric Ruby version.

    Equality and hashing use the canonical string (the token as written), so
    ``3.0`` and ``3.0.0`` stay distinct entries. Ordering uses the numeric
    value.
    """

    text: str

    @classmethod
    def parse(cls, token) -> "RuntimeVersion | None":
        """Parse a token, returning None if it is not a numeric version."""
        if not is_numeric_version(token):
            return None
        return cls(str(token).strip())

    @property
    def value(self) -> Version:
        return Version(self.text)

    @property
    def major_minor(self) -> tuple[int, int]:
        release = self.value.release
        return release[0], release[1]

    def __lt__(self, other: "RuntimeVersion") -> bool:
        if not isinstance(other, RuntimeVersion):
            return NotImplemented
        return self.value < other.value

    def __gt__(self, other: "RuntimeVersion") -> bool:
        if not isinstance(other, RuntimeVersion):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: "RuntimeVersion") -> bool:
        if not isinstance(other, RuntimeVersion):
            return NotImplemented
        return self.value >= other.value

    def __str__(self) -> str:
        return self.text
