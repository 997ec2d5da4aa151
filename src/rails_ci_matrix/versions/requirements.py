"""RubyGems-style version requirements evaluated with ``packaging``.

Requirements are written the way Gemfiles write them: ``"< 6.1"``,
``">= 7.0, < 8"``, ``"~> 7.1"`` or a bare version meaning equality. A YAML
list of clauses is accepted as well.
"""

import logging
import operator
import re
from collections.abc import Callable
from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from rails_ci_matrix.errors import MalformedRequirementError

logger = logging.getLogger(__name__)

_CLAUSE = re.compile(r"^\s*(=|!=|>=|<=|>|<|~>)?\s*([0-9][0-9A-Za-z.\-]*)\s*$")


def _bump(version: Version) -> Version:
    """Return the exclusive upper bound of a pessimistic constraint."""
    release = list(version.release)
    if len(release) > 1:
        release.pop()
    release[-1] += 1
    return Version(".".join(str(part) for part in release))


def _pessimistic(candidate: Version, target: Version) -> bool:
    release_only = Version(".".join(str(part) for part in candidate.release))
    return candidate >= target and release_only < _bump(target)


_OPERATORS: dict[str, Callable[[Version, Version], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "~>": _pessimistic,
}


def parse_version(text) -> Version | None:
    """Parse a Rails version string, returning None when it is not a version."""
    if text is None:
        return None
    try:
        return Version(str(text).strip())
    except InvalidVersion:
        return None


@dataclass(frozen=True)
class Requirement:
    """A conjunction of comparison clauses."""

    clauses: tuple[tuple[str, Version], ...]

    @classmethod
    def parse(cls, expression) -> "Requirement":
        """Parse a requirement expression.

        Parameters
        ----------
        expression : str | list[str]
            Comma separated clauses, or a list of clauses

        Returns
        -------
        Requirement
            Parsed requirement

        Raises
        ------
        MalformedRequirementError
            If any clause is not ``[operator] version``
        """
        if isinstance(expression, (list, tuple)):
            raw_clauses = [str(clause) for clause in expression]
        else:
            raw_clauses = str(expression).split(",")

        clauses = []
        for raw in raw_clauses:
            match = _CLAUSE.match(raw)
            if match is None:
                msg = f"Invalid requirement clause {raw!r} in {expression!r}"
                raise MalformedRequirementError(msg)
            op, version_text = match.group(1) or "=", match.group(2)
            version = parse_version(version_text)
            if version is None:
                msg = f"Invalid version {version_text!r} in requirement {expression!r}"
                raise MalformedRequirementError(msg)
            clauses.append((op, version))

        if not clauses:
            msg = f"Empty requirement: {expression!r}"
            raise MalformedRequirementError(msg)
        return cls(tuple(clauses))

    @classmethod
    def compatible_with(cls, version: Version) -> "Requirement":
        """Requirement matching the same major.minor series as ``version``."""
        release = list(version.release) + [0, 0]
        return cls((("~>", Version(f"{release[0]}.{release[1]}.0")),))

    def satisfied_by(self, version: Version) -> bool:
        return all(_OPERATORS[op](version, target) for op, target in self.clauses)


def _is_blank(expression) -> bool:
    if expression is None:
        return True
    if isinstance(expression, (list, tuple)):
        return not any(str(clause).strip() for clause in expression)
    return not str(expression).strip()


def requirement_satisfied(expression, rails_version: Version | None) -> bool:
    """Evaluate a requirement against the discovered Rails version.

    Parameters
    ----------
    expression : str | list[str] | None
        Requirement expression; blank means unconstrained
    rails_version : Version | None
        Discovered Rails version; None means unknown

    Returns
    -------
    bool
        True when unconstrained, when the version is unknown, or when the
        requirement holds. A malformed requirement is logged and reported
        as not satisfied.
    """
    if _is_blank(expression) or rails_version is None:
        return True

    try:
        requirement = Requirement.parse(expression)
    except MalformedRequirementError as e:
        logger.warning("Ignoring invalid rails_version requirement: %s", e)
        return False

    return requirement.satisfied_by(rails_version)
