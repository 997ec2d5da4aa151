"""Ruby version catalog construction.

The catalog is built once per run from every candidate source and then
passed, read-only, to each section expander.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from packaging.version import Version

from rails_ci_matrix.constants import DEFAULT_RUBY_CANDIDATES, DEFAULT_RUBY_COMPATIBILITY
from rails_ci_matrix.errors import EmptyVersionCatalogError
from rails_ci_matrix.versions.requirements import Requirement, requirement_satisfied
from rails_ci_matrix.versions.runtime import RuntimeVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionCatalog:
    """Classified Ruby versions, highest first.

    Parameters
    ----------
    all : tuple[str, ...]
        Every candidate at or above the minimum, descending
    supported : tuple[str, ...]
        Candidates that are not soft-fail
    soft_fail : tuple[str, ...]
        Candidates above the maximum safe Ruby for the Rails version
    default : str | None
        Highest supported version, else the highest candidate
    soft_fail_map : Mapping[str, bool]
        Soft-fail flag per version in ``all``
    """

    all: tuple[str, ...]
    supported: tuple[str, ...]
    soft_fail: tuple[str, ...]
    default: str | None
    soft_fail_map: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def is_soft_fail(self, version: str) -> bool:
        """Soft-fail flag for a version; versions outside the catalog are not soft-fail."""
        return self.soft_fail_map.get(version, False)


def max_ruby_for(
    rails_version: Version | None,
    compatibility: Sequence[tuple[str, str]] = DEFAULT_RUBY_COMPATIBILITY,
) -> RuntimeVersion | None:
    """Look up the highest Ruby known to work with a Rails version.

    Parameters
    ----------
    rails_version : Version | None
        Discovered Rails version
    compatibility : Sequence[tuple[str, str]]
        Ordered ``(requirement, max_ruby)`` pairs; the first match wins

    Returns
    -------
    RuntimeVersion | None
        Maximum safe Ruby, or None when unconstrained
    """
    if rails_version is None:
        return None

    for requirement, max_ruby in compatibility:
        if requirement_satisfied(requirement, rails_version):
            maximum = RuntimeVersion.parse(str(max_ruby))
            if maximum is None:
                logger.warning("Ignoring non-numeric max_ruby %r for %s", max_ruby, requirement)
            return maximum
    return None


def is_soft_fail(version: RuntimeVersion, maximum: RuntimeVersion | None) -> bool:
    """Check whether a version lies beyond the maximum's compatible release band."""
    if maximum is None or not version > maximum:
        return False
    return not Requirement.compatible_with(maximum.value).satisfied_by(version.value)


def build_catalog(
    minimum: RuntimeVersion,
    maximum: RuntimeVersion | None = None,
    default_candidates: Iterable[str] = DEFAULT_RUBY_CANDIDATES,
    env_candidates: Iterable[str] = (),
    config_tokens: Iterable = (),
) -> VersionCatalog:
    """Build the Ruby version catalog.

    Parameters
    ----------
    minimum : RuntimeVersion
        Lowest Ruby the project supports; always a candidate itself
    maximum : RuntimeVersion | None
        Highest Ruby known to work with the Rails version
    default_candidates : Iterable[str]
        Built-in candidate list
    env_candidates : Iterable[str]
        Extra candidates supplied through the environment
    config_tokens : Iterable
        Every Ruby token referenced in the configuration document

    Returns
    -------
    VersionCatalog
        The classified catalog

    Raises
    ------
    EmptyVersionCatalogError
        If no candidate survives filtering
    """
    tokens = [*default_candidates, *env_candidates, *config_tokens, minimum.text]

    seen: set[str] = set()
    versions: list[RuntimeVersion] = []
    for token in tokens:
        version = RuntimeVersion.parse(token)
        if version is None or version < minimum or version.text in seen:
            continue
        seen.add(version.text)
        versions.append(version)

    if not versions:
        msg = "No Ruby versions found in configuration."
        raise EmptyVersionCatalogError(msg)

    versions.sort(reverse=True)

    flags = {version.text: is_soft_fail(version, maximum) for version in versions}
    all_versions = tuple(flags)
    supported = tuple(v for v in all_versions if not flags[v])
    soft_fail = tuple(v for v in all_versions if flags[v])
    default = supported[0] if supported else all_versions[0]

    logger.debug(
        "Ruby catalog: all=%s supported=%s default=%s (min=%s, max=%s)",
        all_versions,
        supported,
        default,
        minimum,
        maximum,
    )
    return VersionCatalog(
        all=all_versions,
        supported=supported,
        soft_fail=soft_fail,
        default=default,
        soft_fail_map=MappingProxyType(flags),
    )
