"""Matrix assembly: catalog, section expansion and the final output object."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from rails_ci_matrix.config import Settings, compatibility_table
from rails_ci_matrix.constants import DEFAULT_RUBY_CANDIDATES, OutputKeys
from rails_ci_matrix.project import ProjectMetadata
from rails_ci_matrix.sections import (
    STRATEGIES,
    MatrixEntry,
    SectionKind,
    collect_ruby_tokens,
    expand_section,
)
from rails_ci_matrix.versions import VersionCatalog, build_catalog, max_ruby_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixOutput:
    """Everything the workflow consumes from one run."""

    lint: tuple[MatrixEntry, ...]
    frameworks: tuple[MatrixEntry, ...]
    railties: tuple[MatrixEntry, ...]
    isolated: tuple[MatrixEntry, ...]
    ruby_default: str | None
    ruby_supported: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        """Output object keyed by workflow output name."""
        return {
            OutputKeys.LINT: _include(self.lint),
            OutputKeys.FRAMEWORKS: _include(self.frameworks),
            OutputKeys.RAILTIES: _include(self.railties),
            OutputKeys.ISOLATED: _include(self.isolated),
            OutputKeys.RUBY_DEFAULT: self.ruby_default,
            OutputKeys.RUBY_SUPPORTED: list(self.ruby_supported),
        }


def _include(entries: Iterable[MatrixEntry]) -> dict[str, list[dict[str, Any]]]:
    return {"include": [entry.to_dict() for entry in entries]}


def assemble_matrix(
    jobs: Mapping[SectionKind, Sequence[MatrixEntry]],
    catalog: VersionCatalog,
) -> MatrixOutput:
    """Combine per-section jobs with the catalog summary."""
    return MatrixOutput(
        lint=tuple(jobs.get(SectionKind.LINT, ())),
        frameworks=tuple(jobs.get(SectionKind.FRAMEWORKS, ())),
        railties=tuple(jobs.get(SectionKind.RAILTIES, ())),
        isolated=tuple(jobs.get(SectionKind.ISOLATED, ())),
        ruby_default=catalog.default,
        ruby_supported=catalog.supported,
    )


def catalog_for(
    config: Mapping[str, Any],
    project: ProjectMetadata,
    settings: Settings,
    default_candidates: Iterable[str] = DEFAULT_RUBY_CANDIDATES,
) -> VersionCatalog:
    """Build the Ruby catalog for a configuration document and checkout."""
    maximum = max_ruby_for(project.rails_version, compatibility_table(config))
    return build_catalog(
        minimum=project.min_ruby,
        maximum=maximum,
        default_candidates=default_candidates,
        env_candidates=settings.ruby_candidates,
        config_tokens=collect_ruby_tokens(config),
    )


def generate_matrix(
    config: Mapping[str, Any],
    project: ProjectMetadata,
    settings: Settings | None = None,
    default_candidates: Iterable[str] = DEFAULT_RUBY_CANDIDATES,
) -> MatrixOutput:
    """Generate every section's jobs.

    Parameters
    ----------
    config : Mapping[str, Any]
        Parsed configuration document
    project : ProjectMetadata
        Rails version and minimum Ruby
    settings : Settings | None
        Environment settings; read from the environment when None
    default_candidates : Iterable[str]
        Built-in Ruby candidates

    Returns
    -------
    MatrixOutput
        Assembled output
    """
    settings = settings or Settings.from_env()
    catalog = catalog_for(config, project, settings, default_candidates)

    jobs = {
        kind: expand_section(config, strategy, catalog, project.rails_version)
        for kind, strategy in STRATEGIES.items()
    }
    logger.info(
        "Generated %s jobs (default Ruby %s)",
        ", ".join(f"{len(entries)} {kind.value}" for kind, entries in jobs.items()),
        catalog.default,
    )
    return assemble_matrix(jobs, catalog)
