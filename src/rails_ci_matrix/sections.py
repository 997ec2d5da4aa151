"""Expansion of configuration sections into flattened matrix jobs.

The four sections (lint, frameworks, railties, isolated) share one expansion
routine. What differs between them lives in a ``SectionStrategy``: which keys
hold the items and their Ruby tokens, which item keys are mandatory, how the
emitted fields are shaped, and which services each job needs.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from packaging.version import Version

from rails_ci_matrix.constants import REQUIREMENT_KEY, SECTION_RUBIES_KEY
from rails_ci_matrix.errors import ConfigFormatError, MissingRequiredFieldError
from rails_ci_matrix.services import ServiceSet, build_services, serialize_services
from rails_ci_matrix.versions import VersionCatalog, as_list, expand_tokens, requirement_satisfied

logger = logging.getLogger(__name__)

# Keys computed per job; item values under these names are never copied through
_RESERVED_KEYS = frozenset({REQUIREMENT_KEY, "ruby", "allow_failure", "services", "job_name"})


class SectionKind(str, Enum):
    """Configuration sections, in output order."""

    LINT = "lint"
    FRAMEWORKS = "frameworks"
    RAILTIES = "railties"
    ISOLATED = "isolated"


@dataclass(frozen=True)
class ShardPosition:
    """Position of a job within a sharded suite."""

    shard: Any
    index: int
    total: int

    @property
    def parallel_job(self) -> int:
        """Zero-based position for the workflow's parallelism matrix."""
        return self.index - 1


@dataclass(frozen=True)
class MatrixEntry:
    """One fully resolved job: item x Ruby version (x shard)."""

    job_name: str
    ruby: str
    allow_failure: bool
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    services: str | None = None
    shard: ShardPosition | None = None

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the job mapping written to the workflow output."""
        data = dict(self.fields)
        data["ruby"] = self.ruby
        if self.shard is not None:
            data["shard"] = self.shard.shard
            data["shard_index"] = self.shard.index
            data["total_shards"] = self.shard.total
            data["parallel_job"] = self.shard.parallel_job
        data["allow_failure"] = self.allow_failure
        if self.services is not None:
            data["services"] = self.services
        data["job_name"] = self.job_name
        return data


def _or_empty(value: Any) -> Any:
    return "" if value is None else value


def _passthrough(merged: Mapping[str, Any], *excluded: str) -> dict[str, Any]:
    return {
        key: value
        for key, value in merged.items()
        if key not in _RESERVED_KEYS and key not in excluded
    }


def _lint_fields(merged: Mapping[str, Any]) -> dict[str, Any]:
    fields = {"task": merged["task"], "command": merged["command"]}
    if merged.get("working_directory"):
        fields["working_directory"] = merged["working_directory"]
    return fields


def _framework_fields(merged: Mapping[str, Any]) -> dict[str, Any]:
    fields = _passthrough(merged, "supported_rubies", "name")
    for key in ("repo_pre_steps", "framework_pre_steps", "rack_requirement", "variant"):
        fields[key] = _or_empty(merged.get(key))
    fields["task"] = merged.get("task") or "test"
    fields["display_name"] = merged.get("name") or merged["framework"]
    return fields


def _railties_fields(merged: Mapping[str, Any]) -> dict[str, Any]:
    fields = _passthrough(merged, "supported_rubies", "shards")
    variant = merged.get("variant")
    fields["variant"] = "default" if variant is None else variant
    fields["rack_requirement"] = _or_empty(merged.get("rack_requirement"))
    fields["pre_steps"] = _or_empty(merged.get("pre_steps"))
    return fields


def _isolated_fields(merged: Mapping[str, Any]) -> dict[str, Any]:
    fields = _passthrough(merged, "rubies")
    fields["framework_label"] = merged.get("framework_label") or merged["framework"]
    fields["framework_dir"] = merged.get("framework_dir") or merged["framework"]
    fields["variant_label"] = _or_empty(merged.get("variant_label"))
    return fields


def _lint_label(fields: Mapping[str, Any]) -> str:
    return str(fields["task"])


def _framework_label(fields: Mapping[str, Any]) -> str:
    return str(fields["display_name"])


def _railties_label(fields: Mapping[str, Any]) -> str:
    return f"railties ({fields['variant']})"


def _isolated_label(fields: Mapping[str, Any]) -> str:
    return " ".join(str(part) for part in (fields["framework_label"], fields["variant_label"]) if part)


def _core_services(merged: Mapping[str, Any]) -> dict[str, Any]:
    return build_services(ServiceSet.CORE, merged.get("mysql_image"))


def _framework_services(merged: Mapping[str, Any]) -> dict[str, Any]:
    return build_services(ServiceSet.EXTENDED, merged.get("mysql_image"))


def _isolated_services(merged: Mapping[str, Any]) -> dict[str, Any]:
    if "services" in merged:
        return merged["services"] or {}
    return _core_services(merged)


@dataclass(frozen=True)
class SectionStrategy:
    """Per-section behaviour plugged into ``expand_section``.

    Parameters
    ----------
    kind : SectionKind
        Section, also its top-level key in the document
    items_key : str
        Key of the ordered item list inside the section
    tokens_key : str
        Item key holding the item's own Ruby tokens
    required : tuple[str, ...]
        Item keys that must be present and non-empty
    fields : Callable
        Shapes the emitted fields from the merged item
    label : Callable
        Human-readable job label from the emitted fields
    services : Callable | None
        Builds the service bundle, or None for jobs without services
    merges_defaults : bool
        Whether a section-level ``defaults`` map sits under every item
    sharded : bool
        Whether items are crossed with a shard list
    """

    kind: SectionKind
    items_key: str
    tokens_key: str
    fields: Callable[[Mapping[str, Any]], dict[str, Any]]
    label: Callable[[Mapping[str, Any]], str]
    required: tuple[str, ...] = ()
    services: Callable[[Mapping[str, Any]], Any] | None = None
    merges_defaults: bool = False
    sharded: bool = False


STRATEGIES: dict[SectionKind, SectionStrategy] = {
    SectionKind.LINT: SectionStrategy(
        kind=SectionKind.LINT,
        items_key="tasks",
        tokens_key="rubies",
        required=("task", "command"),
        fields=_lint_fields,
        label=_lint_label,
    ),
    SectionKind.FRAMEWORKS: SectionStrategy(
        kind=SectionKind.FRAMEWORKS,
        items_key="entries",
        tokens_key="supported_rubies",
        required=("framework",),
        fields=_framework_fields,
        label=_framework_label,
        services=_framework_services,
        merges_defaults=True,
    ),
    SectionKind.RAILTIES: SectionStrategy(
        kind=SectionKind.RAILTIES,
        items_key="variants",
        tokens_key="supported_rubies",
        fields=_railties_fields,
        label=_railties_label,
        services=_core_services,
        sharded=True,
    ),
    SectionKind.ISOLATED: SectionStrategy(
        kind=SectionKind.ISOLATED,
        items_key="suites",
        tokens_key="rubies",
        required=("framework",),
        fields=_isolated_fields,
        label=_isolated_label,
        services=_isolated_services,
    ),
}


def job_name(label: str, ruby: str, shard: ShardPosition | None = None) -> str:
    """Compose the display name of a single job."""
    name = f"{label} - Ruby {ruby}"
    if shard is not None:
        name += f" - shard {shard.index} of {shard.total}"
    return name


def _section(config: Mapping[str, Any], kind: SectionKind) -> Mapping[str, Any]:
    section = config.get(kind.value)
    if section is None:
        raise MissingRequiredFieldError("configuration", kind.value)
    if not isinstance(section, Mapping):
        msg = f"Section '{kind.value}' must be a mapping, got {type(section).__name__}"
        raise ConfigFormatError(msg)
    return section


def _items(section: Mapping[str, Any], strategy: SectionStrategy) -> list[dict[str, Any]]:
    raw_items = section.get(strategy.items_key)
    if raw_items is None:
        raise MissingRequiredFieldError(strategy.kind.value, strategy.items_key)
    if not isinstance(raw_items, Sequence) or isinstance(raw_items, str):
        msg = f"'{strategy.kind.value}.{strategy.items_key}' must be a list"
        raise ConfigFormatError(msg)

    items = []
    for index, item in enumerate(raw_items):
        if not isinstance(item, Mapping):
            msg = f"{strategy.kind.value} item #{index + 1} must be a mapping"
            raise ConfigFormatError(msg)
        items.append({str(key): value for key, value in item.items()})
    return items


def expand_section(
    config: Mapping[str, Any],
    strategy: SectionStrategy,
    catalog: VersionCatalog,
    rails_version: Version | None,
) -> list[MatrixEntry]:
    """Expand one section into matrix jobs.

    Parameters
    ----------
    config : Mapping[str, Any]
        Parsed configuration document
    strategy : SectionStrategy
        Section behaviour
    catalog : VersionCatalog
        Ruby version catalog
    rails_version : Version | None
        Discovered Rails version

    Returns
    -------
    list[MatrixEntry]
        Jobs in item order, then Ruby order, then shard order

    Raises
    ------
    MissingRequiredFieldError
        If the section, its item list, or a required item key is missing
    ConfigFormatError
        If the section or an item has the wrong shape
    """
    section = _section(config, strategy.kind)
    items = _items(section, strategy)

    section_requirement = section.get(REQUIREMENT_KEY)
    defaults: dict[str, Any] = {}
    if strategy.merges_defaults:
        defaults = {str(key): value for key, value in (section.get("defaults") or {}).items()}
        section_requirement = defaults.pop(REQUIREMENT_KEY, None) or section_requirement

    section_tokens = as_list(section.get(SECTION_RUBIES_KEY))
    section_rubies = expand_tokens(section_tokens, catalog)
    section_shards = as_list(section.get("shards"))

    entries: list[MatrixEntry] = []
    for index, item in enumerate(items):
        merged = {**defaults, **item}
        for key in strategy.required:
            if merged.get(key) in (None, ""):
                raise MissingRequiredFieldError(strategy.kind.value, key, index)

        requirement = item[REQUIREMENT_KEY] if REQUIREMENT_KEY in item else section_requirement
        if not requirement_satisfied(requirement, rails_version):
            logger.debug(
                "Skipping %s item #%d: requires Rails %s",
                strategy.kind.value,
                index + 1,
                requirement,
            )
            continue

        tokens = as_list(item[strategy.tokens_key]) if strategy.tokens_key in item else section_tokens
        rubies = expand_tokens(tokens, catalog) or section_rubies

        fields = strategy.fields(merged)
        label = strategy.label(fields)
        services = serialize_services(strategy.services(merged)) if strategy.services else None
        explicit_failure = bool(merged.get("allow_failure", False))

        if strategy.sharded:
            shards = as_list(item["shards"]) if item.get("shards") is not None else section_shards
            if not shards:
                logger.warning("%s item #%d has no shards; no jobs emitted", strategy.kind.value, index + 1)
            positions = [
                ShardPosition(shard=shard, index=position, total=len(shards))
                for position, shard in enumerate(shards, start=1)
            ]
        else:
            positions = [None]

        for ruby in rubies:
            for position in positions:
                entries.append(
                    MatrixEntry(
                        job_name=job_name(label, ruby, position),
                        ruby=ruby,
                        allow_failure=explicit_failure or catalog.is_soft_fail(ruby),
                        fields=MappingProxyType(dict(fields)),
                        services=services,
                        shard=position,
                    ),
                )

    logger.debug("Expanded %s into %d jobs", strategy.kind.value, len(entries))
    return entries


def collect_ruby_tokens(config: Mapping[str, Any]) -> list[Any]:
    """Gather every Ruby token referenced by the document, before any filtering.

    Parameters
    ----------
    config : Mapping[str, Any]
        Parsed configuration document

    Returns
    -------
    list[Any]
        Tokens in document order; symbolic and malformed tokens included
    """
    tokens: list[Any] = []
    for strategy in STRATEGIES.values():
        section = config.get(strategy.kind.value)
        if not isinstance(section, Mapping):
            continue
        tokens.extend(as_list(section.get(SECTION_RUBIES_KEY)))
        items = section.get(strategy.items_key)
        if not isinstance(items, Sequence) or isinstance(items, str):
            continue
        for item in items:
            if isinstance(item, Mapping):
                tokens.extend(as_list(item.get(strategy.tokens_key)))
    return tokens
