"""Expansion of symbolic Ruby tokens against a catalog."""

from rails_ci_matrix.constants import RubyTokens
from rails_ci_matrix.versions.catalog import VersionCatalog


def as_list(value) -> list:
    """Wrap a scalar token in a list; None becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _expand_one(token, catalog: VersionCatalog) -> tuple:
    if token is None or token == "":
        return ()
    if token in RubyTokens.DEFAULT:
        return (catalog.default,) if catalog.default else ()
    if token in RubyTokens.SUPPORTED:
        return catalog.supported
    if token == RubyTokens.ALL:
        return catalog.all
    if token == RubyTokens.SOFT_FAIL:
        return catalog.soft_fail
    return (token,)


def expand_tokens(tokens, catalog: VersionCatalog) -> list[str]:
    """Expand Ruby tokens into concrete version strings.

    Symbolic tokens resolve against the catalog; any other token passes
    through unchanged, even when the catalog does not contain it.

    Parameters
    ----------
    tokens : str | list | None
        One token or a list of tokens; empty means ``["default"]``
    catalog : VersionCatalog
        Ruby version catalog

    Returns
    -------
    list[str]
        Versions in first-seen order, without duplicates or empty entries
    """
    token_list = as_list(tokens) or ["default"]

    result: list[str] = []
    for token in token_list:
        for version in _expand_one(token, catalog):
            text = str(version)
            if text and text not in result:
                result.append(text)
    return result
