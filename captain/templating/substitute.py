"""Placeholder substitution for header values.

Placeholders look like ``{{ NAME }}``: a double-brace pair around an
identifier, with optional whitespace inside the braces. Each identifier is
resolved through an injected lookup callable, by default the process
environment.

Unresolved identifiers expand to the empty string, so building a header
map never fails. Use :func:`unresolved_placeholders` to find out which
names were missing. Text that is not a complete placeholder, including an
unbalanced ``{{`` or ``}}``, is copied through unchanged.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable

EnvironmentLookup = Callable[[str], str | None]

_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def environ_lookup(name: str) -> str | None:
    """Look ``name`` up in ``os.environ`` at call time."""
    return os.environ.get(name)


def mapping_lookup(values: dict[str, str]) -> EnvironmentLookup:
    """Build a lookup over a fixed mapping."""
    return values.get


def substitute(template: str, lookup: EnvironmentLookup = environ_lookup) -> str:
    """Expand every placeholder in ``template`` using ``lookup``."""

    def _replace(match: re.Match[str]) -> str:
        value = lookup(match.group(1))
        return "" if value is None else value

    return _PLACEHOLDER.sub(_replace, template)


def substitute_values(
    values: dict[str, str], lookup: EnvironmentLookup = environ_lookup,
) -> dict[str, str]:
    """Expand placeholders in every value of ``values``; keys are untouched."""
    return {key: substitute(value, lookup) for key, value in values.items()}


def find_placeholders(template: str) -> list[str]:
    """Identifiers referenced by ``template``, in order of appearance."""
    return _PLACEHOLDER.findall(template)


def unresolved_placeholders(
    template: str, lookup: EnvironmentLookup = environ_lookup,
) -> list[str]:
    """Identifiers in ``template`` that ``lookup`` cannot resolve."""
    return [name for name in find_placeholders(template) if lookup(name) is None]
