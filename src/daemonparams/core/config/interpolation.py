"""
Placeholder interpolation for values loaded from property files.

Supported forms inside a value:

- ``${name}``: replaced by ``name`` looked up first among the other keys of
  the same file, then in the lookup table.
- ``${name:-fallback}``: ``fallback`` when ``name`` is unset or empty.
- ``${name:+alternate}``: ``alternate`` when ``name`` is set and non-empty,
  else empty.
- Placeholders nest (``${env.${kind}_HOME}``) and ``\\$`` yields a literal
  dollar sign.

Unresolvable references, and references that form a cycle, become the empty
string by default (``empty_on_missing=False`` keeps them verbatim). Either
way a bad reference only affects the value that contains it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Dict, FrozenSet, Optional

ENV_PREFIX = "env."

_OPEN = "${"
_CLOSE = "}"
_ESCAPE = "\\"


def build_lookup(
    system_properties: Mapping[str, str], environment: Mapping[str, str]
) -> Dict[str, str]:
    """Combine process properties and ``env.``-prefixed environment variables."""
    lookup = dict(system_properties)
    for name, value in environment.items():
        lookup[ENV_PREFIX + name] = value
    return lookup


def _find_closing(value: str, start: int) -> int:
    depth = 1
    i = start
    while i < len(value):
        if value.startswith(_OPEN, i):
            depth += 1
            i += len(_OPEN)
            continue
        if value[i] == _CLOSE:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _split_operator(expression: str) -> tuple[str, Optional[str], str]:
    found = [(expression.find(op), op) for op in (":-", ":+") if op in expression]
    if not found:
        return expression, None, ""
    index, operator = min(found)
    return expression[:index], operator, expression[index + len(operator):]


def _expand(
    value: str,
    resolve: Callable[[str, FrozenSet[str]], Optional[str]],
    cycle: FrozenSet[str],
    empty_on_missing: bool,
) -> str:
    out = []
    i = 0
    while i < len(value):
        if value.startswith(_ESCAPE + "$", i):
            out.append("$")
            i += 2
            continue
        if not value.startswith(_OPEN, i):
            out.append(value[i])
            i += 1
            continue
        end = _find_closing(value, i + len(_OPEN))
        if end == -1:
            out.append(value[i:])
            break
        inner = _expand(value[i + len(_OPEN):end], resolve, cycle, empty_on_missing)
        name, operator, argument = _split_operator(inner)
        replacement = resolve(name, cycle)
        if operator == ":-":
            replacement = replacement if replacement else argument
        elif operator == ":+":
            replacement = argument if replacement else ""
        if replacement is None:
            replacement = "" if empty_on_missing else value[i:end + 1]
        out.append(replacement)
        i = end + 1
    return "".join(out)


def _resolver(
    local: Mapping[str, str], lookup: Mapping[str, str], empty_on_missing: bool
) -> Callable[[str, FrozenSet[str]], Optional[str]]:
    def resolve(name: str, cycle: FrozenSet[str]) -> Optional[str]:
        if name in cycle:
            return None
        if name in local:
            return _expand(local[name], resolve, cycle | {name}, empty_on_missing)
        return lookup.get(name)

    return resolve


def substitute(
    value: str,
    lookup: Mapping[str, str],
    local: Optional[Mapping[str, str]] = None,
    empty_on_missing: bool = True,
    key: Optional[str] = None,
) -> str:
    """Expand the placeholders of a single value.

    ``local`` holds the other entries of the file the value came from and
    ``key`` is the value's own key, so a self reference counts as a cycle.
    """
    resolve = _resolver(local or {}, lookup, empty_on_missing)
    cycle = frozenset({key}) if key is not None else frozenset()
    return _expand(value, resolve, cycle, empty_on_missing)


def perform_substitution(
    properties: Mapping[str, str],
    lookup: Mapping[str, str],
    empty_on_missing: bool = True,
) -> Dict[str, str]:
    """Return a copy of ``properties`` with every value interpolated."""
    return {
        key: substitute(value, lookup, properties, empty_on_missing, key=key)
        for key, value in properties.items()
    }
