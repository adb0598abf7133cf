"""Dependency declaration parsing.

A declaration has the form ``[@scope/]name[@version]``.  Parsing is total:
malformed input never raises, it is split on the first ``@`` after the
optional scope marker and whatever follows becomes the version constraint.
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["WILDCARD", "DependencyMap", "parse_declaration", "parse_dependencies"]

WILDCARD = "*"

DependencyMap = dict[str, str]


def parse_declaration(declaration: str) -> tuple[str, str]:
    """Split one declaration into ``(name, version)``.

    ``"koa@2.1.3"`` gives ``("koa", "2.1.3")`` and ``"@foo/bar"`` gives
    ``("@foo/bar", "*")``.  Extra ``@`` characters stay in the version.
    """
    scoped = declaration.startswith("@")
    rest = declaration[1:] if scoped else declaration

    name, _, version = rest.partition("@")
    if scoped:
        name = f"@{name}"
    return name, version or WILDCARD


def parse_dependencies(declarations: Iterable[str]) -> DependencyMap:
    """Parse declarations into a name -> version map.

    Input is sorted first so the result does not depend on call-site order.
    When two declarations share a name, the later one in sorted order wins.
    """
    result: DependencyMap = {}
    for declaration in sorted(declarations):
        name, version = parse_declaration(declaration)
        result[name] = version
    return result
