"""Removal of component schemas that no path can reach.

References are collected into an explicit graph (component name -> names
it references) and pruning is plain reachability from the names the
paths reference directly.
"""

import logging
from typing import Any

from restful_openapi.generator.types import SCHEMA_REF_PREFIX, Schema

logger = logging.getLogger(__name__)


def collect_refs(value: Any) -> list[str]:
    """Names of component schemas referenced anywhere inside ``value``, in first-seen order."""
    names: list[str] = []
    _walk(value, names)
    return names


def _walk(value: Any, names: list[str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str):
                if item.startswith(SCHEMA_REF_PREFIX):
                    name = item[len(SCHEMA_REF_PREFIX):]
                    if name not in names:
                        names.append(name)
            else:
                _walk(item, names)
    elif isinstance(value, list):
        for item in value:
            _walk(item, names)


def build_reference_graph(schemas: dict[str, Schema]) -> dict[str, list[str]]:
    return {name: collect_refs(schema) for name, schema in schemas.items()}


def reachable(roots: list[str], graph: dict[str, list[str]]) -> set[str]:
    seen: set[str] = set()
    stack = list(roots)
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        stack.extend(graph.get(name, []))
    return seen


def prune_components(paths: dict[str, Schema], schemas: dict[str, Schema]) -> dict[str, Schema]:
    """Return the schemas reachable from ``paths``, keeping their original order."""
    used = reachable(collect_refs(paths), build_reference_graph(schemas))
    pruned = {name: schema for name, schema in schemas.items() if name in used}
    logger.debug("Pruned %d of %d component schemas", len(schemas) - len(pruned), len(schemas))
    return pruned
