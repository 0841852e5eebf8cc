"""Access policy analysis.

Decides, per operation, whether an entity's rules allow it for everyone.
The generator only uses the result to drop the default auth requirement.
"""

from restful_openapi.model.base import OPERATIONS, AccessRule, Entity, PolicyResult


def analyze_policies(entity: Entity) -> PolicyResult:
    """Return which operations are unconditionally allowed on the entity."""
    return PolicyResult(**{op: _is_open(entity.access, op) for op in OPERATIONS})


def _is_open(rules: list[AccessRule], operation: str) -> bool:
    allows = [r for r in rules if r.kind == "allow" and r.covers(operation)]
    denies = [r for r in rules if r.kind == "deny" and r.covers(operation)]

    if not any(r.condition is True for r in allows):
        return False
    # a deny that can never fire does not close the operation
    return all(r.condition is False for r in denies)
