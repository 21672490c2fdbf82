"""State-store shape rules.

Registered through the decorator API; the catalogue picks them up from
:data:`RULES` like every other rule module.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from stylegate.model import STORE, StoreFacts
from stylegate.rules._util import join_paths
from stylegate.rules.registry import RuleRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from stylegate.model import ProjectModel, ProjectNode
    from stylegate.rules.registry import RawFinding, RuleContext

_PARTS = ("state", "getters", "actions")

_rules = RuleRegistry()


@_rules.node_rule(
    "store-three-part-shape",
    domain="store-shape",
    severity="warning",
    message="Store '{store}' is missing {missing}",
    kinds=[STORE],
    options={"require": list(_PARTS)},
)
def _check_three_parts(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    """Stores are organised as state, getters and actions."""
    facts = node.unit
    if not isinstance(facts, StoreFacts) or facts.style is None:
        return
    present = {
        "state": facts.has_state,
        "getters": facts.has_getters,
        "actions": facts.has_actions,
    }
    required = [p for p in ctx.option("require", _PARTS) if p in present]
    missing = [p for p in required if not present[p]]
    if missing:
        yield ctx.finding(
            node.path,
            line=facts.line,
            store=facts.store_id or facts.export_name or node.stem,
            missing=", ".join(missing),
        )


@_rules.node_rule(
    "store-state-function",
    domain="store-shape",
    severity="error",
    message="Store '{store}' declares state as a plain object; use a function",
    kinds=[STORE],
)
def _check_state_function(node: ProjectNode, ctx: RuleContext) -> Iterator[RawFinding]:
    """Options-style stores declare state as a function returning an object."""
    facts = node.unit
    if not isinstance(facts, StoreFacts):
        return
    if facts.style == "options" and facts.has_state and not facts.state_is_function:
        yield ctx.finding(node.path, line=facts.line, store=facts.store_id or node.stem)


@_rules.project_rule(
    "store-unique-id",
    domain="store-shape",
    severity="error",
    message="Store id '{store}' is defined in multiple files: {paths}",
)
def _check_unique_ids(model: ProjectModel, ctx: RuleContext) -> Iterator[RawFinding]:
    """Every store id is unique across the project."""
    by_id: dict[str, list[str]] = defaultdict(list)
    lines: dict[str, int] = {}
    for node in model.parsed(STORE):
        facts = node.unit
        if not isinstance(facts, StoreFacts) or facts.store_id is None:
            continue
        by_id[facts.store_id].append(node.path)
        lines.setdefault(facts.store_id, facts.line)
    for store_id, paths in sorted(by_id.items()):
        if len(paths) < 2:
            continue
        yield ctx.finding(
            paths[0],
            line=lines[store_id],
            related=paths[1:],
            store=store_id,
            paths=join_paths(paths),
        )


RULES = tuple(_rules)
