"""The built-in rule catalogue."""

from __future__ import annotations

from stylegate.rules import (
    component_shape,
    formatting,
    naming,
    router_shape,
    store_shape,
    structure,
)
from stylegate.rules.registry import RuleRegistry

_MODULES = (structure, naming, component_shape, store_shape, router_shape, formatting)


def build_default_registry() -> RuleRegistry:
    """Return a fresh registry holding every built-in rule.

    Raises :class:`~stylegate.errors.RuleConflictError` if two built-in
    modules define the same id.
    """
    registry = RuleRegistry()
    for module in _MODULES:
        for rule in module.RULES:
            registry.register(rule)
    return registry
