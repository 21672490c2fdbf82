"""Built-in configuration presets.

A preset is a transformation of the effective rule settings.  Three
built-in presets cover the common cases: recommended, strict and relaxed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stylegate.config.loader import RuleSetting
    from stylegate.rules.registry import Rule


@dataclass(frozen=True)
class Preset:
    """Named bundle of rule activations and severity changes."""

    name: str
    description: str
    enable_opt_in: bool = False
    promote_warnings: bool = False
    disable_severities: tuple[str, ...] = ()
    disable_domains: tuple[str, ...] = ()

    def apply(self, rule: Rule, setting: RuleSetting) -> RuleSetting:
        """Return *setting* as this preset would leave it for *rule*."""
        if rule.domain in self.disable_domains:
            return replace(setting, enabled=False)
        if setting.severity in self.disable_severities:
            return replace(setting, enabled=False)
        if self.enable_opt_in and not rule.enabled_by_default:
            setting = replace(setting, enabled=True)
        if self.promote_warnings and setting.severity == "warning":
            setting = replace(setting, severity="error")
        return setting


# ---------------------------------------------------------------------------
# Built-in presets
# ---------------------------------------------------------------------------

RECOMMENDED = Preset(
    name="recommended",
    description="The default catalogue: default severities, opt-in rules off.",
)

STRICT = Preset(
    name="strict",
    description="Every rule on; warnings are promoted to errors.",
    enable_opt_in=True,
    promote_warnings=True,
)

RELAXED = Preset(
    name="relaxed",
    description="Formatting rules and informational rules off.",
    disable_severities=("info",),
    disable_domains=("formatting",),
)

PRESETS: dict[str, Preset] = {
    "recommended": RECOMMENDED,
    "strict": STRICT,
    "relaxed": RELAXED,
}


def get_preset(name: str) -> Preset | None:
    return PRESETS.get(name)
