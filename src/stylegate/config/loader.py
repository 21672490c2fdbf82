"""Configuration loader: merge defaults, presets, the project file and CLI overrides."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

import yaml

from stylegate.config.presets import get_preset
from stylegate.errors import CheckError, ConfigError
from stylegate.rules.registry import DOMAINS, RESERVED_RULE_IDS

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path

    from stylegate.rules.registry import Rule, RuleRegistry

logger = logging.getLogger(__name__)

CONFIG_FILENAMES: tuple[str, ...] = (".stylegate.yml", ".stylegate.yaml")
SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
CLI_SOURCE = "<command line>"

_SEVERITY_ALIASES: dict[str, str] = {
    "error": "error",
    "warning": "warning",
    "warn": "warning",
    "info": "info",
    "off": "off",
}
_TOP_LEVEL_KEYS: frozenset[str] = frozenset({"version", "extends", "ignore", "domains", "rules"})
_RULE_KEYS: frozenset[str] = frozenset({"severity", "enabled", "options"})

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleSetting:
    """Effective settings for one rule."""

    enabled: bool
    severity: str  # "error" | "warning" | "info"
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Configuration:
    """The effective configuration for one run; immutable once loaded."""

    rules: Mapping[str, RuleSetting] = field(default_factory=dict)
    ignore: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    errors: tuple[ConfigError, ...] = ()
    config_file: str | None = None  # relative path of the project file, if any

    def setting(self, rule_id: str) -> RuleSetting | None:
        return self.rules.get(rule_id)

    def is_enabled(self, rule_id: str) -> bool:
        if rule_id in RESERVED_RULE_IDS:
            return True
        setting = self.rules.get(rule_id)
        return setting is not None and setting.enabled

    def severity_of(self, rule_id: str) -> str:
        """Configured severity; reserved engine ids have fixed severities."""
        if rule_id in RESERVED_RULE_IDS:
            return RESERVED_RULE_IDS[rule_id]
        setting = self.rules.get(rule_id)
        if setting is None or not setting.enabled:
            return "off"
        return setting.severity

    def options_for(self, rule_id: str) -> Mapping[str, Any]:
        setting = self.rules.get(rule_id)
        return setting.options if setting is not None else {}

    def enabled_rules(self, registry: RuleRegistry) -> list[Rule]:
        return [rule for rule in registry if self.is_enabled(rule.id)]


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def normalize_severity(value: object) -> str | None:
    """Map a YAML scalar to ``error|warning|info|off``; None when invalid.

    YAML 1.1 reads a bare ``off`` as ``False``, which maps to ``off``;
    callers treat ``True`` as "enable, keep severity".
    """
    if value is False:
        return "off"
    if isinstance(value, str):
        return _SEVERITY_ALIASES.get(value.strip().lower())
    return None


def parse_override(text: str) -> tuple[str, str]:
    """Split a ``rule-id=severity`` command-line override."""
    rule_id, sep, level = text.partition("=")
    if not sep or not rule_id.strip() or not level.strip():
        msg = f"override '{text}' must look like RULE_ID=SEVERITY"
        raise ConfigError(msg, source=CLI_SOURCE)
    return rule_id.strip(), level.strip()


def _read_yaml(path: Path, label: str) -> tuple[dict[str, Any], str]:
    """Return the parsed mapping and the raw text of a YAML source."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read configuration: {exc}"
        raise ConfigError(msg, source=label) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 1 if mark is not None else None
        msg = f"invalid YAML: {getattr(exc, 'problem', None) or exc}"
        raise ConfigError(msg, source=label, line=line) from exc
    if data is None:
        return {}, text
    if not isinstance(data, dict):
        msg = "configuration must be a mapping"
        raise ConfigError(msg, source=label, line=1)
    return data, text


def _as_str_list(value: object, what: str, label: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    msg = f"'{what}' must be a string or a list of strings"
    raise ConfigError(msg, source=label)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


class _Merger:
    """Accumulates settings layer by layer; last write wins per rule id."""

    def __init__(self, registry: RuleRegistry) -> None:
        self.registry = registry
        self.settings: dict[str, RuleSetting] = {
            rule.id: RuleSetting(
                enabled=rule.enabled_by_default,
                severity=rule.default_severity,
                options=dict(rule.options),
            )
            for rule in registry
        }
        self.ignore: list[str] = []
        self.sources: list[str] = ["default"]
        self.errors: list[ConfigError] = []
        self.texts: dict[str, str] = {}

    def _line_of(self, label: str, key: str | None) -> int | None:
        text = self.texts.get(label)
        if text is None or key is None:
            return None
        pattern = r"^[ \t-]*['\"]?" + re.escape(key) + r"['\"]?\s*(?::|$)"
        match = re.search(pattern, text, re.MULTILINE)
        return text.count("\n", 0, match.start()) + 1 if match else None

    def read(self, path: Path, label: str) -> dict[str, Any]:
        data, self.texts[label] = _read_yaml(path, label)
        return data

    def error(self, message: str, label: str, key: str | None = None) -> None:
        err = ConfigError(message, source=label, line=self._line_of(label, key))
        logger.warning("Configuration error: %s", err)
        self.errors.append(err)

    # -- layers ------------------------------------------------------------

    def apply_builtin_preset(self, name: str) -> bool:
        preset = get_preset(name)
        if preset is None:
            return False
        for rule in self.registry:
            self.settings[rule.id] = preset.apply(rule, self.settings[rule.id])
        self.sources.append(f"preset:{name}")
        return True

    def apply_body(self, data: Mapping[str, Any], label: str) -> None:
        """Apply ``ignore``, ``domains`` then ``rules`` from one source."""
        for key in data:
            if key not in _TOP_LEVEL_KEYS:
                self.error(f"unknown top-level key '{key}'", label, key=str(key))
        try:
            self.ignore.extend(_as_str_list(data.get("ignore"), "ignore", label))
        except ConfigError as exc:
            self.errors.append(exc)

        domains = data.get("domains") or {}
        if not isinstance(domains, dict):
            msg = "'domains' must map domain names to on, off or a severity"
            self.error(msg, label, key="domains")
        else:
            for domain, value in domains.items():
                self.apply_domain(str(domain), value, label)

        rules = data.get("rules") or {}
        if not isinstance(rules, dict):
            self.error("'rules' must be a mapping of rule id to settings", label, key="rules")
        else:
            for rule_id, value in rules.items():
                self.apply_rule(str(rule_id), value, label)
        self.sources.append(label)

    def apply_domain(self, domain: str, value: object, label: str) -> None:
        if domain not in DOMAINS:
            self.error(f"unknown domain '{domain}'", label, key=domain)
            return
        if value is True:
            level = None
        else:
            level = normalize_severity(value)
            if level is None:
                self.error(f"invalid setting {value!r} for domain '{domain}'", label, key=domain)
                return
        for rule in self.registry.by_domain(domain):
            current = self.settings[rule.id]
            if level == "off":
                self.settings[rule.id] = replace(current, enabled=False)
            elif level is None:
                self.settings[rule.id] = replace(current, enabled=True)
            else:
                self.settings[rule.id] = replace(current, enabled=True, severity=level)

    def apply_rule(self, rule_id: str, value: object, label: str) -> None:
        if rule_id in RESERVED_RULE_IDS:
            msg = f"rule '{rule_id}' is reserved and cannot be configured"
            self.error(msg, label, key=rule_id)
            return
        rule = self.registry.get(rule_id)
        if rule is None:
            self.error(f"unknown rule id '{rule_id}'", label, key=rule_id)
            return
        setting = self._entry_setting(rule, value, label)
        if setting is not None:
            self.settings[rule_id] = setting

    def _entry_setting(self, rule: Rule, value: object, label: str) -> RuleSetting | None:
        """Build the complete replacement setting for one rule entry."""
        options = dict(rule.options)
        enabled = True
        severity: str = rule.default_severity

        def fail(reason: str) -> None:
            self.error(f"rule '{rule.id}': {reason}", label, key=rule.id)

        if isinstance(value, dict):
            unknown = sorted(set(map(str, value)) - _RULE_KEYS)
            if unknown:
                fail(f"unknown keys {', '.join(unknown)}")
                return None
            if "options" in value:
                if not isinstance(value["options"], dict):
                    fail("'options' must be a mapping")
                    return None
                options = dict(value["options"])
            if "enabled" in value:
                if not isinstance(value["enabled"], bool):
                    fail("'enabled' must be true or false")
                    return None
                enabled = value["enabled"]
            raw = value.get("severity", rule.default_severity)
        elif value is True:
            raw = rule.default_severity
        else:
            raw = value

        level = normalize_severity(raw)
        if level is None:
            fail(f"invalid severity {raw!r}")
            return None
        if level == "off":
            enabled = False
        else:
            severity = level
        return RuleSetting(enabled=enabled, severity=severity, options=options)

    def result(self, config_file: str | None) -> Configuration:
        return Configuration(
            rules=dict(self.settings),
            ignore=tuple(dict.fromkeys(self.ignore)),
            sources=tuple(self.sources),
            errors=tuple(self.errors),
            config_file=config_file,
        )


def find_config_file(project_root: Path) -> Path | None:
    """Return the project configuration file in *project_root*, if any."""
    for name in CONFIG_FILENAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def _label_for(path: Path, project_root: Path) -> str:
    try:
        return path.resolve().relative_to(project_root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _apply_extends(
    merger: _Merger,
    extends: Iterable[str],
    base_dir: Path,
    project_root: Path,
    label: str,
) -> None:
    for ref in extends:
        if merger.apply_builtin_preset(ref):
            continue
        preset_path = base_dir / ref
        if not ref.endswith((".yml", ".yaml")) or not preset_path.is_file():
            merger.error(f"cannot resolve preset '{ref}'", label, key=ref)
            continue
        preset_label = _label_for(preset_path, project_root)
        try:
            data = merger.read(preset_path, preset_label)
        except ConfigError as exc:
            merger.errors.append(exc)
            continue
        if "extends" in data:
            merger.error("presets cannot extend other presets", preset_label, key="extends")
            data = {k: v for k, v in data.items() if k != "extends"}
        merger.apply_body(data, preset_label)


def load_configuration(
    project_root: Path,
    registry: RuleRegistry,
    *,
    config_path: Path | None = None,
    presets: Sequence[str] = (),
    overrides: Sequence[str] = (),
) -> Configuration:
    """Load the effective configuration for *project_root*.

    Layers, in order: registry defaults, each preset in ``presets`` (CLI)
    and the project file's ``extends``, the project file itself, then
    ``overrides`` (``rule-id=severity`` strings; a domain name toggles the
    whole domain).  Errors in any layer are collected on the returned
    :class:`Configuration` and loading continues with the next entry.

    Raises
    ------
    CheckError
        When an explicit *config_path* does not exist.
    """
    merger = _Merger(registry)

    if config_path is not None:
        if not config_path.is_file():
            msg = f"Configuration file not found: {config_path}"
            raise CheckError(msg)
        project_file: Path | None = config_path
    else:
        project_file = find_config_file(project_root)

    data: dict[str, Any] = {}
    label = CLI_SOURCE
    config_label: str | None = None
    if project_file is not None:
        label = config_label = _label_for(project_file, project_root)
        try:
            data = merger.read(project_file, label)
        except ConfigError as exc:
            logger.warning("Configuration error: %s", exc)
            merger.errors.append(exc)
            data = {}
        version = data.get("version", 1)
        supported = isinstance(version, int) and not isinstance(version, bool)
        if not supported or version not in SUPPORTED_SCHEMA_VERSIONS:
            merger.error(f"unsupported configuration version {version!r}", label, key="version")

    try:
        extends = list(presets) + _as_str_list(data.get("extends"), "extends", label)
    except ConfigError as exc:
        merger.errors.append(exc)
        extends = list(presets)
    base_dir = project_file.parent if project_file is not None else project_root
    _apply_extends(merger, extends, base_dir, project_root, label)

    if project_file is not None:
        merger.apply_body({k: v for k, v in data.items() if k not in ("version", "extends")}, label)

    for text in overrides:
        try:
            target, level = parse_override(text)
        except ConfigError as exc:
            merger.errors.append(exc)
            continue
        if target in DOMAINS:
            merger.apply_domain(target, level, CLI_SOURCE)
        else:
            merger.apply_rule(target, level, CLI_SOURCE)
    if overrides:
        merger.sources.append(CLI_SOURCE)

    config = merger.result(config_label)
    logger.debug(
        "Loaded configuration from %s (%d errors)", ", ".join(config.sources), len(config.errors)
    )
    return config
