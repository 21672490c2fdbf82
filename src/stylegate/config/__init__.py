"""Layered configuration: defaults, presets, project file and overrides."""

from stylegate.config.loader import (
    CONFIG_FILENAMES,
    Configuration,
    RuleSetting,
    find_config_file,
    load_configuration,
)
from stylegate.config.presets import PRESETS, Preset, get_preset

__all__ = [
    "CONFIG_FILENAMES",
    "PRESETS",
    "Configuration",
    "Preset",
    "RuleSetting",
    "find_config_file",
    "get_preset",
    "load_configuration",
]
