"""Engine configuration and rule template loading."""

from propguard.config.loader import (
    PRESETS_DIR,
    list_templates,
    load_rule_set,
    load_rule_set_file,
    parse_rule_document,
)
from propguard.config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig

__all__ = [
    "PRESETS_DIR",
    "list_templates",
    "load_rule_set",
    "load_rule_set_file",
    "parse_rule_document",
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
]
