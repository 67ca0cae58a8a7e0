"""
Configuration loader for prop-firm rule templates.

Templates are JSON documents. Three layouts are accepted:

- native: ``{"PHASE_1": {"profitTarget": {...}, "dailyLossLimit": {...}}}``
  matching ``RuleSet`` directly;
- phase-keyed legacy: ``{"phase1": {"profitTarget": 5, "maxDailyLoss": 5}}``
  with flat percentage/amount fields per phase;
- category-keyed legacy: ``{"profitTargets": {"PHASE_1": {"percentage": 8}}}``
  with one block per rule category.

Bundled presets live in ``propguard/config/presets`` and are addressed by
file stem (e.g. ``"propnumberone_50k"``).
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..models.exceptions import RuleConfigurationError
from ..models.rules import RuleSet


logger = logging.getLogger(__name__)

PRESETS_DIR = Path(__file__).parent / "presets"

_PHASE_KEYS = {"phase1": "PHASE_1", "phase2": "PHASE_2", "funded": "FUNDED"}
_CATEGORY_KEYS = (
    "profitTargets",
    "dailyLossLimits",
    "overallLossLimits",
    "minimumTradingDays",
    "consistencyRules",
)
_METADATA_KEYS = ("name", "firm", "accountSize", "account_size", "currency")


def list_templates() -> list[str]:
    """Return the names of the bundled rule templates."""
    return sorted(path.stem for path in PRESETS_DIR.glob("*.json"))


def load_rule_set(name: str) -> RuleSet:
    """
    Load a bundled rule template by name.

    Args:
        name: Template file stem, e.g. "futura_funding_10k".

    Returns:
        RuleSet instance.

    Raises:
        RuleConfigurationError: If the template is unknown or invalid.
    """
    file_path = PRESETS_DIR / f"{name}.json"
    if not file_path.exists():
        raise RuleConfigurationError(
            f"Unknown rule template: {name}",
            context={"available": ", ".join(list_templates())},
        )
    return load_rule_set_file(file_path)


def load_rule_set_file(file_path: Path) -> RuleSet:
    """
    Load a rule template from a JSON file in any supported layout.

    Raises:
        RuleConfigurationError: If the file is missing, not JSON, or does
            not describe a valid rule set.
    """
    if not file_path.exists():
        raise RuleConfigurationError(
            "Rule template file not found", context={"path": str(file_path)}
        )

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise RuleConfigurationError(
            "Rule template is not valid JSON",
            context={"path": str(file_path), "line": exc.lineno},
        ) from exc
    except UnicodeDecodeError as exc:
        raise RuleConfigurationError(
            "Rule template is not valid UTF-8",
            context={"path": str(file_path), "offset": exc.start},
        ) from exc

    rule_set = parse_rule_document(data)
    logger.debug("Loaded rule template %s from %s", rule_set.name, file_path)
    return rule_set


def parse_rule_document(data: Any) -> RuleSet:
    """
    Build a RuleSet from a parsed template document of any supported layout.

    A ``rulesJson`` wrapper (as stored alongside template metadata) is
    unwrapped first.
    """
    if not isinstance(data, dict):
        raise RuleConfigurationError(
            "Rule template must be a JSON object",
            context={"type": type(data).__name__},
        )

    if isinstance(data.get("rulesJson"), dict):
        return parse_rule_document({**data["rulesJson"], **_metadata(data)})

    if any(key in data for key in _CATEGORY_KEYS):
        return RuleSet.from_dict(rule_set_from_category_template(data))
    if any(
        isinstance(data.get(key), dict) and _is_flat_phase(data[key])
        for key in _PHASE_KEYS
    ):
        return RuleSet.from_dict(rule_set_from_phase_template(data))
    return RuleSet.from_dict(data)


def _is_flat_phase(block: dict[str, Any]) -> bool:
    flat_fields = (
        "maxDailyLoss",
        "maxOverallLoss",
        "maxTotalLoss",
        "profitTargetAmount",
    )
    return any(field in block for field in flat_fields) or isinstance(
        block.get("profitTarget"), (int, float)
    )


def _metadata(data: dict[str, Any]) -> dict[str, Any]:
    return {k: data[k] for k in _METADATA_KEYS if k in data}


def _limit(percent: Any, amount: Any) -> dict[str, Any] | None:
    if percent is None and amount is None:
        return None
    return {"percentOfStartingBalance": percent, "absoluteAmount": amount}


def _protection_enabled(value: Any) -> bool:
    if isinstance(value, dict):
        return bool(value.get("enabled", False))
    return bool(value)


def rule_set_from_phase_template(data: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a phase-keyed legacy template into the native document layout.

    Legacy fields per phase: ``profitTarget`` (percent), ``profitTargetAmount``,
    ``maxDailyLoss`` / ``maxDailyLossAmount``, ``maxOverallLoss`` /
    ``maxOverallLossAmount`` (``maxTotalLoss`` is read as an amount),
    ``minTradingDays``, ``maxTradingDays``, ``consistencyRules`` with optional
    ``dailyProtection`` / ``tradeProtection`` toggles.
    """
    document = _metadata(data)

    for legacy_key, phase_key in _PHASE_KEYS.items():
        block = data.get(legacy_key)
        if not isinstance(block, dict):
            continue

        phase: dict[str, Any] = {}

        target = _limit(block.get("profitTarget"), block.get("profitTargetAmount"))
        if target is not None:
            target["required"] = phase_key != "FUNDED"
            phase["profitTarget"] = target

        daily = _limit(block.get("maxDailyLoss"), block.get("maxDailyLossAmount"))
        if daily is not None:
            phase["dailyLossLimit"] = daily

        overall = _limit(
            block.get("maxOverallLoss"),
            block.get("maxOverallLossAmount", block.get("maxTotalLoss")),
        )
        if overall is not None:
            phase["overallLossLimit"] = overall

        if block.get("minTradingDays") is not None:
            phase["minTradingDays"] = block["minTradingDays"]
        if block.get("maxTradingDays") is not None:
            phase["maxTradingDays"] = block["maxTradingDays"]

        if block.get("consistencyRules"):
            daily_on = _protection_enabled(block.get("dailyProtection", True))
            trade_on = _protection_enabled(block.get("tradeProtection", True))
            phase["consistency"] = {
                "enabled": daily_on or trade_on,
                "requiredMultipleOfBestDay": 2.0 if daily_on else None,
                "requiredMultipleOfBestTrade": 2.0 if trade_on else None,
            }

        document[phase_key] = phase

    return document


def rule_set_from_category_template(data: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a category-keyed legacy template into the native document layout.

    Each category maps phase names to ``{"percentage", "amount"}`` blocks;
    ``minimumTradingDays`` maps to ``{"days"}`` and ``consistencyRules`` to
    ``{"enabled"}``.
    """
    document = _metadata(data)
    phases: dict[str, dict[str, Any]] = {}

    def entries(category: str) -> list[tuple[str, dict[str, Any]]]:
        block = data.get(category) or {}
        if not isinstance(block, dict):
            raise RuleConfigurationError(
                "Rule category must map phases to objects",
                context={"category": category},
            )
        for phase_key, rule in block.items():
            if not isinstance(rule, dict):
                raise RuleConfigurationError(
                    "Rule category entry must be an object",
                    context={"category": category, "phase": phase_key},
                )
        return list(block.items())

    def phase_block(phase_key: str) -> dict[str, Any]:
        if phase_key not in ("PHASE_1", "PHASE_2", "FUNDED"):
            raise RuleConfigurationError(
                "Unknown phase in rule template", context={"phase": phase_key}
            )
        return phases.setdefault(phase_key, {})

    for phase_key, rule in entries("profitTargets"):
        target = _limit(rule.get("percentage"), rule.get("amount"))
        if target is not None:
            target["required"] = rule.get("isRequired", phase_key != "FUNDED")
            phase_block(phase_key)["profitTarget"] = target

    for category, field_name in (
        ("dailyLossLimits", "dailyLossLimit"),
        ("overallLossLimits", "overallLossLimit"),
    ):
        for phase_key, rule in entries(category):
            limit = _limit(rule.get("percentage"), rule.get("amount"))
            if limit is not None:
                phase_block(phase_key)[field_name] = limit

    for phase_key, rule in entries("minimumTradingDays"):
        if rule.get("days") is not None:
            phase_block(phase_key)["minTradingDays"] = rule["days"]

    for phase_key, rule in entries("consistencyRules"):
        phase_block(phase_key)["consistency"] = {"enabled": bool(rule.get("enabled"))}

    document.update(phases)
    return document
