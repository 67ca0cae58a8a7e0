"""
``evaluate`` and ``risk`` subcommands.

Both commands read an account snapshot and a rule template, run the engine
and print the result as Rich tables or JSON. Input problems are reported on
stderr with exit code 2.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from ..config.loader import load_rule_set, load_rule_set_file
from ..config.settings import EngineConfig
from ..engine import EngineResult, run_engine
from ..models.account import AccountSnapshot
from ..models.enums import OutputFormat, Severity
from ..models.exceptions import EngineError, InvalidAccountDataError
from ..models.rules import RuleSet
from .logging_setup import setup_logging
from .render import render_evaluation, render_metrics, render_risk


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ATTENTION = 1
EXIT_INPUT_ERROR = 2


def configure_account_parser(parser: argparse.ArgumentParser) -> None:
    """Add the snapshot, rule template and engine options to ``parser``."""
    parser.add_argument(
        "--snapshot",
        type=Path,
        required=True,
        help="Path to the account snapshot JSON file",
    )

    rules = parser.add_mutually_exclusive_group(required=True)
    rules.add_argument(
        "--rules",
        type=Path,
        help="Path to a rule template JSON file",
    )
    rules.add_argument(
        "--template",
        type=str,
        help="Name of a bundled rule template (see 'propguard templates')",
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format: text (human-readable) or json (machine-readable)",
    )

    parser.add_argument(
        "--tz",
        type=str,
        default="UTC",
        help="IANA timezone whose midnight splits trading days (default: UTC)",
    )

    parser.add_argument(
        "--consistency-severity",
        type=str,
        choices=[Severity.WARNING.value, Severity.CRITICAL.value],
        default=Severity.WARNING.value,
        help="Severity of failed consistency checks (default: WARNING)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional file receiving JSON-lines logs",
    )


def _read_snapshot(path: Path) -> AccountSnapshot:
    if not path.exists():
        raise InvalidAccountDataError(
            "Snapshot file not found", context={"path": str(path)}
        )
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = json.load(f)
    except json.JSONDecodeError as exc:
        raise InvalidAccountDataError(
            "Snapshot is not valid JSON",
            context={"path": str(path), "line": exc.lineno},
        ) from exc
    except UnicodeDecodeError as exc:
        raise InvalidAccountDataError(
            "Snapshot is not valid UTF-8",
            context={"path": str(path), "offset": exc.start},
        ) from exc

    if not isinstance(data, dict):
        raise InvalidAccountDataError(
            "Snapshot must be a JSON object", context={"path": str(path)}
        )
    return AccountSnapshot.from_dict(data)


def _load_inputs(
    args: argparse.Namespace,
) -> tuple[AccountSnapshot, RuleSet, EngineConfig]:
    config = EngineConfig.from_dict(
        {
            "day_boundary_tz": args.tz,
            "consistency_severity": args.consistency_severity,
        }
    )
    if args.rules is not None:
        rule_set = load_rule_set_file(args.rules)
    else:
        rule_set = load_rule_set(args.template)
    snapshot = _read_snapshot(args.snapshot)
    return snapshot, rule_set, config


def _run(args: argparse.Namespace) -> EngineResult | None:
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        use_json=args.log_file is not None,
    )
    try:
        snapshot, rule_set, config = _load_inputs(args)
        return run_engine(snapshot, rule_set, config)
    except EngineError as exc:
        logger.error("Cannot evaluate account: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return None


def run_evaluate_command(args: argparse.Namespace) -> int:
    """
    Evaluate compliance and risk for a snapshot.

    Returns:
        0 when compliant without critical risk alerts, 1 otherwise, 2 on
        invalid input.
    """
    result = _run(args)
    if result is None:
        return EXIT_INPUT_ERROR

    if args.format == OutputFormat.JSON.value:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        console = Console()
        render_metrics(result.metrics, console)
        render_evaluation(result.evaluation, console)
        render_risk(result.risk, console)

    return EXIT_ATTENTION if result.requires_attention else EXIT_OK


def run_risk_command(args: argparse.Namespace) -> int:
    """
    Print the safe-capacity report for a snapshot.

    Returns:
        0 when no risk alert is critical, 1 otherwise, 2 on invalid input.
    """
    result = _run(args)
    if result is None:
        return EXIT_INPUT_ERROR

    report = result.risk
    if args.format == OutputFormat.JSON.value:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        render_risk(report, Console())

    return EXIT_ATTENTION if report.critical_alerts else EXIT_OK
