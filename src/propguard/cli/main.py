import argparse
import sys

from rich.console import Console

from ..config.loader import list_templates
from .check_account import (
    configure_account_parser,
    run_evaluate_command,
    run_risk_command,
)
from .render import render_templates


def run_templates_command(args: argparse.Namespace) -> int:
    names = list_templates()
    if args.names_only:
        for name in names:
            print(name)
    else:
        render_templates(names, Console())
    return 0


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the 'propguard' CLI.
    """
    parser = argparse.ArgumentParser(
        prog="propguard",
        description="PropGuard: prop-firm challenge compliance and risk engine",
    )
    subparsers = parser.add_subparsers(
        dest="command", required=True, help="Subcommands"
    )

    # -------------------------------------------------------------------------
    # Subcommand: evaluate
    # -------------------------------------------------------------------------
    evaluate_parser = subparsers.add_parser(
        "evaluate",
        help="Evaluate an account against its rule template",
        description="Compute metrics, rule compliance, phase progress and risk.",
    )
    configure_account_parser(evaluate_parser)

    # -------------------------------------------------------------------------
    # Subcommand: risk
    # -------------------------------------------------------------------------
    risk_parser = subparsers.add_parser(
        "risk",
        help="Report the true safe capacity of an account",
        description="Simulate every open stop loss and report remaining capacity.",
    )
    configure_account_parser(risk_parser)

    # -------------------------------------------------------------------------
    # Subcommand: templates
    # -------------------------------------------------------------------------
    templates_parser = subparsers.add_parser(
        "templates",
        help="List bundled rule templates",
    )
    templates_parser.add_argument(
        "--names-only",
        action="store_true",
        help="Print one template name per line",
    )

    # -------------------------------------------------------------------------
    # Parse & Execute
    # -------------------------------------------------------------------------
    parsed_args = parser.parse_args(args)

    if parsed_args.command == "evaluate":
        return run_evaluate_command(parsed_args)
    if parsed_args.command == "risk":
        return run_risk_command(parsed_args)
    if parsed_args.command == "templates":
        return run_templates_command(parsed_args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
