"""Command-line interface modules.

Available Commands:
-------------------

propguard evaluate
    Evaluate an account snapshot against a rule template and print
    metrics, violations, rule statuses, phase progress and the risk report.

    Usage:
        propguard evaluate --snapshot account.json --template propnumberone_50k

    Options:
        --snapshot PATH: Account snapshot JSON (required)
        --rules PATH: Rule template JSON file
        --template NAME: Bundled rule template (see ``propguard templates``)
        --format {text|json}: Output format (default: text)
        --tz ZONE: Timezone whose midnight splits trading days (default: UTC)
        --consistency-severity {WARNING|CRITICAL}: Severity of consistency
            failures (default: WARNING)
        --log-level {DEBUG|INFO|WARNING|ERROR}: Logging level (default: WARNING)

propguard risk
    Same inputs as ``evaluate``; prints the safe-capacity report only.

propguard templates
    List the bundled rule templates.

Exit codes:
    0: Compliant and no critical risk alert
    1: Non-compliant or a critical risk alert
    2: Invalid input (snapshot, rule template or configuration)
"""
