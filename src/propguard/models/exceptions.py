"""
Custom exception classes for the compliance and risk engine.

The engine distinguishes two families of fatal input problems:

- ``RuleConfigurationError``: the rule template itself is unusable
  (malformed JSON, negative thresholds, unknown template name).
- ``InvalidAccountDataError``: the account snapshot cannot be evaluated
  (starting balance <= 0, unknown phase, malformed trade records).

Absent rules and absent data are *not* errors; they are reported as
"not applicable" or treated as zero by the engine.
"""


class EngineError(Exception):
    """
    Base class for all engine errors.

    Attributes:
        message: Human-readable error description.
        context: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class RuleConfigurationError(EngineError):
    """
    Raised when a rule set or engine configuration is invalid.

    Examples:
        >>> error = RuleConfigurationError(
        ...     "Unknown rule template", context={"template": "acme"}
        ... )
        >>> str(error)
        'Unknown rule template (template=acme)'
    """


class InvalidAccountDataError(EngineError):
    """
    Raised when an account snapshot cannot be evaluated.

    Examples:
        >>> error = InvalidAccountDataError(
        ...     "Starting balance must be positive",
        ...     context={"starting_balance": 0.0},
        ... )
        >>> str(error)
        'Starting balance must be positive (starting_balance=0.0)'
    """
