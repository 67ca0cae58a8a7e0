"""
Rule set models for prop-firm challenge templates.

A RuleSet holds one optional ``PhaseRules`` slice per challenge phase. Every
sub-rule is optional: a missing rule means "not applicable" and is never
treated as a violation. All monetary limits resolve against the starting
balance of the current challenge, never against live equity.

Models are frozen pydantic models so a loaded RuleSet can be shared freely
between concurrent evaluations.
"""

from typing import Any, assert_never

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .enums import Phase
from .exceptions import RuleConfigurationError


_RULE_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class LossLimit(BaseModel):
    """
    Loss limit expressed as a percentage and/or an absolute amount.

    When both are given the percentage is authoritative: it is applied to
    the starting balance of the account being evaluated, so a template
    written for one account size stays correct for another. The absolute
    amount is the fallback for templates that only state a currency figure.

    Examples:
        >>> limit = LossLimit(percent_of_starting_balance=5.0)
        >>> limit.amount(50_000)
        2500.0
        >>> limit.percent(50_000)
        5.0
    """

    model_config = _RULE_MODEL_CONFIG

    percent_of_starting_balance: float | None = Field(default=None, ge=0.0, le=100.0)
    absolute_amount: float | None = Field(default=None, ge=0.0)

    @property
    def is_defined(self) -> bool:
        """True when at least one threshold is set."""
        return (
            self.percent_of_starting_balance is not None
            or self.absolute_amount is not None
        )

    def amount(self, starting_balance: float) -> float | None:
        """Limit in account currency, or None when not defined."""
        if self.percent_of_starting_balance is not None:
            return starting_balance * self.percent_of_starting_balance / 100.0
        if self.absolute_amount is not None:
            return float(self.absolute_amount)
        return None

    def percent(self, starting_balance: float) -> float | None:
        """Limit as percent of starting balance, or None when not defined."""
        if self.percent_of_starting_balance is not None:
            return float(self.percent_of_starting_balance)
        if self.absolute_amount is not None:
            return self.absolute_amount / starting_balance * 100.0
        return None


class ProfitTarget(LossLimit):
    """Profit target for a phase; ``required`` is False for funded accounts."""

    required: bool = True


class ConsistencyRule(BaseModel):
    """
    Consistency ("50% protection") rule.

    With a multiple of 2 no single day (or trade) may account for more
    than half of the total profit. Setting a multiple to None disables
    that half of the rule.
    """

    model_config = _RULE_MODEL_CONFIG

    enabled: bool = False
    required_multiple_of_best_day: float | None = Field(default=2.0, gt=0.0)
    required_multiple_of_best_trade: float | None = Field(default=2.0, gt=0.0)


class PhaseRules(BaseModel):
    """Thresholds that apply while an account is in a single phase."""

    model_config = _RULE_MODEL_CONFIG

    profit_target: ProfitTarget | None = None
    daily_loss_limit: LossLimit | None = None
    overall_loss_limit: LossLimit | None = None
    min_trading_days: int | None = Field(default=None, ge=0)
    max_trading_days: int | None = Field(default=None, ge=1)
    consistency: ConsistencyRule | None = None

    @model_validator(mode="after")
    def validate_day_bounds(self) -> "PhaseRules":
        """Minimum trading days may not exceed the maximum."""
        if (
            self.min_trading_days is not None
            and self.max_trading_days is not None
            and self.min_trading_days > self.max_trading_days
        ):
            raise ValueError(
                f"min_trading_days ({self.min_trading_days}) exceeds "
                f"max_trading_days ({self.max_trading_days})"
            )
        return self


class RuleSet(BaseModel):
    """
    Complete rule template for a prop-firm program.

    Attributes:
        name: Template name (e.g. "PropNumberOne Challenge 50k").
        firm: Prop firm name.
        account_size: Nominal account size of the template.
        currency: Account currency code.
        phase_1: Rules for the first evaluation phase.
        phase_2: Rules for the verification phase.
        funded: Rules for the funded account.

    Examples:
        >>> rules = RuleSet.from_dict({
        ...     "PHASE_1": {"dailyLossLimit": {"percentOfStartingBalance": 5}},
        ... })
        >>> rules.for_phase(Phase.PHASE_1).daily_loss_limit.amount(50_000)
        2500.0
        >>> rules.for_phase(Phase.FUNDED) is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = "custom"
    firm: str | None = None
    account_size: float | None = Field(
        default=None,
        gt=0.0,
        validation_alias=AliasChoices("account_size", "accountSize"),
    )
    currency: str = "USD"
    phase_1: PhaseRules | None = Field(
        default=None, validation_alias=AliasChoices("PHASE_1", "phase1", "phase_1")
    )
    phase_2: PhaseRules | None = Field(
        default=None, validation_alias=AliasChoices("PHASE_2", "phase2", "phase_2")
    )
    funded: PhaseRules | None = Field(
        default=None, validation_alias=AliasChoices("FUNDED", "funded")
    )

    def for_phase(self, phase: Phase) -> PhaseRules | None:
        """Return the rule slice for ``phase`` (None when the phase has no rules)."""
        match phase:
            case Phase.PHASE_1:
                return self.phase_1
            case Phase.PHASE_2:
                return self.phase_2
            case Phase.FUNDED:
                return self.funded
            case _:
                assert_never(phase)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleSet":
        """
        Build a RuleSet from a parsed JSON document.

        Raises:
            RuleConfigurationError: If the document does not match the schema.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise RuleConfigurationError(
                "Invalid rule set",
                context={
                    "errors": exc.error_count(),
                    "detail": describe_validation_error(exc),
                },
            ) from exc


def describe_validation_error(exc: ValidationError) -> str:
    """Return the location and message of the first validation error."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}"
