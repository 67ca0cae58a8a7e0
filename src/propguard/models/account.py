"""
Account snapshot models supplied by the account/trade store.

This module defines the point-in-time inputs of the engine: historical
trades, live open positions and the AccountSnapshot that groups them with
the challenge's starting balance and current phase.

Conventions:
- Net P&L of a trade is gross + swap + commission; missing swap or
  commission is read as zero.
- Naive datetimes are interpreted as UTC.
- A stop-loss of 0.0 (how MetaTrader reports "no stop") is read as absent.
"""

import math
from datetime import UTC, datetime
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .enums import Phase, TradeSide
from .exceptions import InvalidAccountDataError
from .rules import describe_validation_error


_ACCOUNT_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

DEFAULT_CONTRACT_SIZE = 100_000.0


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _parse_side(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class Trade(BaseModel):
    """
    Immutable historical trade record.

    Attributes:
        id: Trade identifier (ticket).
        symbol: Instrument symbol, e.g. "EURUSD".
        side: BUY or SELL.
        volume: Size in lots.
        open_time: Time the trade was opened.
        close_time: Time the trade was closed; None while still open.
        gross_pnl: Gross profit/loss in account currency.
        swap: Accumulated swap (None is read as 0).
        commission: Commission charged (None is read as 0).

    Examples:
        >>> trade = Trade(
        ...     id="1",
        ...     symbol="EURUSD",
        ...     open_time=datetime(2025, 8, 21, 9, 0),
        ...     close_time=datetime(2025, 8, 21, 11, 0),
        ...     gross_pnl=120.0,
        ...     swap=-2.5,
        ...     commission=None,
        ... )
        >>> trade.net_pnl
        117.5
        >>> trade.is_closed
        True
    """

    model_config = _ACCOUNT_MODEL_CONFIG

    id: str = Field(validation_alias=AliasChoices("id", "ticket", "ticketId"))
    symbol: str
    side: TradeSide = TradeSide.BUY
    volume: float = Field(default=0.0, ge=0.0)
    open_time: datetime
    close_time: datetime | None = None
    gross_pnl: float = Field(
        default=0.0,
        validation_alias=AliasChoices("gross_pnl", "grossPnL", "grossPnl", "pnlGross"),
    )
    swap: float = 0.0
    commission: float = 0.0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        """Accept numeric MetaTrader tickets."""
        return str(value) if isinstance(value, int) else value

    @field_validator("side", mode="before")
    @classmethod
    def normalize_side(cls, value: Any) -> Any:
        """Accept lower-case sides as exported by MetaTrader."""
        return _parse_side(value)

    @field_validator("gross_pnl", "swap", "commission", mode="before")
    @classmethod
    def missing_amount_is_zero(cls, value: Any) -> Any:
        """Treat absent swap/commission/P&L as zero."""
        return 0.0 if value is None else value

    @field_validator("open_time", "close_time")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """Interpret naive timestamps as UTC."""
        return _as_utc(value)

    @model_validator(mode="after")
    def validate_times(self) -> "Trade":
        """A trade cannot close before it opened."""
        if self.close_time is not None and self.close_time < self.open_time:
            raise ValueError(
                f"trade {self.id} closes before it opens "
                f"({self.close_time.isoformat()} < {self.open_time.isoformat()})"
            )
        return self

    @property
    def is_closed(self) -> bool:
        """True once the trade has a close time."""
        return self.close_time is not None

    @property
    def net_pnl(self) -> float:
        """Gross P&L plus swap plus commission."""
        return self.gross_pnl + self.swap + self.commission


class OpenPosition(BaseModel):
    """
    Live open position with an optional protective stop.

    ``risk_to_stop`` is the additional loss realised if price moved from its
    current level to the stop. It is None when the position has no stop,
    which the engine treats as unbounded risk.
    An explicit ``loss_if_stopped`` is only accepted together with a stop.

    Examples:
        >>> position = OpenPosition(
        ...     symbol="EURUSD",
        ...     ticket="400001",
        ...     side="buy",
        ...     volume=2.0,
        ...     open_price=1.08000,
        ...     current_price=1.08500,
        ...     stop_loss=1.06500,
        ...     floating_pnl=1000.0,
        ... )
        >>> round(position.risk_to_stop, 2)
        4000.0
        >>> unprotected = OpenPosition(symbol="XAUUSD", ticket="7", stop_loss=0.0)
        >>> unprotected.risk_to_stop is None
        True
    """

    model_config = _ACCOUNT_MODEL_CONFIG

    symbol: str
    ticket: str = Field(validation_alias=AliasChoices("ticket", "ticketId", "id"))
    side: TradeSide = TradeSide.BUY
    volume: float = Field(default=0.0, ge=0.0)
    floating_pnl: float = Field(
        default=0.0,
        validation_alias=AliasChoices(
            "floating_pnl", "floatingPnL", "floatingPnl", "profit"
        ),
    )
    stop_loss: float | None = Field(
        default=None, validation_alias=AliasChoices("stop_loss", "stopLoss", "sl")
    )
    open_price: float | None = Field(
        default=None,
        validation_alias=AliasChoices("open_price", "openPrice", "price_open"),
    )
    current_price: float | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "current_price", "currentPrice", "price_current"
        ),
    )
    contract_size: float = Field(default=DEFAULT_CONTRACT_SIZE, gt=0.0)
    loss_if_stopped: float | None = Field(default=None, ge=0.0)

    @field_validator("ticket", mode="before")
    @classmethod
    def coerce_ticket(cls, value: Any) -> Any:
        """Accept numeric MetaTrader tickets."""
        return str(value) if isinstance(value, int) else value

    @field_validator("side", mode="before")
    @classmethod
    def normalize_side(cls, value: Any) -> Any:
        """Accept lower-case sides as exported by MetaTrader."""
        return _parse_side(value)

    @field_validator("floating_pnl", mode="before")
    @classmethod
    def missing_pnl_is_zero(cls, value: Any) -> Any:
        """Treat absent floating P&L as zero."""
        return 0.0 if value is None else value

    @field_validator("stop_loss")
    @classmethod
    def zero_stop_is_absent(cls, value: float | None) -> float | None:
        """MetaTrader reports a missing stop as 0.0."""
        if value is not None and value == 0.0:
            return None
        return value

    @model_validator(mode="after")
    def validate_stop_reference(self) -> "OpenPosition":
        """An explicit loss needs a stop; a stop needs a loss or a price."""
        if self.stop_loss is None and self.loss_if_stopped is not None:
            raise ValueError(
                f"position {self.ticket} has loss_if_stopped but no stop-loss"
            )
        if (
            self.stop_loss is not None
            and self.loss_if_stopped is None
            and self.current_price is None
            and self.open_price is None
        ):
            raise ValueError(
                f"position {self.ticket} has a stop-loss but neither a price "
                "nor loss_if_stopped to derive its risk"
            )
        return self

    @property
    def has_stop(self) -> bool:
        """True when the position carries a protective stop."""
        return self.stop_loss is not None

    @property
    def risk_to_stop(self) -> float | None:
        """Additional loss if the stop is hit; None when unprotected."""
        if self.stop_loss is None:
            return None
        if self.loss_if_stopped is not None:
            return float(self.loss_if_stopped)
        reference = (
            self.current_price if self.current_price is not None else self.open_price
        )
        distance = (reference - self.stop_loss) * self.side.direction
        return max(0.0, distance * self.volume * self.contract_size)


class AccountSnapshot(BaseModel):
    """
    Point-in-time account state handed to the engine.

    Attributes:
        account_id: Optional label used in reports and logs.
        starting_balance: Balance at the start of the current phase. Every
            limit is expressed relative to this value.
        current_phase: Active challenge phase.
        trades: Historical trades, closed and open.
        open_positions: Live positions with their protective stops.
        as_of: Evaluation instant; defines "today" for daily rules.
    """

    model_config = _ACCOUNT_MODEL_CONFIG

    account_id: str | None = None
    starting_balance: float = Field(
        validation_alias=AliasChoices(
            "starting_balance", "startingBalance", "startBalance", "initialBalance"
        )
    )
    current_phase: Phase = Field(
        validation_alias=AliasChoices("current_phase", "currentPhase", "phase")
    )
    trades: tuple[Trade, ...] = ()
    open_positions: tuple[OpenPosition, ...] = Field(
        default=(),
        validation_alias=AliasChoices("open_positions", "openPositions"),
    )
    as_of: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        validation_alias=AliasChoices("as_of", "asOf"),
    )

    @field_validator("current_phase", mode="before")
    @classmethod
    def normalize_phase(cls, value: Any) -> Any:
        """Accept lower-case phase names."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("as_of")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Interpret a naive evaluation instant as UTC."""
        return _as_utc(value)

    @property
    def closed_trades(self) -> list[Trade]:
        """Trades with a close time."""
        return [trade for trade in self.trades if trade.is_closed]

    @property
    def open_trades(self) -> list[Trade]:
        """Trades without a close time."""
        return [trade for trade in self.trades if not trade.is_closed]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountSnapshot":
        """
        Build a snapshot from a JSON-compatible dictionary.

        Raises:
            InvalidAccountDataError: If the data does not match the schema
                (unknown phase, malformed trades, missing balance).
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise InvalidAccountDataError(
                "Invalid account snapshot",
                context={
                    "errors": exc.error_count(),
                    "detail": describe_validation_error(exc),
                },
            ) from exc


def require_valid_snapshot(snapshot: AccountSnapshot) -> None:
    """
    Refuse snapshots that would produce meaningless percentages.

    Raises:
        InvalidAccountDataError: If the starting balance is not a positive
            finite number or the phase is not a known Phase.
    """
    balance = snapshot.starting_balance
    if not isinstance(balance, (int, float)) or not math.isfinite(balance):
        raise InvalidAccountDataError(
            "Starting balance must be a finite number",
            context={"starting_balance": balance},
        )
    if balance <= 0:
        raise InvalidAccountDataError(
            "Starting balance must be positive",
            context={"starting_balance": balance},
        )
    if not isinstance(snapshot.current_phase, Phase):
        raise InvalidAccountDataError(
            "Unknown phase",
            context={"phase": snapshot.current_phase},
        )
