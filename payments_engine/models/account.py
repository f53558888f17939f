"""
Account Model

An account is the per-client balance record the engine maintains.

DESIGN DECISION: Accounts are immutable. The engine never edits an
account in place; it computes the replacement and swaps it into its
table only after every precondition of a transaction has passed.
That is what makes each transition all-or-nothing.

`total` is computed, not stored, so `total == available + held`
cannot drift.
"""

from decimal import ROUND_HALF_EVEN, Decimal, localcontext

from pydantic import BaseModel, ConfigDict, Field, computed_field


# u16 client ids, as in the upstream CSV feeds
MAX_CLIENT_ID = 65535

ZERO = Decimal("0")

# Significant digits kept for balances; results that need more are refused
LEDGER_PRECISION = 64


def format_amount(value: Decimal, precision: int) -> str:
    """
    Render an amount with a fixed number of fractional digits.

    Uses round-half-even so repeated cycles do not bias totals.
    """
    with localcontext() as ctx:
        ctx.prec = max(value.adjusted(), 0) + precision + 2
        quantum = Decimal(1).scaleb(-precision)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_EVEN)
    # -0.0000 is not a meaningful balance
    if rounded.is_zero():
        rounded = abs(rounded)
    return f"{rounded:f}"


class Account(BaseModel):
    """
    Balance state of a single client.

    available: funds usable for withdrawal
    held:      funds frozen pending dispute resolution
    total:     available + held (computed)
    locked:    frozen after a chargeback, for the rest of the run
    """
    model_config = ConfigDict(frozen=True)

    client: int = Field(
        ...,
        ge=1,
        le=MAX_CLIENT_ID,
        description="Client/account identifier"
    )
    available: Decimal = Field(
        default=ZERO,
        description="Funds available for withdrawal"
    )
    held: Decimal = Field(
        default=ZERO,
        description="Funds held by open disputes"
    )
    locked: bool = Field(
        default=False,
        description="Whether the account is frozen"
    )

    @computed_field
    @property
    def total(self) -> Decimal:
        # Keeps the caller's traps, so the engine can insist on an exact sum
        with localcontext() as ctx:
            ctx.prec = LEDGER_PRECISION
            return self.available + self.held

    @classmethod
    def open(cls, client: int) -> "Account":
        """Create a fresh, unlocked account with zero balances."""
        return cls(client=client)

    def to_csv_row(self, precision: int = 4) -> list[str]:
        """
        Convert to a row for the account CSV.

        Returns columns in order:
        [client, available, held, total, locked]
        """
        return [
            str(self.client),
            format_amount(self.available, precision),
            format_amount(self.held, precision),
            format_amount(self.total, precision),
            "true" if self.locked else "false",
        ]


CSV_HEADER = ["client", "available", "held", "total", "locked"]
