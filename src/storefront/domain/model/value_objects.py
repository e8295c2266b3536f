"""Value Objects and money helpers shared across the domain.

Monetary values cross the local/remote boundary as integer minor units
(e.g. paise, cents).  Major units are ``Decimal`` and only appear in the
ledger's local fallback subtotal and at presentation time.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from storefront.domain.exceptions import ValidationError

MINOR_PER_MAJOR = 100


# --- Money helpers ------------------------------------------------------------


def to_major(minor: int) -> Decimal:
    """Convert integer minor units to a ``Decimal`` amount in major units."""
    return Decimal(minor) / MINOR_PER_MAJOR


def to_minor(major: Decimal | int | str) -> int:
    """Convert a major-unit amount to integer minor units (half-up)."""
    try:
        amount = Decimal(str(major))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid money amount: {major!r}") from exc
    return int((amount * MINOR_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_minor(minor: int) -> str:
    """Format minor units for display, always with exactly 2 decimals."""
    return format_major(to_major(minor))


def format_major(major: Decimal) -> str:
    return f"{major.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def parse_minor(raw: str | int | None) -> int:
    """Parse a Store-API money string ("5500") into minor units.

    Missing or malformed values count as zero, the way the backend's
    optional totals are treated.
    """
    if raw is None or raw == "":
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        return 0


def parse_major(raw: str | int | float | Decimal | None) -> Decimal:
    """Parse a catalog price string ("15.00") into major units."""
    if raw is None or raw == "":
        return Decimal("0")
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return Decimal("0")


# --- Value Objects ------------------------------------------------------------


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that a cart line never holds zero or negative
    units.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __add__(self, other: int) -> Quantity:
        return Quantity(self.value + other)

    def __str__(self) -> str:
        return str(self.value)
