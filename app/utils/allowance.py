"""
Allowance arithmetic.

Pure functions over a client's (period_allowance, utilized_amount, debt)
triple. All values are Decimal KES quantized to cents.

- available balance = period_allowance - utilized_amount
- a charge adds its full amount to utilized_amount and the part of it that
  is not covered by the available balance to debt
- reversing a charge takes the amount back out of both, never below zero
- a rollover deducts outstanding debt from the fresh allowance and carries
  any remainder forward as debt
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Quantize to cents; floats go through str to avoid binary noise."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def per_client_allowance(total_shared_amount: Number, sponsored_employees_count: int) -> Decimal:
    """Even split of a partner's shared amount; 0 when there is nobody to split it between."""
    if sponsored_employees_count <= 0:
        return ZERO
    return to_money(to_money(total_shared_amount) / sponsored_employees_count)


def available_balance(period_allowance: Number, utilized_amount: Number) -> Decimal:
    return to_money(period_allowance) - to_money(utilized_amount)


def charge_overage(amount: Number, available: Number) -> Decimal:
    """
    Part of ``amount`` not covered by ``available``.

    Capped at ``amount`` itself: a balance that is already negative (the
    allowance was cut below what had been spent) is not billed to the next
    charge.
    """
    amount = to_money(amount)
    covered = min(max(to_money(available), ZERO), amount)
    return amount - covered


@dataclass(frozen=True)
class Balances:
    period_allowance: Decimal
    utilized_amount: Decimal
    debt: Decimal

    @property
    def available_balance(self) -> Decimal:
        return available_balance(self.period_allowance, self.utilized_amount)


def apply_charge(balances: Balances, amount: Number) -> Balances:
    amount = to_money(amount)
    overage = charge_overage(amount, balances.available_balance)
    return Balances(
        period_allowance=balances.period_allowance,
        utilized_amount=to_money(balances.utilized_amount) + amount,
        debt=to_money(balances.debt) + overage
    )


def reverse_charge(balances: Balances, amount: Number) -> Balances:
    amount = to_money(amount)
    return Balances(
        period_allowance=balances.period_allowance,
        utilized_amount=max(ZERO, to_money(balances.utilized_amount) - amount),
        debt=max(ZERO, to_money(balances.debt) - amount)
    )


def roll_over(previous_debt: Number, new_allowance: Number) -> Balances:
    """
    Balances for the first day of a new period.

    effective = new_allowance - previous_debt
    period_allowance = max(0, effective), debt = max(0, -effective), utilized = 0
    """
    effective = to_money(new_allowance) - max(ZERO, to_money(previous_debt))
    return Balances(
        period_allowance=max(ZERO, effective),
        utilized_amount=ZERO,
        debt=max(ZERO, -effective)
    )
