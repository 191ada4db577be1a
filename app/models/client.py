from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, FrozenSet

from pydantic import Field, computed_field

from app.models.base import MongoModel, _utcnow
from app.utils.allowance import Balances, ZERO, available_balance


class ClientStatus(str, Enum):
    ACTIVE = "active"


class Client(MongoModel):
    """
    Sponsored employee tracked against a period allowance.

    partner_name is a denormalized copy of the partner's name and is
    rewritten whenever the partner is renamed.
    """
    hotel_id: str
    name: str
    partner_id: str
    partner_name: str
    period_allowance: Decimal = ZERO
    utilized_amount: Decimal = ZERO
    debt: Decimal = ZERO
    status: ClientStatus = ClientStatus.ACTIVE
    updated_at: datetime = Field(default_factory=_utcnow)

    derived_fields: ClassVar[FrozenSet[str]] = frozenset({"available_balance"})

    @computed_field
    @property
    def available_balance(self) -> Decimal:
        return available_balance(self.period_allowance, self.utilized_amount)

    @property
    def balances(self) -> Balances:
        return Balances(
            period_allowance=self.period_allowance,
            utilized_amount=self.utilized_amount,
            debt=self.debt
        )
