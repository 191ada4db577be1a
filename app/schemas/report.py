from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from app.models.client import Client
from app.models.transaction import Transaction


class DebtReport(BaseModel):
    """Clients of one partner that owe money."""
    partner_id: str
    partner_name: str
    generated_at: datetime
    clients: List[Client]
    total_debt: Decimal


class PeriodStatus(BaseModel):
    partner_id: str
    partner_name: str
    status: Literal["Not Started", "Active", "Expired"]
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AdminDashboard(BaseModel):
    partner_count: int
    client_count: int
    transaction_count: int
    flagged_count: int
    total_transaction_amount: Decimal
    total_debt: Decimal
    recent_transactions: List[Transaction]


class MemberDashboard(BaseModel):
    transaction_count: int
    total_amount: Decimal
    recent_transactions: List[Transaction]
    eligible_clients: List[Client]


class SummaryRequest(BaseModel):
    """CSV transaction report to summarize."""
    report: str = Field(..., min_length=10)


class SummaryResponse(BaseModel):
    summary: str
