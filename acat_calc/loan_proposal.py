"""Loan proposal figures derived from a client ACAT.

A loan proposal copies the client's cost, revenue and cash-flow figures
from the client ACAT and prices the proposed loan with the loan product's
charges. Each charge is a percentage of the loan amount plus a fixed amount.
Deductibles and cost-of-loan items (interest, fees) are both taken off the
proposed amount, which leaves the repayable figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .data_models import ClientACAT
from .errors import PreconditionError


@dataclass
class LoanCharge:
    """A deductible or cost-of-loan line of a loan product."""

    item: str
    percent: float = 0.0
    fixed_amount: float = 0.0

    def amount_for(self, principal: float) -> float:
        return principal * self.percent / 100 + self.fixed_amount


@dataclass
class LoanProduct:
    name: str
    maximum_loan_amount: float
    deductibles: List[LoanCharge] = field(default_factory=list)
    cost_of_loan: List[LoanCharge] = field(default_factory=list)
    currency: str = ""


@dataclass
class LoanDetail:
    max_amount: float = 0.0
    total_deductibles: float = 0.0
    total_cost_of_loan: float = 0.0
    deductibles: List[LoanCharge] = field(default_factory=list)
    cost_of_loan: List[LoanCharge] = field(default_factory=list)


@dataclass
class LoanProposal:
    """Loan proposal of a client, with figures copied from the client ACAT."""

    client: str
    client_acat: str
    total_cost: float
    total_revenue: float
    net_cash_flow: Dict[str, float]
    cumulative_cash_flow: Dict[str, float]
    loan_requested: float
    loan_proposed: float
    loan_detail: LoanDetail
    repayable: float
    status: str = "new"


def build_loan_proposal(
    client: ClientACAT,
    product: LoanProduct,
    loan_requested: float,
    loan_proposed: Optional[float] = None,
) -> LoanProposal:
    """Build the loan proposal for ``client`` under ``product``.

    Parameters
    ----------
    client: ClientACAT
        The client ACAT, with totals already refreshed.
    product: LoanProduct
        The loan product the client applies for.
    loan_requested: float
        Amount the client asked for.
    loan_proposed: float, optional
        Amount the officer proposes. Defaults to the requested amount capped
        at the product's maximum.

    Raises
    ------
    PreconditionError
        If an amount is negative.
    """
    if loan_requested < 0:
        raise PreconditionError("Requested loan amount cannot be negative")
    if loan_proposed is None:
        loan_proposed = min(loan_requested, product.maximum_loan_amount)
    if loan_proposed < 0:
        raise PreconditionError("Proposed loan amount cannot be negative")

    detail = LoanDetail(
        max_amount=product.maximum_loan_amount,
        total_deductibles=sum(c.amount_for(loan_proposed) for c in product.deductibles),
        total_cost_of_loan=sum(c.amount_for(loan_proposed) for c in product.cost_of_loan),
        deductibles=list(product.deductibles),
        cost_of_loan=list(product.cost_of_loan),
    )
    return LoanProposal(
        client=client.client,
        client_acat=client.id,
        total_cost=client.total_cost,
        total_revenue=client.total_revenue,
        net_cash_flow=dict(client.net_cash_flow),
        cumulative_cash_flow=dict(client.cumulative_cash_flow),
        loan_requested=loan_requested,
        loan_proposed=loan_proposed,
        loan_detail=detail,
        repayable=loan_proposed - (detail.total_deductibles + detail.total_cost_of_loan),
    )
