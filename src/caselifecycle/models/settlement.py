"""
Case Lifecycle Settlement Models

All money values are Decimal (CAD).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import MAX_PREC, Decimal, getcontext, localcontext
from typing import Any, Optional

from .enums import OfferKind, OfferStatus


@dataclass(frozen=True)
class SettlementOffer:
    """An offer exchanged during negotiation."""
    amount: Decimal
    kind: OfferKind
    date: date
    status: OfferStatus = OfferStatus.OPEN


@dataclass(frozen=True)
class BreakdownLine:
    """One line of a settlement statement; deductions are negative."""
    label: str
    amount: Decimal


@dataclass(frozen=True)
class NetSettlementResult:
    """
    Result of a net settlement computation.

    The ``*_deducted`` figures are what was actually removed after clamping
    at zero, so they always reconcile:
    gross - fee - disbursements - subrogation - sabs_offset == net.
    """
    gross_amount: Decimal
    net_to_client: Decimal
    fee_amount: Decimal
    disbursements_deducted: Decimal
    subrogation_deducted: Decimal
    sabs_offset_deducted: Decimal
    breakdown: tuple[BreakdownLine, ...] = field(default_factory=tuple)

    @property
    def total_deductions(self) -> Decimal:
        parts = (
            self.fee_amount,
            self.disbursements_deducted,
            self.subrogation_deducted,
            self.sabs_offset_deducted,
        )
        digits = sum(len(p.as_tuple().digits) + abs(p.as_tuple().exponent) for p in parts)
        with localcontext() as ctx:
            ctx.prec = min(MAX_PREC, max(getcontext().prec, digits + 4))
            return sum(parts, Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "gross_amount": str(self.gross_amount),
            "net_to_client": str(self.net_to_client),
            "fee_amount": str(self.fee_amount),
            "disbursements_deducted": str(self.disbursements_deducted),
            "subrogation_deducted": str(self.subrogation_deducted),
            "sabs_offset_deducted": str(self.sabs_offset_deducted),
            "breakdown": [
                {"label": line.label, "amount": str(line.amount)}
                for line in self.breakdown
            ],
        }


@dataclass(frozen=True)
class SabsTortInteraction:
    """Whether a tort economic-loss claim survives the SABS deduction."""
    past_loss_value: Decimal
    future_loss_value: Decimal
    warning: Optional[str] = None

    @property
    def has_economic_value(self) -> bool:
        return self.past_loss_value + self.future_loss_value > 0
