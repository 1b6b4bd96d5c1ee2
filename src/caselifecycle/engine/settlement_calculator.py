"""
Case Lifecycle Settlement Net Calculator

Computes what the client actually receives from a settlement, and whether a
tort economic-loss claim survives the accident benefits deduction.

Deductions run in a fixed order (fee, disbursements, subrogation, SABS
offset) and each step clamps at zero, so the client net is never negative.
"""
from __future__ import annotations

from decimal import (
    MAX_PREC,
    ROUND_HALF_UP,
    Decimal,
    DecimalException,
    InvalidOperation,
    getcontext,
    localcontext,
)
from typing import Union

from ..exceptions import InvalidArgumentError
from ..models import (
    BreakdownLine,
    NetSettlementResult,
    SabsTortInteraction,
    SettlementOffer,
)

Money = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Money, name: str) -> Decimal:
    """Convert to a non-negative Decimal; floats go through str()."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidArgumentError(
            message=f"{name} is not a number",
            details={name: repr(value), "error": str(e)},
        )
    if not amount.is_finite():
        raise InvalidArgumentError(message=f"{name} must be finite", details={name: str(amount)})
    if amount < 0:
        raise InvalidArgumentError(message=f"{name} must be non-negative", details={name: str(amount)})
    return amount


def exact_precision(*amounts: Decimal) -> int:
    """Context precision wide enough to add, subtract and multiply ``amounts`` exactly."""
    digits = 0
    for amount in amounts:
        _, coefficient, exponent = amount.as_tuple()
        digits += len(coefficient) + abs(exponent)
    return min(MAX_PREC, max(getcontext().prec, digits + 4))


def compute_net_settlement(
    gross_amount: Money,
    legal_fee_percent: Money,
    disbursements: Money,
    subrogation: Money = 0,
    sabs_paid: Money = 0,
    pain_and_suffering_applies: bool = True,
    over_threshold: bool = False,
) -> NetSettlementResult:
    """
    Net proceeds to the client.

    Args:
        gross_amount: Settlement amount
        legal_fee_percent: Contingency fee as a fraction in [0, 1]
        disbursements: Recoverable file expenses
        subrogation: OHIP and other subrogated claims
        sabs_paid: Accident benefits already paid, offset against the award
        pain_and_suffering_applies: Accepted; does not change the result
        over_threshold: Accepted; does not change the result

    Raises:
        InvalidArgumentError: Negative amounts, a fee outside [0, 1], or
            amounts beyond the decimal exponent range
    """
    gross = to_money(gross_amount, "gross_amount")
    pct = to_money(legal_fee_percent, "legal_fee_percent")
    if pct > 1:
        raise InvalidArgumentError(
            message="legal_fee_percent must be within [0, 1]",
            details={"legal_fee_percent": str(pct)},
        )
    disb = to_money(disbursements, "disbursements")
    subro = to_money(subrogation, "subrogation")
    sabs = to_money(sabs_paid, "sabs_paid")

    # Every step runs exactly; only the fee is rounded, to cents.
    with localcontext() as ctx:
        ctx.prec = exact_precision(gross, pct, disb, subro, sabs, CENTS)
        try:
            fee = (gross * pct).quantize(CENTS, rounding=ROUND_HALF_UP)
            after_fee = gross - fee
            after_disb = max(ZERO, after_fee - disb)
            after_subro = max(ZERO, after_disb - subro)
            net = max(ZERO, after_subro - sabs)

            disb_deducted = after_fee - after_disb
            subro_deducted = after_disb - after_subro
            sabs_deducted = after_subro - net

            fee_pct_label = (pct * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
            breakdown = (
                BreakdownLine("Gross Settlement", gross),
                BreakdownLine(f"Legal Fee ({fee_pct_label}%)", -fee),
                BreakdownLine("Disbursements", -disb_deducted),
                BreakdownLine("Subrogation (OHIP, etc.)", -subro_deducted),
                BreakdownLine("SABS Deduction", -sabs_deducted),
                BreakdownLine("Net to Client", net),
            )
        except DecimalException as e:
            raise InvalidArgumentError(
                message="gross_amount is out of range for settlement arithmetic",
                details={"gross_amount": str(gross), "error": repr(e)},
            )

    return NetSettlementResult(
        gross_amount=gross,
        net_to_client=net,
        fee_amount=fee,
        disbursements_deducted=disb_deducted,
        subrogation_deducted=subro_deducted,
        sabs_offset_deducted=sabs_deducted,
        breakdown=breakdown,
    )


def compute_offer_net(
    offer: SettlementOffer,
    legal_fee_percent: Money,
    disbursements: Money,
    subrogation: Money = 0,
    sabs_paid: Money = 0,
    pain_and_suffering_applies: bool = True,
    over_threshold: bool = False,
) -> NetSettlementResult:
    """Net to client if ``offer`` were accepted."""
    return compute_net_settlement(
        offer.amount,
        legal_fee_percent,
        disbursements,
        subrogation=subrogation,
        sabs_paid=sabs_paid,
        pain_and_suffering_applies=pain_and_suffering_applies,
        over_threshold=over_threshold,
    )


def compare_sabs_tort_interaction(
    tort_income_loss: Money,
    sabs_irb_paid: Money,
    tort_future_loss: Money = 0,
    sabs_future_irb: Money = 0,
) -> SabsTortInteraction:
    """
    Tort economic loss left after deducting income replacement benefits.

    A warning is attached when IRB already paid exceeds the past income
    loss claimed in tort.
    """
    income_loss = to_money(tort_income_loss, "tort_income_loss")
    irb_paid = to_money(sabs_irb_paid, "sabs_irb_paid")
    future_loss = to_money(tort_future_loss, "tort_future_loss")
    future_irb = to_money(sabs_future_irb, "sabs_future_irb")

    with localcontext() as ctx:
        ctx.prec = exact_precision(income_loss, irb_paid, future_loss, future_irb)
        past_loss_value = max(ZERO, income_loss - irb_paid)
        future_loss_value = max(ZERO, future_loss - future_irb)

    warning = None
    if irb_paid > income_loss:
        warning = (
            f"SABS IRB deduction (${irb_paid:,.2f}) exceeds estimated tort past income "
            f"loss (${income_loss:,.2f}). Tort claim has zero economic value for past loss."
        )

    return SabsTortInteraction(
        past_loss_value=past_loss_value,
        future_loss_value=future_loss_value,
        warning=warning,
    )
