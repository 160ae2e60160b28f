"""Fixed-installment amortization."""

from decimal import Decimal, DecimalException, localcontext

from loan_tracker.engine.validation import as_decimal
from loan_tracker.exceptions import ValidationError

MONTHS_PER_YEAR = 12

# Digits carried while evaluating (1 + r)**n
WORKING_PRECISION = 60


def compute_monthly_payment(
    principal: Decimal,
    annual_rate: Decimal,
    term_months: int,
) -> Decimal:
    """Compute the fixed monthly installment of a loan.

    Uses the standard annuity formula
    ``P * r * (1 + r)**n / ((1 + r)**n - 1)`` with ``r = annual_rate / 12``.
    No rounding to cents is applied; the result carries the precision of
    the current decimal context.

    Parameters
    ----------
    principal : Decimal
        Amount borrowed (> 0).
    annual_rate : Decimal
        Annual interest rate (>= 0), e.g. ``Decimal("0.05")`` for 5%.
    term_months : int
        Number of monthly installments (>= 1).

    Returns
    -------
    Decimal
        Unrounded monthly payment.

    Raises
    ------
    ValidationError
        If the term is too long for the payment to be representable.
    """
    principal = as_decimal(principal, "principal")
    annual_rate = as_decimal(annual_rate, "annual_rate")

    # The annuity formula degenerates to 0/0 at r = 0
    if annual_rate == 0:
        return principal / term_months

    try:
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, WORKING_PRECISION)
            monthly_rate = annual_rate / MONTHS_PER_YEAR
            growth = (1 + monthly_rate) ** term_months
            if growth == 1:
                # Rate too small to register even at working precision
                payment = principal / term_months
            else:
                payment = principal * monthly_rate * growth / (growth - 1)
    except DecimalException as exc:
        raise ValidationError("term_months", term_months, "is too long to amortize") from exc

    # Round back to the caller's context
    return +payment


def total_repayment(monthly_payment: Decimal, term_months: int) -> Decimal:
    """Total paid over the life of the loan (principal plus interest)."""
    return monthly_payment * term_months
