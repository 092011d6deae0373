# agency_payroll/utils/decimal_math.py
"""
Exact decimal arithmetic over monetary values.

Amounts travel through the engine as decimal strings ("1234.50"). Every sum,
difference and quotient is computed with :class:`decimal.Decimal` and handed
back as a plain (never exponent-notation) string, so repeated aggregation
carries no binary floating-point drift.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Iterable, Union

from agency_payroll.errors import InvalidAmount

Amount = Union[str, int, float, Decimal]

CENTS = Decimal("0.01")
PRECISION = 28


def to_decimal(value: Amount) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidAmount("Invalid amount: empty string")
        try:
            d = Decimal(text)
        except InvalidOperation:
            raise InvalidAmount(f"Invalid amount: {value!r}") from None
    else:
        raise InvalidAmount(f"Invalid amount: {value!r}")

    if not d.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")
    return d


def to_str(value: Decimal) -> str:
    # format "f" keeps results like Decimal("2E+2") readable as "200"
    return format(value, "f")


def add(*amounts: Amount) -> str:
    return sum_amounts(amounts)


def sum_amounts(amounts: Iterable[Amount]) -> str:
    """Sum a sequence of amounts. An empty sequence sums to "0"."""
    total = Decimal(0)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        for a in amounts:
            total += to_decimal(a)
    return to_str(total)


def subtract(minuend: Amount, *subtrahends: Amount) -> str:
    result = to_decimal(minuend)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        for s in subtrahends:
            result -= to_decimal(s)
    return to_str(result)


def multiply(*factors: Amount) -> str:
    result = Decimal(1)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        for f in factors:
            result *= to_decimal(f)
    return to_str(result)


def divide(dividend: Amount, divisor: Amount) -> str:
    d = to_decimal(divisor)
    if d == 0:
        raise InvalidAmount("Division by zero")
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return to_str(to_decimal(dividend) / d)


def quantize_money(value: Amount) -> str:
    """Round half-up to two places: quantize_money("333.3333") -> "333.33"."""
    return to_str(to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def is_negative(value: Amount) -> bool:
    return to_decimal(value) < 0


def max_amount(*amounts: Amount) -> str:
    return to_str(max(to_decimal(a) for a in amounts))


# ---------------------------------------------------------------------
# Currency presentation
# ---------------------------------------------------------------------
def format_currency(amount: Amount, prefix: str = "BDT") -> str:
    """
    Render an amount for display: format_currency("1234.5") -> "BDT 1,234.50".
    Pass prefix="" for the bare figure.
    """
    rounded = to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    formatted = f"{rounded:,.2f}"
    return f"{prefix} {formatted}" if prefix else formatted


def parse_currency(value: Amount) -> str:
    """Inverse of format_currency: strips the BDT prefix and thousands separators."""
    if isinstance(value, str):
        cleaned = value.upper().replace("BDT", "").replace(",", "").strip()
        return to_str(to_decimal(cleaned))
    return to_str(to_decimal(value))


def line_total(quantity: Amount, rate: Amount) -> str:
    return quantize_money(multiply(quantity, rate))
