# agency_payroll/schemas/common.py
from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

from agency_payroll.utils.decimal_math import quantize_money

# monetary values leave the API as decimal strings, never floats
Money = Annotated[Decimal, PlainSerializer(quantize_money, return_type=str)]
