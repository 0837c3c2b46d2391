"""
Contracting capacity ("K") — the default capacity source.

    K = (working capital + equity) * liquidity index * (1 - indebtedness index)

floored at 0, or None when it does not come out as a finite number.
The analyzer only needs *a* callable with this contract
(indicators in, currency amount or None out), so callers holding an
official K figure can pass their own source instead.
"""

import math
from typing import Callable, Optional

from procurement.models import FinancialIndicators

CapacitySource = Callable[[Optional[FinancialIndicators]], Optional[float]]


def contracting_capacity(indicators: Optional[FinancialIndicators]) -> Optional[float]:
    """Return capacity in COP, or None when no indicators are configured."""
    if indicators is None:
        return None

    total_assets = indicators.working_capital + indicators.equity
    k = total_assets * indicators.liquidity_index * (1 - indicators.indebtedness_index)
    if not math.isfinite(k):
        return None
    return max(0.0, k)
