"""
SunBill — ROI Estimator
=======================
Payback period of a PV system from its selling price and a monthly saving.

  annual = monthly × 12
  years  = selling price / annual
  months = years × 12

A saving of zero or less never recovers the cost: years and months are
math.inf and pays_back is False, never NaN.
"""

import math
import logging

from models import PaybackEstimate

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


def estimate_payback(capital_cost_rm: float, monthly_savings_rm: float) -> PaybackEstimate:
    annual_savings = monthly_savings_rm * MONTHS_PER_YEAR

    if annual_savings > 0:
        years = capital_cost_rm / annual_savings
        months = years * MONTHS_PER_YEAR
        pays_back = True
    else:
        logger.debug(f"No payback: monthly saving RM {monthly_savings_rm:.2f}")
        years = months = math.inf
        pays_back = False

    return PaybackEstimate(
        capital_cost_rm=capital_cost_rm,
        monthly_savings_rm=monthly_savings_rm,
        annual_savings_rm=annual_savings,
        years=years,
        months=months,
        pays_back=pays_back,
    )
