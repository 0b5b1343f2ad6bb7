"""
SunBill — Solar Savings Engine
==============================
Two independent views of what a PV + battery system is worth per month:

1. ATAP savings:  bill before vs. after self-consumption, plus battery
   shifting valued at the low blended tier, plus export credit at SMP.
2. Saving Value:  generation valued as stored-in-battery + exported +
   energy-efficiency incentive, netted off the night-only bill.

They use different decompositions and generally disagree; both are returned
as named results and neither is derived from the other. The Generation Value
table (no battery) is a third, simpler valuation shown alongside.
"""

import logging

from billing import calculate_bill, incentive_unit_cost
from models import GenerationValueResult, SavingValueResult, SolarSavingsResult
from tariff import DEFAULT_TARIFF, TariffSchedule, blended_retail_rate

logger = logging.getLogger(__name__)


def calculate_solar_savings(
    monthly_usage_kwh: float,
    monthly_generation_kwh: float,
    self_consumption_percent: float,
    export_rate_rm: float,
    afa_rate_sen: float,
    battery_storage_kwh: float,
    tariff: TariffSchedule = DEFAULT_TARIFF,
) -> SolarSavingsResult:
    """
    ATAP savings for one month.

    battery_storage_kwh is the monthly energy shifted through the battery
    (stored kWh/day × 30). Battery savings always use the low blended tier.
    savings_percentage is None when there is no pre-solar bill to compare to.
    """
    self_consumption = monthly_generation_kwh * min(1.0, self_consumption_percent / 100)
    exported = max(0.0, monthly_generation_kwh - self_consumption - battery_storage_kwh)

    bill_without = calculate_bill(monthly_usage_kwh, afa_rate_sen, tariff)
    grid_usage_after_solar = max(0.0, monthly_usage_kwh - self_consumption)
    bill_with = calculate_bill(grid_usage_after_solar, afa_rate_sen, tariff)

    direct_savings = bill_without.total - bill_with.total
    battery_savings = battery_storage_kwh * tariff.retail_low.rm_per_kwh
    export_credit = exported * export_rate_rm
    total_savings = direct_savings + battery_savings + export_credit
    final_bill = max(0.0, bill_with.total - export_credit)

    savings_pct = None
    if bill_without.total != 0:
        savings_pct = total_savings / bill_without.total * 100

    logger.debug(
        f"ATAP: usage={monthly_usage_kwh}kWh gen={monthly_generation_kwh:.1f}kWh "
        f"self={self_consumption:.1f} batt={battery_storage_kwh:.1f} export={exported:.1f} "
        f"→ savings RM {total_savings:.2f}"
    )

    return SolarSavingsResult(
        bill_without_solar=bill_without.total,
        bill_with_solar=bill_with.total,
        final_bill=final_bill,
        monthly_usage_kwh=monthly_usage_kwh,
        monthly_generation_kwh=monthly_generation_kwh,
        self_consumption_kwh=self_consumption,
        self_consumption_percent=self_consumption_percent,
        battery_storage_kwh=battery_storage_kwh,
        exported_kwh=exported,
        direct_savings=direct_savings,
        battery_savings=battery_savings,
        export_credit=export_credit,
        total_savings=total_savings,
        savings_percentage=savings_pct,
        bill_details=bill_without,
        after_solar_bill_details=bill_with,
    )


def calculate_saving_value(
    monthly_usage_kwh: float,
    monthly_generation_kwh: float,
    daytime_percent: float,
    export_rate_rm: float,
    afa_rate_sen: float,
    battery_storage_kwh: float,
    tariff: TariffSchedule = DEFAULT_TARIFF,
) -> SavingValueResult:
    """
    Saving Value table.

    The after-solar bill assumes all daytime usage is met by solar, leaving
    only night usage on the grid. Surplus generation is valued three ways:
    energy kept in the battery (blended rate of the stored kWh), export at
    the SMP rate, and the after-solar bill's incentive rate applied to the
    exported kWh.
    """
    daytime_fraction = daytime_percent / 100

    bill_before = calculate_bill(monthly_usage_kwh, afa_rate_sen, tariff)
    bill_after = calculate_bill(monthly_usage_kwh * (1 - daytime_fraction), afa_rate_sen, tariff)

    total_kwh = monthly_generation_kwh - monthly_usage_kwh * daytime_fraction

    stored_unit_cost = blended_retail_rate(battery_storage_kwh, tariff)
    stored_value = battery_storage_kwh * stored_unit_cost

    exported_kwh = max(0.0, total_kwh - battery_storage_kwh)
    exported_value = exported_kwh * export_rate_rm

    unit_incentive = incentive_unit_cost(bill_after)
    incentive_value = exported_kwh * unit_incentive

    generation_value = stored_value + exported_value + incentive_value
    bill_amount = max(0.0, bill_after.total - generation_value)

    return SavingValueResult(
        total_kwh=total_kwh,
        stored_kwh=battery_storage_kwh,
        stored_unit_cost=stored_unit_cost,
        stored_value=stored_value,
        exported_kwh=exported_kwh,
        export_unit_cost=export_rate_rm,
        exported_value=exported_value,
        incentive_kwh=exported_kwh,
        incentive_unit_cost=unit_incentive,
        incentive_value=incentive_value,
        generation_value=generation_value,
        bill_amount=bill_amount,
        saving_value=bill_before.total - bill_amount,
        bill_before_solar=bill_before,
        bill_after_solar=bill_after,
    )


def calculate_generation_value(
    monthly_usage_kwh: float,
    monthly_generation_kwh: float,
    daytime_percent: float,
    export_rate_rm: float,
    tariff: TariffSchedule = DEFAULT_TARIFF,
) -> GenerationValueResult:
    """Generation value without a battery: direct daytime use + export."""
    direct_kwh = monthly_usage_kwh * daytime_percent / 100
    direct_unit_cost = blended_retail_rate(direct_kwh, tariff)
    direct_value = direct_kwh * direct_unit_cost

    # Not clamped: negative when daytime usage exceeds generation.
    export_kwh = monthly_generation_kwh - direct_kwh
    export_value = export_kwh * export_rate_rm

    return GenerationValueResult(
        total_kwh=monthly_generation_kwh,
        direct_kwh=direct_kwh,
        direct_unit_cost=direct_unit_cost,
        direct_value=direct_value,
        export_kwh=export_kwh,
        export_unit_cost=export_rate_rm,
        export_value=export_value,
        total_value=direct_value + export_value,
    )
