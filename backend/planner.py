"""
SunBill — Generation Planner
Sizes the PV array and battery bank and splits a month's usage into the
daytime share (covered directly by solar) and the night share (covered by the
battery or the grid).
"""

import math
import logging

from models import DailyEnergyFlow, GenerationFlow, SystemRecommendation, UsageSplit
from tariff import (
    DAYS_PER_MONTH,
    DEFAULT_TARIFF,
    TariffSchedule,
    blended_retail_rate,
    retail_rate_for_bill,
)

logger = logging.getLogger(__name__)

# Share of daily generation assumed to be used on-site as it is produced
DIRECT_SELF_USE_FRACTION = 0.30

# Sizing heuristics: 1 panel per 50 kWh/month gives ~80 % savings,
# 1 battery unit per 7 kWh of nightly usage, roof limit of 38 panels.
KWH_PER_PANEL_MONTH   = 50
KWH_PER_BATTERY_UNIT  = 7
BASELINE_SAVING_PCT   = 80
MAX_PANELS            = 38


def split_usage(monthly_usage_kwh: float, daytime_percent: float) -> UsageSplit:
    """Split monthly usage into daytime / night, daily and monthly (30-day month)."""
    night_percent = 100 - daytime_percent
    daily = monthly_usage_kwh / DAYS_PER_MONTH
    return UsageSplit(
        daily_usage_kwh=daily,
        daytime_percent=daytime_percent,
        night_percent=night_percent,
        daytime_daily_kwh=daily * daytime_percent / 100,
        night_daily_kwh=daily * night_percent / 100,
        daytime_monthly_kwh=monthly_usage_kwh * daytime_percent / 100,
        night_monthly_kwh=monthly_usage_kwh * night_percent / 100,
    )


def night_coverage_percent(usable_capacity_kwh: float, night_usage_kwh: float) -> float:
    """Share of nightly usage the battery can cover, capped at 100 %."""
    if night_usage_kwh <= 0:
        return 100.0 if usable_capacity_kwh > 0 else 0.0
    return min(usable_capacity_kwh / night_usage_kwh * 100, 100.0)


def plan_generation(
    monthly_usage_kwh: float,
    daytime_percent: float,
    panel_wattage: float,
    panel_count: int,
    peak_sun_hours: float,
    battery_unit_kwh: float,
    battery_units: int,
    discharge_depth_percent: float,
) -> GenerationFlow:
    """
    Derive generation and storage quantities from the sizing inputs.

      system kWp   = W × panels / 1000
      daily kWh    = kWp × peak sun hours      (× 30 for the month)
      usable kWh   = unit kWh × units × DoD %
      stored kWh/d = min(usable, night usage per day)
    """
    system_kwp = panel_wattage * panel_count / 1000
    daily_generation = system_kwp * peak_sun_hours

    usage = split_usage(monthly_usage_kwh, daytime_percent)

    total_capacity = battery_unit_kwh * battery_units
    usable_capacity = total_capacity * discharge_depth_percent / 100
    stored_daily = min(usable_capacity, usage.night_daily_kwh)

    logger.debug(
        f"Plan: {system_kwp:.2f}kWp → {daily_generation:.2f}kWh/d, "
        f"usable battery {usable_capacity:.2f}kWh, stored {stored_daily:.2f}kWh/d"
    )

    return GenerationFlow(
        system_capacity_kwp=system_kwp,
        daily_generation_kwh=daily_generation,
        monthly_generation_kwh=daily_generation * DAYS_PER_MONTH,
        usage=usage,
        total_battery_capacity_kwh=total_capacity,
        usable_battery_capacity_kwh=usable_capacity,
        night_coverage_percent=night_coverage_percent(usable_capacity, usage.night_daily_kwh),
        stored_solar_daily_kwh=stored_daily,
        stored_solar_monthly_kwh=stored_daily * DAYS_PER_MONTH,
    )


def daily_energy_flow(
    daily_generation_kwh: float,
    daytime_usage_kwh: float,
    stored_solar_kwh: float,
) -> DailyEnergyFlow:
    """Where one day's generation goes: direct use, then battery, then grid export."""
    self_use = min(daytime_usage_kwh, daily_generation_kwh * DIRECT_SELF_USE_FRACTION)
    remaining = daily_generation_kwh - self_use
    battery = min(remaining, stored_solar_kwh)
    return DailyEnergyFlow(
        generation_kwh=daily_generation_kwh,
        self_use_kwh=self_use,
        battery_kwh=battery,
        export_kwh=remaining - battery,
    )


def recommend_system(
    monthly_usage_kwh: float,
    night_usage_daily_kwh: float,
    target_saving_percent: float = 100,
) -> SystemRecommendation:
    """Panel count and battery units needed to reach a target saving."""
    scale = target_saving_percent / BASELINE_SAVING_PCT
    base_panels = math.ceil(monthly_usage_kwh / KWH_PER_PANEL_MONTH)
    panels = min(math.ceil(base_panels * scale), MAX_PANELS)
    base_units = math.ceil(night_usage_daily_kwh / KWH_PER_BATTERY_UNIT)
    units = math.ceil(base_units * scale)
    return SystemRecommendation(
        target_saving_percent=target_saving_percent,
        panel_count=panels,
        battery_units=units,
    )


def estimate_usage_from_bill(bill_rm: float, tariff: TariffSchedule = DEFAULT_TARIFF) -> float:
    """Rough monthly kWh from a bill amount, rounded to a whole kWh."""
    # half-up
    return float(math.floor(bill_rm / retail_rate_for_bill(bill_rm, tariff) + 0.5))


def estimate_bill_from_usage(usage_kwh: float, tariff: TariffSchedule = DEFAULT_TARIFF) -> float:
    """Rough bill amount from monthly kWh at the blended retail rate."""
    return round(usage_kwh * blended_retail_rate(usage_kwh, tariff), 2)
