"""
SunBill — Recompute-All Pipeline
Runs every engine component in dependency order for one set of calculator
inputs:

  Planner → Bill ×2 → Savings (ATAP + Saving Value + Generation Value) → ROI

Any change to any input is handled by calling run_calculation again; the
engine keeps no state between calls.
"""

import logging
from typing import Optional

import config
from models import CalculatorInputs, CalculatorReport
from planner import daily_energy_flow, plan_generation, recommend_system, split_usage
from roi import estimate_payback
from savings import calculate_generation_value, calculate_saving_value, calculate_solar_savings
from tariff import DEFAULT_TARIFF, TariffSchedule

logger = logging.getLogger(__name__)


def run_calculation(
    inputs: CalculatorInputs,
    tariff: TariffSchedule = DEFAULT_TARIFF,
    export_rate_rm: Optional[float] = None,
    target_saving_percent: Optional[float] = None,
) -> CalculatorReport:
    if export_rate_rm is None:
        export_rate_rm = inputs.export_rate_rm if inputs.export_rate_rm is not None else config.EXPORT_RATE_RM
    if target_saving_percent is None:
        target_saving_percent = config.TARGET_SAVING_PERCENT

    # ── Step 1: sizing ────────────────────────────────────────────────────
    usage = split_usage(inputs.monthly_usage_kwh, inputs.daytime_percent)
    recommendation = recommend_system(
        inputs.monthly_usage_kwh, usage.night_daily_kwh, target_saving_percent
    )
    if inputs.use_recommended_sizing:
        inputs = inputs.model_copy(update={
            "panel_count": recommendation.panel_count,
            "battery_units": recommendation.battery_units,
        })

    generation = plan_generation(
        monthly_usage_kwh=inputs.monthly_usage_kwh,
        daytime_percent=inputs.daytime_percent,
        panel_wattage=inputs.panel_wattage,
        panel_count=inputs.panel_count,
        peak_sun_hours=inputs.peak_sun_hours,
        battery_unit_kwh=inputs.battery_unit_kwh,
        battery_units=inputs.battery_units,
        discharge_depth_percent=inputs.discharge_depth_percent,
    )
    flow = daily_energy_flow(
        generation.daily_generation_kwh,
        generation.usage.daytime_daily_kwh,
        generation.stored_solar_daily_kwh,
    )

    # ── Step 2: savings; self-consumption share follows the daytime split ─
    battery_monthly = generation.stored_solar_monthly_kwh
    savings = calculate_solar_savings(
        monthly_usage_kwh=inputs.monthly_usage_kwh,
        monthly_generation_kwh=generation.monthly_generation_kwh,
        self_consumption_percent=inputs.daytime_percent,
        export_rate_rm=export_rate_rm,
        afa_rate_sen=inputs.afa_rate_sen,
        battery_storage_kwh=battery_monthly,
        tariff=tariff,
    )
    saving_value = calculate_saving_value(
        monthly_usage_kwh=inputs.monthly_usage_kwh,
        monthly_generation_kwh=generation.monthly_generation_kwh,
        daytime_percent=inputs.daytime_percent,
        export_rate_rm=export_rate_rm,
        afa_rate_sen=inputs.afa_rate_sen,
        battery_storage_kwh=battery_monthly,
        tariff=tariff,
    )
    generation_value = calculate_generation_value(
        monthly_usage_kwh=inputs.monthly_usage_kwh,
        monthly_generation_kwh=generation.monthly_generation_kwh,
        daytime_percent=inputs.daytime_percent,
        export_rate_rm=export_rate_rm,
        tariff=tariff,
    )

    # ── Step 3: payback on the Saving Value figure ───────────────────────
    payback = estimate_payback(inputs.selling_price_rm, saving_value.saving_value)

    logger.info(
        f"[PIPELINE] usage={inputs.monthly_usage_kwh}kWh panels={inputs.panel_count} "
        f"batt={inputs.battery_units} → ATAP RM {savings.total_savings:.2f}, "
        f"saving value RM {saving_value.saving_value:.2f}, payback {payback.years:.2f}y"
    )

    return CalculatorReport(
        inputs=inputs,
        recommendation=recommendation,
        generation=generation,
        daily_flow=flow,
        savings=savings,
        saving_value=saving_value,
        generation_value=generation_value,
        payback=payback,
    )
