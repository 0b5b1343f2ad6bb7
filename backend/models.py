"""
SunBill — Pydantic Data Models
Engine value objects (bill, savings, generation flow, payback) and the
request/response schemas of the HTTP layer.
"""
import math

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional


class _Record(BaseModel):
    """Engine output: created fresh per calculation, immutable once returned."""

    model_config = ConfigDict(frozen=True)


# ── Bill ──────────────────────────────────────────────────────────────────────

class BillBreakdown(_Record):
    usage_non_service: float
    usage_service: float
    usage_total: float

    energy_non_service: float
    energy_service: float
    energy_total: float

    afa_non_service: float
    afa_service: float
    afa_total: float

    capacity_non_service: float
    capacity_service: float
    capacity_total: float

    network_non_service: float
    network_service: float
    network_total: float

    retail_service: float

    incentive_non_service: float
    incentive_service: float
    incentive_total: float

    usage_charge_non_service: float
    usage_charge_service: float
    usage_charge_total: float

    service_tax: float
    kwtbb: float
    total: float


# ── Solar savings (ATAP path) ─────────────────────────────────────────────────

class SolarSavingsResult(_Record):
    bill_without_solar: float
    bill_with_solar: float
    final_bill: float

    monthly_usage_kwh: float
    monthly_generation_kwh: float
    self_consumption_kwh: float
    self_consumption_percent: float
    battery_storage_kwh: float
    exported_kwh: float

    direct_savings: float
    battery_savings: float
    export_credit: float
    total_savings: float
    savings_percentage: Optional[float]   # None when the pre-solar bill is 0

    bill_details: BillBreakdown
    after_solar_bill_details: BillBreakdown


# ── Saving Value table ────────────────────────────────────────────────────────

class SavingValueResult(_Record):
    total_kwh: float

    stored_kwh: float
    stored_unit_cost: float
    stored_value: float

    exported_kwh: float
    export_unit_cost: float
    exported_value: float

    incentive_kwh: float
    incentive_unit_cost: float
    incentive_value: float

    generation_value: float
    bill_amount: float
    saving_value: float

    bill_before_solar: BillBreakdown
    bill_after_solar: BillBreakdown


class GenerationValueResult(_Record):
    total_kwh: float

    direct_kwh: float
    direct_unit_cost: float
    direct_value: float

    export_kwh: float
    export_unit_cost: float
    export_value: float

    total_value: float


# ── Generation planning ───────────────────────────────────────────────────────

class UsageSplit(_Record):
    daily_usage_kwh: float
    daytime_percent: float
    night_percent: float
    daytime_daily_kwh: float
    night_daily_kwh: float
    daytime_monthly_kwh: float
    night_monthly_kwh: float


class GenerationFlow(_Record):
    system_capacity_kwp: float
    daily_generation_kwh: float
    monthly_generation_kwh: float

    usage: UsageSplit

    total_battery_capacity_kwh: float
    usable_battery_capacity_kwh: float
    night_coverage_percent: float
    stored_solar_daily_kwh: float
    stored_solar_monthly_kwh: float


class DailyEnergyFlow(_Record):
    generation_kwh: float
    self_use_kwh: float
    battery_kwh: float
    export_kwh: float


class SystemRecommendation(_Record):
    target_saving_percent: float
    panel_count: int
    battery_units: int


# ── ROI ───────────────────────────────────────────────────────────────────────

class PaybackEstimate(_Record):
    capital_cost_rm: float
    monthly_savings_rm: float
    annual_savings_rm: float
    years: float          # math.inf when savings never recover the cost
    months: float
    pays_back: bool

    @field_serializer("years", "months", when_used="json")
    def _no_payback_as_null(self, value: float) -> Optional[float]:
        return None if math.isinf(value) else value


# ════════════════════════════════════════════════════════════════════════════
# HTTP request / response schemas
# ════════════════════════════════════════════════════════════════════════════

class BillRequest(BaseModel):
    usage_kwh: float = Field(..., ge=0, description="Monthly usage, kWh")
    afa_rate_sen: float = Field(default=0.0, description="AFA, sen/kWh (may be negative)")


class SavingsRequest(BaseModel):
    monthly_usage_kwh: float = Field(..., ge=0)
    monthly_generation_kwh: float = Field(..., ge=0)
    self_consumption_percent: float = Field(default=30.0, ge=0, le=100)
    export_rate_rm: Optional[float] = Field(default=None, ge=0, description="RM/kWh (None = configured SMP rate)")
    afa_rate_sen: float = Field(default=0.0)
    battery_storage_kwh: float = Field(default=0.0, ge=0, description="Monthly kWh shifted via battery")


class PlanRequest(BaseModel):
    monthly_usage_kwh: float = Field(default=500.0, ge=0)
    daytime_percent: float = Field(default=30.0, ge=0, le=100)
    panel_wattage: float = Field(default=620.0, ge=0, description="W per panel")
    panel_count: int = Field(default=10, ge=0)
    peak_sun_hours: float = Field(default=3.42, ge=0)
    battery_unit_kwh: float = Field(default=5.0, ge=0)
    battery_units: int = Field(default=1, ge=0)
    discharge_depth_percent: float = Field(default=90.0, ge=0, le=100)


class ROIRequest(BaseModel):
    capital_cost_rm: float = Field(..., ge=0, description="Selling price of the system, RM")
    monthly_savings_rm: float


class ConversionRequest(BaseModel):
    usage_kwh: Optional[float] = Field(default=None, ge=0)
    bill_rm: Optional[float] = Field(default=None, ge=0)


class ConversionResponse(BaseModel):
    usage_kwh: float
    bill_rm: float
    retail_rate_rm: float


class CalculatorInputs(PlanRequest):
    """Every input of the calculator form; drives the full recompute."""

    afa_rate_sen: float = Field(default=0.0)
    selling_price_rm: float = Field(default=20_000.0, ge=0)
    export_rate_rm: Optional[float] = Field(default=None, ge=0)
    use_recommended_sizing: bool = Field(
        default=False,
        description="Replace panel_count / battery_units with the target-saving recommendation",
    )


class CalculatorReport(BaseModel):
    inputs: CalculatorInputs
    recommendation: SystemRecommendation
    generation: GenerationFlow
    daily_flow: DailyEnergyFlow
    savings: SolarSavingsResult
    saving_value: SavingValueResult
    generation_value: GenerationValueResult
    payback: PaybackEstimate


class HealthResponse(BaseModel):
    status: str
    version: str
    services: dict
