"""
SunBill — TNB Domestic Tariff Table
====================================
Static tariff data for the Malaysian domestic tariff plus the lookup helpers
used by the billing engine.

Energy tier:   27.03 sen/kWh (≤1500 kWh), 37.03 sen/kWh (>1500 kWh)
Capacity:       4.55 sen/kWh
Network:       12.85 sen/kWh
Retail:        RM 10.00 / month when usage > 600 kWh
Blended rate:  (energy + capacity + network) / 100  → RM 0.4443 / RM 0.5443
"""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict

# ── Fixed usage boundaries (kWh / month) ──────────────────────────────────────
BASE_USAGE_LIMIT_KWH   = 600     # non-service / service split, AFA + retail gate
ENERGY_TIER_LIMIT_KWH  = 1500    # energy rate tier switch
KWTBB_THRESHOLD_KWH    = 300     # KWTBB levy applies above this
DAYS_PER_MONTH         = 30

# Bill → kWh guess: 1500 kWh × RM 0.443
BILL_TIER_LIMIT_RM     = 664.5


# ── Energy Efficiency Incentive: (min kWh, max kWh, RM/kWh) ─────────────────
# Negative rate = discount. Ranges are disjoint and sorted ascending.
IncentiveBand = Tuple[float, float, float]

INCENTIVE_RATES: Tuple[IncentiveBand, ...] = (
    (1,   200,  -0.25),
    (201, 250,  -0.245),
    (251, 300,  -0.225),
    (301, 350,  -0.21),
    (351, 400,  -0.17),
    (401, 450,  -0.145),
    (451, 500,  -0.12),
    (501, 550,  -0.105),
    (551, 600,  -0.09),
    (601, 650,  -0.075),
    (651, 700,  -0.055),
    (701, 750,  -0.045),
    (751, 800,  -0.04),
    (801, 850,  -0.025),
    (851, 900,  -0.01),
    (901, 1000, -0.005),
)


class Rate(BaseModel):
    """A per-kWh rate tagged with its unit, so sen and RM never mix silently."""

    model_config = ConfigDict(frozen=True)

    value: float
    unit: Literal["sen/kWh", "RM/kWh"] = "RM/kWh"

    @classmethod
    def sen(cls, value: float) -> "Rate":
        return cls(value=value, unit="sen/kWh")

    @classmethod
    def rm(cls, value: float) -> "Rate":
        return cls(value=value, unit="RM/kWh")

    @property
    def rm_per_kwh(self) -> float:
        if self.unit == "sen/kWh":
            return self.value / 100
        return self.value


class TariffSchedule(BaseModel):
    """Immutable tariff configuration injected into every engine call."""

    model_config = ConfigDict(frozen=True)

    energy_low: Rate          = Rate.sen(27.03)
    energy_high: Rate         = Rate.sen(37.03)
    capacity: Rate            = Rate.sen(4.55)
    network: Rate             = Rate.sen(12.85)
    retail_surcharge_rm: float = 10.00
    kwtbb_rate: float         = 0.016    # fraction, not percent
    sst_rate: float           = 0.08
    retail_low: Rate          = Rate.rm(0.4443)
    retail_high: Rate         = Rate.rm(0.5443)
    incentive_rates: Tuple[IncentiveBand, ...] = INCENTIVE_RATES


DEFAULT_TARIFF = TariffSchedule()


def lookup_incentive_rate(
    usage_kwh: float,
    table: Tuple[IncentiveBand, ...] = INCENTIVE_RATES,
) -> float:
    """
    Return the incentive rate (RM/kWh) for a month's total usage.

    Usage outside every range (≤0, >1000, or a fractional gap such as 200.5)
    resolves to 0.0, not an error.
    """
    for low, high, rate in table:
        if low <= usage_kwh <= high:
            return rate
    return 0.0


def energy_rate(usage_kwh: float, tariff: TariffSchedule = DEFAULT_TARIFF) -> Rate:
    """Energy tier is chosen on total usage and applies to every kWh."""
    if usage_kwh > ENERGY_TIER_LIMIT_KWH:
        return tariff.energy_high
    return tariff.energy_low


def blended_retail_rate(
    monthly_usage_kwh: float,
    tariff: TariffSchedule = DEFAULT_TARIFF,
) -> float:
    """Simplified all-in RM/kWh used for quick bill ↔ kWh conversions."""
    if monthly_usage_kwh > ENERGY_TIER_LIMIT_KWH:
        return tariff.retail_high.rm_per_kwh
    return tariff.retail_low.rm_per_kwh


def retail_rate_for_bill(bill_rm: float, tariff: TariffSchedule = DEFAULT_TARIFF) -> float:
    """Guess the blended tier from a bill amount when kWh is unknown."""
    if bill_rm <= BILL_TIER_LIMIT_RM:
        return tariff.retail_low.rm_per_kwh
    return tariff.retail_high.rm_per_kwh


def tariff_as_dict(tariff: TariffSchedule = DEFAULT_TARIFF) -> dict:
    """Serialisable view of the schedule and incentive table for the API."""
    return {
        "energy_low_sen":       tariff.energy_low.value,
        "energy_high_sen":      tariff.energy_high.value,
        "capacity_sen":         tariff.capacity.value,
        "network_sen":          tariff.network.value,
        "retail_surcharge_rm":  tariff.retail_surcharge_rm,
        "kwtbb_percent":        tariff.kwtbb_rate * 100,
        "sst_percent":          tariff.sst_rate * 100,
        "retail_low_rm":        tariff.retail_low.rm_per_kwh,
        "retail_high_rm":       tariff.retail_high.rm_per_kwh,
        "base_usage_limit_kwh": BASE_USAGE_LIMIT_KWH,
        "energy_tier_limit_kwh": ENERGY_TIER_LIMIT_KWH,
        "kwtbb_threshold_kwh":  KWTBB_THRESHOLD_KWH,
        "incentive_rates": [
            {"min_kwh": low, "max_kwh": high, "rate_rm": rate}
            for low, high, rate in tariff.incentive_rates
        ],
    }
