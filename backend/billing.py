"""
SunBill — Bill Calculation Engine
=================================
Itemised TNB domestic bill for one month of grid usage.

  base   = min(usage, 600)          → "non-service" column
  excess = max(usage − 600, 0)      → "service" column (retail + SST apply)

The energy tier is picked on total usage and applied uniformly to both
columns. AFA is gated on usage > 600 kWh. KWTBB (1.6 %) applies above 300 kWh
to energy + capacity + network + incentive; SST (8 %) applies to the service
subtotal only. Both levies are rounded half-up to the sen.
"""

import math
import logging

from models import BillBreakdown
from tariff import (
    BASE_USAGE_LIMIT_KWH,
    DEFAULT_TARIFF,
    KWTBB_THRESHOLD_KWH,
    Rate,
    TariffSchedule,
    energy_rate,
    lookup_incentive_rate,
)

logger = logging.getLogger(__name__)


def _round_sen(amount: float) -> float:
    """Nearest sen, ties rounded up."""
    return math.floor(amount * 100 + 0.5) / 100


def calculate_bill(
    usage_kwh: float,
    afa_rate_sen: float,
    tariff: TariffSchedule = DEFAULT_TARIFF,
) -> BillBreakdown:
    """
    Compute the full itemised bill.

    No validation is done here: the caller supplies numeric kWh and an AFA rate
    in sen/kWh. Zero usage yields an all-zero bill.
    """
    base = min(usage_kwh, BASE_USAGE_LIMIT_KWH)
    excess = max(usage_kwh - BASE_USAGE_LIMIT_KWH, 0)

    # ── Energy / capacity / network ───────────────────────────────────────
    energy_rm = energy_rate(usage_kwh, tariff).rm_per_kwh
    capacity_rm = tariff.capacity.rm_per_kwh
    network_rm = tariff.network.rm_per_kwh

    base_energy = base * energy_rm
    excess_energy = excess * energy_rm
    base_capacity = base * capacity_rm
    excess_capacity = excess * capacity_rm
    base_network = base * network_rm
    excess_network = excess * network_rm

    # ── Energy efficiency incentive (looked up on total usage) ────────────
    incentive_rate = lookup_incentive_rate(usage_kwh, tariff.incentive_rates)
    base_incentive = base * incentive_rate
    excess_incentive = excess * incentive_rate

    retail = tariff.retail_surcharge_rm if excess > 0 else 0.0

    # ── AFA: gated on total usage, not on the excess column ──────────────
    base_afa = excess_afa = 0.0
    if usage_kwh > BASE_USAGE_LIMIT_KWH:
        afa_rm = Rate.sen(afa_rate_sen).rm_per_kwh
        base_afa = base * afa_rm
        excess_afa = excess * afa_rm

    non_service = base_energy + base_capacity + base_network + base_incentive + base_afa
    service = (
        excess_energy + excess_capacity + excess_network
        + retail + excess_incentive + excess_afa
    )
    current_charge = non_service + service

    kwtbb = 0.0
    if usage_kwh > KWTBB_THRESHOLD_KWH:
        kwtbb_base = (
            (base_energy + excess_energy)
            + (base_capacity + excess_capacity)
            + (base_network + excess_network)
            + (base_incentive + excess_incentive)
        )
        kwtbb = _round_sen(kwtbb_base * tariff.kwtbb_rate)

    sst = 0.0
    if excess > 0:
        sst = _round_sen(service * tariff.sst_rate)

    total = current_charge + kwtbb + sst
    logger.debug(f"Bill usage={usage_kwh}kWh afa={afa_rate_sen}sen → RM {total:.2f}")

    return BillBreakdown(
        usage_non_service=base,
        usage_service=excess,
        usage_total=usage_kwh,
        energy_non_service=base_energy,
        energy_service=excess_energy,
        energy_total=base_energy + excess_energy,
        afa_non_service=base_afa,
        afa_service=excess_afa,
        afa_total=base_afa + excess_afa,
        capacity_non_service=base_capacity,
        capacity_service=excess_capacity,
        capacity_total=base_capacity + excess_capacity,
        network_non_service=base_network,
        network_service=excess_network,
        network_total=base_network + excess_network,
        retail_service=retail,
        incentive_non_service=base_incentive,
        incentive_service=excess_incentive,
        incentive_total=base_incentive + excess_incentive,
        usage_charge_non_service=non_service,
        usage_charge_service=service,
        usage_charge_total=current_charge,
        service_tax=sst,
        kwtbb=kwtbb,
        total=total,
    )


def incentive_unit_cost(bill: BillBreakdown) -> float:
    """Effective incentive RM/kWh of a bill; 0 when there is no usage."""
    if bill.usage_total > 0:
        return bill.incentive_total / bill.usage_total
    return 0.0
