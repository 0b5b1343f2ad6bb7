import pytest
from pydantic import ValidationError

from billing import calculate_bill, incentive_unit_cost
from tariff import Rate, TariffSchedule

ITEMISED_FIELDS = (
    "energy_total", "capacity_total", "network_total", "afa_total",
    "incentive_total", "retail_service", "kwtbb", "service_tax",
)


class TestScenarios:

    def test_500_kwh_no_afa(self):
        bill = calculate_bill(500, 0)

        assert bill.usage_non_service == 500
        assert bill.usage_service == 0
        assert bill.energy_total == pytest.approx(135.15)
        assert bill.capacity_total == pytest.approx(22.75)
        assert bill.network_total == pytest.approx(64.25)
        assert bill.incentive_total == pytest.approx(-60.0)
        assert bill.afa_total == 0
        assert bill.retail_service == 0
        assert bill.usage_charge_total == pytest.approx(162.15)
        assert bill.kwtbb == pytest.approx(2.59)
        assert bill.service_tax == 0
        assert bill.total == pytest.approx(164.74)

    def test_1800_kwh_with_afa(self):
        bill = calculate_bill(1800, 3)

        # high energy tier on both columns
        assert bill.energy_non_service == pytest.approx(600 * 0.3703)
        assert bill.energy_service == pytest.approx(1200 * 0.3703)
        assert bill.capacity_non_service == pytest.approx(27.3)
        assert bill.capacity_service == pytest.approx(54.6)
        assert bill.network_non_service == pytest.approx(77.1)
        assert bill.network_service == pytest.approx(154.2)
        assert bill.afa_non_service == pytest.approx(18.0)
        assert bill.afa_service == pytest.approx(36.0)
        assert bill.incentive_total == 0          # above the incentive table
        assert bill.retail_service == 10.0
        assert bill.usage_charge_non_service == pytest.approx(344.58)
        assert bill.usage_charge_service == pytest.approx(699.16)
        assert bill.kwtbb == pytest.approx(15.68)
        assert bill.service_tax == pytest.approx(55.93)
        assert bill.total == pytest.approx(1115.35)

    def test_afa_ignored_at_600_kwh(self):
        bill = calculate_bill(600, 5)
        assert bill.afa_total == 0
        assert bill.retail_service == 0

    def test_afa_applies_to_base_just_above_600(self):
        bill = calculate_bill(601, 10)
        assert bill.afa_non_service == pytest.approx(60.0)
        assert bill.afa_service == pytest.approx(0.1)
        assert bill.retail_service == 10.0

    def test_kwtbb_threshold(self):
        assert calculate_bill(300, 0).kwtbb == 0
        assert calculate_bill(301, 0).kwtbb > 0


class TestInvariants:

    @pytest.mark.parametrize("usage", [0, 1, 150, 300, 301, 450, 600, 601, 999, 1000, 1500, 1501, 2500])
    def test_total_is_sum_of_items(self, usage):
        bill = calculate_bill(usage, 2.5)
        assert bill.total == bill.usage_charge_total + bill.kwtbb + bill.service_tax
        assert bill.total == pytest.approx(sum(getattr(bill, f) for f in ITEMISED_FIELDS))

    @pytest.mark.parametrize("usage", [0, 100, 300, 301, 599, 600])
    def test_no_service_charges_up_to_600(self, usage):
        bill = calculate_bill(usage, 4)
        assert bill.usage_service == 0
        assert bill.service_tax == 0
        assert bill.retail_service == 0
        if usage <= 300:
            assert bill.kwtbb == 0

    @pytest.mark.parametrize("afa", [0, 3, -2])
    def test_zero_usage_is_free(self, afa):
        assert calculate_bill(0, afa).total == 0

    def test_energy_total_is_monotonic(self):
        previous = -1.0
        for usage in range(0, 3001, 25):
            energy = calculate_bill(usage, 3).energy_total
            assert energy >= previous
            previous = energy

    def test_same_inputs_same_bill(self):
        assert calculate_bill(777, 1.5) == calculate_bill(777, 1.5)

    def test_breakdown_is_frozen(self):
        bill = calculate_bill(500, 0)
        with pytest.raises(ValidationError):
            bill.total = 0


def test_incentive_unit_cost():
    assert incentive_unit_cost(calculate_bill(350, 0)) == pytest.approx(-0.21)
    assert incentive_unit_cost(calculate_bill(0, 0)) == 0.0


class TestLevyRounding:

    @pytest.mark.parametrize("afa, expected", [(0, 82.45), (2.5, 86.2)])
    def test_sst_half_sen_rounds_up(self, afa, expected):
        # service subtotal at 2475 kWh lands exactly on a half sen of SST
        assert calculate_bill(2475, afa).service_tax == expected

    def test_levies_are_whole_sen(self):
        for usage in (301, 777, 1800, 2475):
            bill = calculate_bill(usage, 3)
            assert bill.kwtbb * 100 == pytest.approx(round(bill.kwtbb * 100))
            assert bill.service_tax * 100 == pytest.approx(round(bill.service_tax * 100))


class TestInjectedTariff:

    @pytest.fixture
    def custom(self):
        return TariffSchedule(
            energy_low=Rate.sen(30.0),
            incentive_rates=((1, 1000, -0.10),),
        )

    def test_rates_flow_through(self, custom):
        bill = calculate_bill(500, 0, custom)
        assert bill.energy_total == pytest.approx(150.0)
        assert bill.incentive_total == pytest.approx(-50.0)

    def test_default_tariff_unchanged(self):
        assert calculate_bill(500, 0).incentive_total == pytest.approx(-60.0)

    def test_custom_incentive_band_beyond_default_table(self):
        tariff = TariffSchedule(incentive_rates=((1, 5000, -0.01),))
        assert calculate_bill(1800, 0, tariff).incentive_total == pytest.approx(-18.0)
