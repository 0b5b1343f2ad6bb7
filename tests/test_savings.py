import pytest

from billing import calculate_bill
from savings import calculate_generation_value, calculate_saving_value, calculate_solar_savings
from tariff import Rate, TariffSchedule


class TestSolarSavings:

    def test_full_self_consumption_no_battery(self):
        result = calculate_solar_savings(
            monthly_usage_kwh=500,
            monthly_generation_kwh=636.12,
            self_consumption_percent=100,
            export_rate_rm=0.20,
            afa_rate_sen=0,
            battery_storage_kwh=0,
        )
        assert result.self_consumption_kwh == pytest.approx(636.12)
        assert result.exported_kwh == 0
        assert result.bill_with_solar == 0
        assert result.final_bill == 0
        assert result.direct_savings == pytest.approx(164.74)
        assert result.savings_percentage == pytest.approx(100.0)

    def test_partial_self_consumption_with_export(self):
        result = calculate_solar_savings(500, 300, 50, 0.20, 0, 0)

        assert result.self_consumption_kwh == pytest.approx(150.0)
        assert result.exported_kwh == pytest.approx(150.0)
        assert result.export_credit == pytest.approx(30.0)
        expected_direct = calculate_bill(500, 0).total - calculate_bill(350, 0).total
        assert result.direct_savings == pytest.approx(expected_direct)
        assert result.total_savings == pytest.approx(expected_direct + 30.0)
        assert result.final_bill == pytest.approx(calculate_bill(350, 0).total - 30.0)

    def test_battery_savings_use_low_tier(self):
        result = calculate_solar_savings(2000, 600, 30, 0.20, 0, 135)
        assert result.battery_savings == pytest.approx(135 * 0.4443)
        assert result.exported_kwh == pytest.approx(600 - 180 - 135)

    def test_self_consumption_clamped_to_generation(self):
        result = calculate_solar_savings(500, 100, 150, 0.20, 0, 0)
        assert result.self_consumption_kwh == pytest.approx(100.0)

    def test_export_never_negative(self):
        result = calculate_solar_savings(500, 100, 80, 0.20, 0, 50)
        assert result.exported_kwh == 0

    def test_final_bill_never_negative(self):
        result = calculate_solar_savings(200, 2000, 5, 0.50, 0, 0)
        assert result.export_credit > result.bill_with_solar
        assert result.final_bill == 0

    def test_zero_usage_percentage_is_none(self):
        result = calculate_solar_savings(0, 300, 30, 0.20, 0, 0)
        assert result.bill_without_solar == 0
        assert result.savings_percentage is None

    def test_carries_both_bills(self):
        result = calculate_solar_savings(1800, 500, 40, 0.20, 3, 0)
        assert result.bill_details == calculate_bill(1800, 3)
        assert result.after_solar_bill_details == calculate_bill(1600, 3)


class TestSavingValue:

    def test_default_home(self):
        result = calculate_saving_value(
            monthly_usage_kwh=500,
            monthly_generation_kwh=636.12,
            daytime_percent=30,
            export_rate_rm=0.20,
            afa_rate_sen=0,
            battery_storage_kwh=135,
        )
        assert result.bill_after_solar.usage_total == pytest.approx(350.0)
        assert result.total_kwh == pytest.approx(486.12)
        assert result.stored_unit_cost == 0.4443
        assert result.stored_value == pytest.approx(59.9805)
        assert result.exported_kwh == pytest.approx(351.12)
        assert result.exported_value == pytest.approx(70.224)
        assert result.incentive_unit_cost == pytest.approx(-0.21)
        assert result.incentive_value == pytest.approx(-73.7352)
        assert result.generation_value == pytest.approx(56.4693)
        assert result.bill_amount == pytest.approx(26.8457, abs=1e-3)
        assert result.saving_value == pytest.approx(137.8943, abs=1e-3)

    def test_bill_amount_floors_at_zero(self):
        # night-only usage of 1200 kWh sits above the incentive table
        result = calculate_saving_value(2400, 6000, 50, 0.20, 0, 0)
        assert result.incentive_unit_cost == 0
        assert result.bill_amount == 0
        assert result.saving_value == pytest.approx(result.bill_before_solar.total)

    def test_differs_from_atap_savings(self):
        atap = calculate_solar_savings(500, 636.12, 30, 0.20, 0, 135)
        value = calculate_saving_value(500, 636.12, 30, 0.20, 0, 135)
        assert atap.total_savings != pytest.approx(value.saving_value)


class TestGenerationValue:

    def test_default_home(self):
        result = calculate_generation_value(500, 636.12, 30, 0.20)
        assert result.direct_kwh == pytest.approx(150.0)
        assert result.direct_unit_cost == 0.4443
        assert result.direct_value == pytest.approx(66.645)
        assert result.export_kwh == pytest.approx(486.12)
        assert result.export_value == pytest.approx(97.224)
        assert result.total_value == pytest.approx(163.869)

    def test_high_direct_use_switches_tier(self):
        result = calculate_generation_value(4000, 1000, 50, 0.20)
        assert result.direct_unit_cost == 0.5443
        assert result.export_kwh == pytest.approx(-1000.0)


def test_injected_tariff_reaches_both_bills():
    tariff = TariffSchedule(
        energy_low=Rate.sen(30.0),
        retail_low=Rate.rm(0.50),
        incentive_rates=((1, 1000, -0.10),),
    )
    result = calculate_solar_savings(500, 300, 50, 0.20, 0, 100, tariff)

    assert result.bill_details == calculate_bill(500, 0, tariff)
    assert result.after_solar_bill_details.incentive_total == pytest.approx(-35.0)
    assert result.battery_savings == pytest.approx(50.0)
