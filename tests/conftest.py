import pytest
from fastapi.testclient import TestClient

from models import CalculatorInputs
from tariff import DEFAULT_TARIFF


@pytest.fixture
def tariff():
    return DEFAULT_TARIFF


@pytest.fixture
def default_inputs():
    # 500 kWh home, 10 × 620 W panels, one 5 kWh battery at 90 % DoD
    return CalculatorInputs(
        monthly_usage_kwh=500,
        daytime_percent=30,
        panel_wattage=620,
        panel_count=10,
        peak_sun_hours=3.42,
        battery_unit_kwh=5,
        battery_units=1,
        discharge_depth_percent=90,
        afa_rate_sen=0,
        selling_price_rm=20_000,
        export_rate_rm=0.20,
    )


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c
