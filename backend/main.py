"""
SunBill — FastAPI Main Application
TNB domestic bill + rooftop solar / battery savings calculator.

The HTTP layer only validates and forwards inputs; every number comes from
the pure engine modules (tariff, billing, planner, savings, roi, pipeline).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import config
from models import (
    BillBreakdown,
    BillRequest,
    CalculatorInputs,
    CalculatorReport,
    ConversionRequest,
    ConversionResponse,
    GenerationFlow,
    HealthResponse,
    PaybackEstimate,
    PlanRequest,
    ROIRequest,
    SavingsRequest,
    SolarSavingsResult,
)
from billing import calculate_bill
from planner import estimate_bill_from_usage, estimate_usage_from_bill, plan_generation
from savings import calculate_solar_savings
from roi import estimate_payback
from pipeline import run_calculation
from tariff import blended_retail_rate, tariff_as_dict

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ── Rate Limiter ──────────────────────────────────────────────────────────────
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"SunBill calculator starting up (export rate RM {config.EXPORT_RATE_RM:.2f}/kWh)")
    yield
    logger.info("SunBill calculator shutting down")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="SunBill API",
    description="TNB domestic bill and solar savings calculator",
    version=config.APP_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health Check ──────────────────────────────────────────────────────────────
@app.get("/api/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint for load balancer / container probes."""
    return HealthResponse(
        status="healthy",
        version=config.APP_VERSION,
        services={
            "billing_engine": "tnb-domestic",
            "savings_engine": "atap+saving-value",
            "export_rate_rm": config.EXPORT_RATE_RM,
        },
    )


@app.get("/api/tariff", tags=["Tariff"])
async def get_tariff():
    """Tariff schedule and energy-efficiency incentive table in use."""
    return tariff_as_dict()


# ── Bill ──────────────────────────────────────────────────────────────────────
@app.post("/api/bill", response_model=BillBreakdown, tags=["Billing"])
@limiter.limit(config.RATE_LIMIT)
async def bill_endpoint(request: Request, body: BillRequest):
    """Itemised monthly bill for a usage and AFA rate."""
    logger.info(f"Bill: usage={body.usage_kwh}kWh afa={body.afa_rate_sen}sen")
    return calculate_bill(body.usage_kwh, body.afa_rate_sen)


@app.post("/api/convert", response_model=ConversionResponse, tags=["Billing"])
@limiter.limit(config.RATE_LIMIT)
async def convert_endpoint(request: Request, body: ConversionRequest):
    """Quick kWh ↔ RM estimate at the blended retail rate."""
    if body.usage_kwh is None and body.bill_rm is None:
        raise HTTPException(status_code=400, detail="Provide usage_kwh or bill_rm.")

    if body.usage_kwh is not None:
        usage = body.usage_kwh
        bill = estimate_bill_from_usage(usage)
    else:
        bill = body.bill_rm
        usage = estimate_usage_from_bill(bill)

    return ConversionResponse(usage_kwh=usage, bill_rm=bill, retail_rate_rm=blended_retail_rate(usage))


# ── Savings ───────────────────────────────────────────────────────────────────
@app.post("/api/savings", response_model=SolarSavingsResult, tags=["Solar"])
@limiter.limit(config.RATE_LIMIT)
async def savings_endpoint(request: Request, body: SavingsRequest):
    """ATAP savings: bill before / after self-consumption, battery and export credit."""
    export_rate = body.export_rate_rm if body.export_rate_rm is not None else config.EXPORT_RATE_RM
    logger.info(
        f"Savings: usage={body.monthly_usage_kwh}kWh gen={body.monthly_generation_kwh}kWh "
        f"self={body.self_consumption_percent}% batt={body.battery_storage_kwh}kWh"
    )
    return calculate_solar_savings(
        monthly_usage_kwh=body.monthly_usage_kwh,
        monthly_generation_kwh=body.monthly_generation_kwh,
        self_consumption_percent=body.self_consumption_percent,
        export_rate_rm=export_rate,
        afa_rate_sen=body.afa_rate_sen,
        battery_storage_kwh=body.battery_storage_kwh,
    )


@app.post("/api/plan", response_model=GenerationFlow, tags=["Solar"])
@limiter.limit(config.RATE_LIMIT)
async def plan_endpoint(request: Request, body: PlanRequest):
    """System capacity, generation, usage split and battery coverage."""
    logger.info(f"Plan: {body.panel_count}×{body.panel_wattage}W, {body.battery_units}×{body.battery_unit_kwh}kWh")
    return plan_generation(**body.model_dump())


# ── ROI ───────────────────────────────────────────────────────────────────────
@app.post("/api/roi", response_model=PaybackEstimate, tags=["ROI"])
@limiter.limit(config.RATE_LIMIT)
async def roi_endpoint(request: Request, body: ROIRequest):
    """Payback period; pays_back is false when the saving never recovers the cost."""
    logger.info(f"ROI: cost=RM {body.capital_cost_rm} saving=RM {body.monthly_savings_rm}/month")
    return estimate_payback(body.capital_cost_rm, body.monthly_savings_rm)


# =========================================================================
# ┌─────────────────────────────────────────────────────────┐
# |                 RECOMPUTE-ALL PIPELINE                   |
# |  Planner → Bill ×2 → Savings → Saving Value → ROI        |
# └─────────────────────────────────────────────────────────┘
# =========================================================================
@app.post("/api/calculate", response_model=CalculatorReport, tags=["Pipeline"])
@limiter.limit(config.RATE_LIMIT)
async def calculate_endpoint(request: Request, body: CalculatorInputs):
    """Every calculator output for one set of form inputs."""
    return run_calculation(body)


# ── Error Handlers ────────────────────────────────────────────────────────────
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "status_code": exc.status_code},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error. Please try again.", "status_code": 500},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
