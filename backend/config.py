"""
SunBill — Runtime Settings
Read once from the environment (and a local .env file, if present).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Fixed SMP export rate, RM/kWh
EXPORT_RATE_RM = float(os.getenv("EXPORT_RATE_RM", "0.20"))

# Sizing target used by the panel / battery recommendation
TARGET_SAVING_PERCENT = float(os.getenv("TARGET_SAVING_PERCENT", "100"))

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://localhost:8000",
).split(",")

RATE_LIMIT = os.getenv("RATE_LIMIT", "60/minute")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

APP_VERSION = "1.0.0"
