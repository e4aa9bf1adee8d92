"""
Configuration for the Vendor TCO application.

Values are read from the environment once at import time, with defaults
suited to local development against a SQLite file.
"""

import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./vendor_tco.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", os.path.join(BASE_DIR, "logs"))

# TCO defaults
DEFAULT_TCO_YEARS = int(os.getenv("DEFAULT_TCO_YEARS", "3"))
MAX_TCO_YEARS = 5

# Payback walk covers the first three years month by month
PAYBACK_MAX_MONTHS = int(os.getenv("PAYBACK_MAX_MONTHS", "36"))

# Sensitivity deltas use a fixed window regardless of the TCO horizon
SENSITIVITY_WINDOW_YEARS = int(os.getenv("SENSITIVITY_WINDOW_YEARS", "3"))
