"""Runtime configuration for the tvdepay application."""

import os

from dotenv import load_dotenv

load_dotenv()

# Base URL of the JSON record store holding drivers, settlements and receipts
STORE_URL = os.getenv("TVDEPAY_STORE_URL", "http://localhost:3000").rstrip("/")

LOG_LEVEL = os.getenv("TVDEPAY_LOG_LEVEL", "WARNING").upper()

# Seconds before a record store request is abandoned
REQUEST_TIMEOUT = float(os.getenv("TVDEPAY_REQUEST_TIMEOUT", "10"))
