"""Configuration: .env loading, thresholds, buffers."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Project root = parent of itinerary_continuity/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# --- Gap detection ---
GAP_CONFIDENCE_THRESHOLD = int(os.getenv("GAP_CONFIDENCE_THRESHOLD", "80"))
OVERNIGHT_GAP_HOURS = float(os.getenv("OVERNIGHT_GAP_HOURS", "8"))
EVENING_HOUR = int(os.getenv("EVENING_HOUR", "18"))
MORNING_CUTOFF_HOUR = int(os.getenv("MORNING_CUTOFF_HOUR", "15"))
LATE_EVENING_HOUR = int(os.getenv("LATE_EVENING_HOUR", "21"))
LATE_MORNING_CUTOFF_HOUR = int(os.getenv("LATE_MORNING_CUTOFF_HOUR", "14"))

# --- Placeholder synthesis ---
FLIGHT_TRANSFER_BUFFER_MINUTES = int(os.getenv("FLIGHT_TRANSFER_BUFFER_MINUTES", "120"))
LOCAL_TRANSFER_BUFFER_MINUTES = int(os.getenv("LOCAL_TRANSFER_BUFFER_MINUTES", "15"))

# --- External search ---
SEARCH_TIMEOUT_SECONDS = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "10"))
SEARCH_MIN_INTERVAL_SECONDS = float(os.getenv("SEARCH_MIN_INTERVAL_SECONDS", "0"))

# --- Paths / logging ---
OUTPUT_DIR = PROJECT_ROOT / "output"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class ContinuityConfig:
    """Bundle of the settings above, injectable per call."""
    gap_confidence_threshold: int = GAP_CONFIDENCE_THRESHOLD
    overnight_gap_hours: float = OVERNIGHT_GAP_HOURS
    evening_hour: int = EVENING_HOUR
    morning_cutoff_hour: int = MORNING_CUTOFF_HOUR
    late_evening_hour: int = LATE_EVENING_HOUR
    late_morning_cutoff_hour: int = LATE_MORNING_CUTOFF_HOUR
    flight_transfer_buffer_minutes: int = FLIGHT_TRANSFER_BUFFER_MINUTES
    local_transfer_buffer_minutes: int = LOCAL_TRANSFER_BUFFER_MINUTES
    search_timeout_seconds: float = SEARCH_TIMEOUT_SECONDS
    search_min_interval_seconds: float = SEARCH_MIN_INTERVAL_SECONDS
