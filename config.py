import os

from dotenv import load_dotenv

load_dotenv()

APP_TITLE = "🎲 Score Allocator - Totals • Subjects • Export"

# Allocation defaults
DEFAULT_MIN_EACH = int(os.getenv("MIN_EACH", "1"))
DEFAULT_MAX_FRACTION = float(os.getenv("MAX_FRACTION", "0.6"))
DEFAULT_RANDOMNESS = float(os.getenv("RANDOMNESS", "0.25"))

# Zero weights are floored so no subject is structurally excluded
WEIGHT_FLOOR = 0.0001
MAX_REPAIR_ITERATIONS = 100_000

# Spreadsheet layout
TOTAL_COLUMN_TITLES = ("总分", "合计", "Total", "Sum")
EXPORT_SUFFIX = os.getenv("EXPORT_SUFFIX", "_allocated")
EXPORT_SHEET_TITLE = "Allocation"

MODES = {
    "Weighted (fraction cap)": "weighted",
    "Absolute max scores": "absolute",
}

SEED_POLICIES = {
    "Random every run": "none",
    "Fixed per row": "row",
    "Fixed per row & total": "row_total",
}

SERVER_NAME = os.getenv("SERVER_NAME", "0.0.0.0").strip()
SERVER_PORT = int(os.getenv("SERVER_PORT", "7860"))
DEBUG = os.getenv("DEBUG", "").strip().lower() in ("1", "true", "yes")
