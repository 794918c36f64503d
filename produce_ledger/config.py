import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR

# PRODUCE_LEDGER_DB_PATH points the store at another file (tests, backups)
DB_PATH = Path(os.getenv("PRODUCE_LEDGER_DB_PATH", "").strip() or DATA_PATH / DB_FILE_NAME)

LOG_LEVEL = os.getenv("PRODUCE_LEDGER_LOG_LEVEL", "INFO").strip().upper() or "INFO"
