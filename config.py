import os

from dotenv import load_dotenv

load_dotenv()

# Prefer PostgreSQL if provided, otherwise fall back to SQLite (so server always boots)
_env_db = os.getenv("DATABASE_URL", "").strip()
if _env_db:
    DATABASE_URL = _env_db
else:
    DATABASE_URL = "sqlite+aiosqlite:///./ledger.db"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
if LOG_LEVEL not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"}:
    LOG_LEVEL = "INFO"
LOG_FILE = os.getenv("LOG_FILE") or None

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

# List and stats endpoints only look this many calendar months back
LEDGER_WINDOW_MONTHS = int(os.getenv("LEDGER_WINDOW_MONTHS", 6))

SAVING_ACCOUNTS = tuple(
    a.strip() for a in os.getenv("SAVING_ACCOUNTS", "SIB,KSFE").split(",") if a.strip()
)

PORT = int(os.getenv("PORT", 8000))
API_URL = os.getenv("API_URL", f"http://localhost:{PORT}")
