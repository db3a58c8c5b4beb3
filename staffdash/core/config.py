"""
staffdash/core/config.py
═══════════════════════════════════════════════════════════════════════════════
Settings for the dashboard data service.

  Upstream API   →  staff / shift / cash-entry / reporting endpoints
                    every response is a JSON envelope {success, data, error?}
                    (shift list is the exception: bare {shifts: [...]})

  Cache          →  one TTL for every hook, judged at read time
  Preload        →  fixed list of hooks warmed on startup

All values come from the environment so the same image runs in dev and prod.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os

import pytz

TZ = pytz.timezone("Europe/Paris")

# ── Upstream API ──────────────────────────────────────────────────────────────
API_BASE  = os.environ.get("STAFFDASH_API_BASE", "http://localhost:3000").rstrip("/")
API_TOKEN = os.environ.get("STAFFDASH_API_TOKEN", "")
if not API_TOKEN:
    logging.getLogger("config").warning(
        "STAFFDASH_API_TOKEN env var not set, upstream requests are sent unauthenticated"
    )
API_HEADERS = {"Accept": "application/json"}
if API_TOKEN:
    API_HEADERS["Authorization"] = f"Bearer {API_TOKEN}"

HTTP_TIMEOUT_S = float(os.environ.get("STAFFDASH_HTTP_TIMEOUT_S", "30"))
HTTP_CONNECT_S = 15.0

# ── Cache / preload ───────────────────────────────────────────────────────────
CACHE_TTL_S      = float(os.environ.get("STAFFDASH_CACHE_TTL_S", "30"))
PRELOAD_DELAY_S  = float(os.environ.get("STAFFDASH_PRELOAD_DELAY_S", "0.5"))
LOG_LEVEL        = os.environ.get("STAFFDASH_LOG_LEVEL", "INFO").upper()

# ── Endpoint paths ────────────────────────────────────────────────────────────
ENDPOINTS: dict[str, str] = {
    "dashboard":    "/api/dashboard",
    "reporting":    "/api/reporting",
    "chart":        "/api/turnover",
    "staff":        "/api/staff",
    "shifts":       "/api/shift/list",
    "cash_entries": "/api/cash-entry",
}

# Reporting ranges understood by /api/reporting and /api/dashboard
REPORTING_RANGES: dict[str, str] = {
    "today":         "Aujourd'hui",
    "yesterday":     "Hier",
    "previousDay":   "Avant-hier",
    "week":          "Cette semaine",
    "previousWeek":  "Semaine précédente",
    "month":         "Ce mois",
    "previousMonth": "Mois précédent",
}

# Shift list is not preloaded: it is large and only used on the shift screen
PRELOAD_APIS: list[str] = ["dashboard", "chart", "staff", "cash_entries"]
