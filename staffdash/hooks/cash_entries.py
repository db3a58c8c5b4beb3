"""
staffdash/hooks/cash_entries.py
Cash-register entries (/api/cash-entry).
"""

from typing import Any

from staffdash.core.config import ENDPOINTS
from staffdash.hooks.base import DataHook


class CashEntryHook(DataHook):
    name = "cash_entries"
    path = ENDPOINTS["cash_entries"]

    def transform(self, payload: Any) -> list:
        return list(payload or [])
