"""
staffdash/hooks/shifts.py
Shift list. /api/shift/list is not enveloped: it answers {"shifts": [...]}.
"""

from typing import Any

from staffdash.core.config import ENDPOINTS
from staffdash.hooks.base import DataHook


class ShiftHook(DataHook):
    name = "shifts"
    path = ENDPOINTS["shifts"]

    def transform(self, payload: Any) -> list:
        if isinstance(payload, dict):
            payload = payload.get("shifts")
        return list(payload or [])
