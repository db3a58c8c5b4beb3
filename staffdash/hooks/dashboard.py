"""
staffdash/hooks/dashboard.py
/api/dashboard returns every reporting range in one payload:
  {"yesterday": {"_id": "yesterday", "TTC": 100, "HT": 80}, "week": {...}, ...}
range_data() slices one range (plus an optional comparison range) out of it.
"""

from typing import Any, Optional

from staffdash.core.config import ENDPOINTS
from staffdash.hooks.base import DataHook


def _amounts(block: Any) -> Optional[dict]:
    if not isinstance(block, dict):
        return None
    return {**block, "TTC": block.get("TTC") or 0, "HT": block.get("HT") or 0}


class DashboardHook(DataHook):
    name = "dashboard"
    path = ENDPOINTS["dashboard"]

    def transform(self, payload: Any) -> dict:
        if not isinstance(payload, dict):
            return {}
        return {rng: _amounts(block) for rng, block in payload.items() if isinstance(block, dict)}

    def range_data(self, rng: str, compare: Optional[str] = None) -> dict:
        all_data = self.state.data
        if not all_data or self.state.is_loading:
            return {
                "mainData":    None,
                "compareData": None,
                "isLoading":   self.state.is_loading,
                "error":       self.state.error,
            }
        return {
            "mainData":    all_data.get(rng),
            "compareData": all_data.get(compare) if compare else None,
            "isLoading":   False,
            "error":       self.state.error,
        }
