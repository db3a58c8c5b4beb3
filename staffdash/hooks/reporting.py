"""
staffdash/hooks/reporting.py
One reporting range per cache key ("reporting:<range>").
Changing the range is a dependency change: the next load() reads a new key.
"""

from datetime import date
from typing import Any, Optional

from staffdash.core.config import ENDPOINTS, REPORTING_RANGES
from staffdash.core.context import DataContext
from staffdash.hooks.base import DataHook
from staffdash.reporting import build_summary


class ReportingHook(DataHook):
    name = "reporting"
    path = ENDPOINTS["reporting"]

    def __init__(self, ctx: DataContext, rng: str = "today", **kwargs):
        super().__init__(ctx, **kwargs)
        self.range = self._check(rng)

    @staticmethod
    def _check(rng: str) -> str:
        if rng not in REPORTING_RANGES:
            raise ValueError(f"Unknown reporting range '{rng}'")
        return rng

    def set_range(self, rng: str) -> None:
        rng = self._check(rng)
        if rng != self.range:
            self.log.debug(f"range {self.range} → {rng}")
            self.range = rng

    def cache_key(self) -> str:
        return f"reporting:{self.range}"

    def params(self) -> dict:
        return {"range": self.range}

    def transform(self, payload: Any) -> dict:
        # /api/reporting answers either a totals object or a one-element list
        if isinstance(payload, list):
            payload = payload[0] if payload else {}
        if not isinstance(payload, dict):
            payload = {}
        return {"TTC": payload.get("TTC") or 0, "HT": payload.get("HT") or 0}

    def summary(self, compare: Optional[dict] = None, compare_range: Optional[str] = None,
                today: Optional[date] = None) -> Optional[dict]:
        if self.state.data is None or self.state.is_loading:
            return None
        return build_summary(self.range, self.state.data, compare, compare_range, today=today)
