"""
staffdash/hooks/chart.py
Turnover rows for the dashboard chart (/api/turnover), plus their HT/TTC totals.
"""

from typing import Any

from staffdash.core.config import ENDPOINTS
from staffdash.hooks.base import DataHook
from staffdash.reporting import calculate_totals, format_currency


class ChartHook(DataHook):
    name = "chart"
    path = ENDPOINTS["chart"]

    def transform(self, payload: Any) -> list:
        return list(payload or [])

    def extras(self) -> dict:
        if self.state.data is None:
            return {}
        totals = calculate_totals(self.state.data)
        return {
            "totals": {
                **totals,
                "formattedHT":  format_currency(totals["HT"]),
                "formattedTTC": format_currency(totals["TTC"]),
            }
        }
