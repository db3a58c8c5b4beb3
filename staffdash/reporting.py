"""
staffdash/reporting.py
═══════════════════════════════════════════════════════════════════════════════
Reporting helpers shared by the reporting hook and the dashboard router.

Calendar rules (business timezone = Europe/Paris):
  today          → today
  yesterday      → today - 1
  previousDay    → today - 2
  week           → Monday of this week … today
  previousWeek   → Monday … Sunday of last week
  month          → 1st of this month … today
  previousMonth  → 1st … last day of last month

Amounts are euros, HT (net) and TTC (gross).
═══════════════════════════════════════════════════════════════════════════════
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from staffdash.core.config import REPORTING_RANGES, TZ


def _today() -> date:
    return datetime.now(TZ).date()


def reporting_period(rng: str, today: Optional[date] = None) -> dict:
    today = today or _today()
    label = REPORTING_RANGES.get(rng, REPORTING_RANGES["today"])
    monday = today - timedelta(days=today.weekday())

    if rng == "yesterday":
        start = end = today - timedelta(days=1)
    elif rng == "previousDay":
        start = end = today - timedelta(days=2)
    elif rng == "week":
        start, end = monday, today
    elif rng == "previousWeek":
        start, end = monday - timedelta(days=7), monday - timedelta(days=1)
    elif rng == "month":
        start, end = today.replace(day=1), today
    elif rng == "previousMonth":
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    else:
        start = end = today

    return {"start": start, "end": end, "label": label}


def percentage_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def format_percentage(pct: float) -> str:
    sign = "+" if pct >= 0 else ""
    return f"{sign}{pct:.1f}%"


def trend_direction(pct: float) -> str:
    if abs(pct) < 0.1:
        return "stable"
    return "up" if pct > 0 else "down"


def format_currency(amount: float, show_decimals: bool = True) -> str:
    """French euro format: narrow no-break space for thousands, comma decimals."""
    digits = 2 if show_decimals else 0
    body = f"{abs(amount):,.{digits}f}".replace(",", "\u202f").replace(".", ",")
    sign = "-" if amount < 0 and round(abs(amount), digits) != 0 else ""
    return f"{sign}{body}\u00a0€"


def calculate_totals(rows: Optional[Iterable[dict]]) -> dict:
    totals = {"HT": 0, "TTC": 0}
    for row in rows or []:
        totals["HT"]  += row.get("HT") or 0
        totals["TTC"] += row.get("TTC") or 0
    return totals


def _period_json(period: dict) -> dict:
    return {
        "start": period["start"].isoformat(),
        "end":   period["end"].isoformat(),
        "label": period["label"],
    }


def _change(current: float, previous: float) -> dict:
    pct = percentage_change(current, previous)
    return {"percentage": pct, "formatted": format_percentage(pct), "trend": trend_direction(pct)}


def build_summary(
    rng: str,
    totals: dict,
    compare: Optional[dict] = None,
    compare_range: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    """Totals for one range, formatted, plus an optional comparison block."""
    ht  = totals.get("HT") or 0
    ttc = totals.get("TTC") or 0
    today = today or _today()

    comparison = None
    if compare is not None and compare_range:
        prev_ht  = compare.get("HT") or 0
        prev_ttc = compare.get("TTC") or 0
        comparison = {
            "previous": {
                "HT":     prev_ht,
                "TTC":    prev_ttc,
                "period": _period_json(reporting_period(compare_range, today)),
            },
            "changes": {"HT": _change(ht, prev_ht), "TTC": _change(ttc, prev_ttc)},
        }

    return {
        "period": _period_json(reporting_period(rng, today)),
        "totals": {
            "HT":           ht,
            "TTC":          ttc,
            "formattedHT":  format_currency(ht),
            "formattedTTC": format_currency(ttc),
        },
        "chartData":  [{"date": today.strftime("%d/%m"), "HT": ht, "TTC": ttc}],
        "comparison": comparison,
    }
