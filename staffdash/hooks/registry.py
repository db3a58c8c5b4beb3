"""
staffdash/hooks/registry.py
Resource name → hook class. Used by the routers and the preloader.
"""

from staffdash.hooks.base import DataHook
from staffdash.hooks.cash_entries import CashEntryHook
from staffdash.hooks.chart import ChartHook
from staffdash.hooks.dashboard import DashboardHook
from staffdash.hooks.reporting import ReportingHook
from staffdash.hooks.shifts import ShiftHook
from staffdash.hooks.staff import StaffHook

HOOKS: dict[str, type[DataHook]] = {
    h.name: h
    for h in (DashboardHook, ReportingHook, ChartHook, StaffHook, ShiftHook, CashEntryHook)
}
