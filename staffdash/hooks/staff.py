"""
staffdash/hooks/staff.py
Staff list. Upstream documents carry Mongo ids (_id); consumers get a flat
record with defaults filled in.
"""

from typing import Any

from staffdash.core.config import ENDPOINTS
from staffdash.hooks.base import DataHook


def to_staff_member(doc: dict) -> dict:
    active = doc.get("isActive")
    return {
        "id":        str(doc.get("_id") or doc.get("id") or ""),
        "firstName": doc.get("firstName", ""),
        "lastName":  doc.get("lastName", ""),
        "email":     doc.get("email") or "",
        "phone":     doc.get("phone") or "",
        "mdp":       doc.get("mdp") or 0,
        "isActive":  True if active is None else bool(active),
    }


class StaffHook(DataHook):
    name = "staff"
    path = ENDPOINTS["staff"]

    def transform(self, payload: Any) -> list[dict]:
        return [to_staff_member(d) for d in (payload or []) if isinstance(d, dict)]
