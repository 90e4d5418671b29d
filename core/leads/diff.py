from __future__ import annotations

from typing import Any, Mapping

from core.leads.models import Lead
from core.leads.validation import LEAD_FIELDS


def snapshot(lead: Lead) -> dict[str, Any]:
    """Editable field values of a stored lead, keyed by model attribute."""
    return {attr: getattr(lead, attr) for _, attr in LEAD_FIELDS}


def _comparable(attr: str, value):
    if attr == "tags":
        # order matters; None and [] are the same "no tags"
        return list(value or [])
    return value


def compute_diff(stored: Mapping[str, Any], updated: Mapping[str, Any]) -> dict[str, Any]:
    """
    Fields whose value changed, as {public field name: new value}.

    Attributes missing from `updated` are not compared (an omitted status on
    update is "keep", not "clear"). An empty dict means a no-op update.
    """
    diff = {}
    for public, attr in LEAD_FIELDS:
        if attr not in updated:
            continue
        new = updated[attr]
        if _comparable(attr, stored.get(attr)) != _comparable(attr, new):
            diff[public] = new
    return diff
