from __future__ import annotations

from typing import Any

from core.leads.models import Lead, LeadHistory


def record_lead_history(*, lead: Lead, changed_by: str, diff: dict[str, Any]) -> LeadHistory:
    """
    Append one history row. Callers run this inside the same transaction as the
    lead write so the pair can't diverge.
    """
    return LeadHistory.objects.create(
        lead=lead,
        changed_by=changed_by,
        diff=diff,
    )


def record_lead_created(*, lead: Lead, created_by: str) -> LeadHistory:
    return record_lead_history(
        lead=lead,
        changed_by=created_by,
        diff={"created": True, "by": created_by},
    )
