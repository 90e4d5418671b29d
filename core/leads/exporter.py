import csv
import io

from django.utils import timezone

EXPORT_HEADERS = [
    "fullName", "email", "phone", "city", "propertyType", "bhk", "purpose",
    "budgetMin", "budgetMax", "timeline", "source", "status", "notes", "tags", "updatedAt",
]


def export_filename(now=None) -> str:
    now = now or timezone.now()
    return f"buyers-export-{now.date().isoformat()}.csv"


def _blank(value):
    return "" if value is None else value


def export_leads_csv(leads) -> str:
    """
    Render leads as CSV. Tags are comma-joined inside one quoted cell, so the
    output can be fed back to the importer (updatedAt is ignored there).
    """
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)

    for lead in leads:
        writer.writerow([
            lead.full_name,
            _blank(lead.email),
            lead.phone,
            lead.city,
            lead.property_type,
            _blank(lead.bhk),
            lead.purpose,
            _blank(lead.budget_min),
            _blank(lead.budget_max),
            lead.timeline,
            lead.source,
            lead.status,
            _blank(lead.notes),
            ",".join(lead.tags or []),
            lead.updated_at.isoformat(),
        ])

    return buf.getvalue()
