from typing import Any, Dict, Mapping, Tuple

from django.db.models import Q, QuerySet

from core.leads.models import Lead

SORTS = {
    "updatedAt-desc": ("-updated_at", "-id"),
    "updatedAt-asc": ("updated_at", "id"),
    "name-asc": ("full_name", "id"),
    "name-desc": ("-full_name", "-id"),
}
DEFAULT_SORT = "updatedAt-desc"

# query param -> (model field, allowed values)
FILTERS = {
    "city": ("city", Lead.City.values),
    "propertyType": ("property_type", Lead.PropertyType.values),
    "status": ("status", Lead.Status.values),
    "timeline": ("timeline", Lead.Timeline.values),
}


def filter_leads(params: Mapping[str, Any]) -> QuerySet:
    """
    Query params:
      q=<search name/phone/email, case-insensitive>
      city / propertyType / status / timeline=<exact enum value>
      sort=<updatedAt-desc (default) | updatedAt-asc | name-asc | name-desc>

    Unknown filter values are ignored rather than producing an empty page.
    """
    qs = Lead.objects.all()

    q = (params.get("q") or params.get("search") or "").strip()
    if q:
        qs = qs.filter(
            Q(full_name__icontains=q) |
            Q(phone__icontains=q) |
            Q(email__icontains=q)
        )

    for param, (field_name, allowed) in FILTERS.items():
        value = (params.get(param) or "").strip()
        if value and value in allowed:
            qs = qs.filter(**{field_name: value})

    sort = params.get("sort") or DEFAULT_SORT
    return qs.order_by(*SORTS.get(sort, SORTS[DEFAULT_SORT]))


def paginate(qs: QuerySet, page_raw, page_size: int) -> Tuple[list, Dict[str, int]]:
    try:
        page = int(page_raw or 1)
    except (TypeError, ValueError):
        page = 1
    page = max(1, page)

    total = qs.count()
    total_pages = (total + page_size - 1) // page_size
    offset = (page - 1) * page_size
    items = list(qs[offset: offset + page_size])

    return items, {"page": page, "limit": page_size, "total": total, "totalPages": total_pages}
