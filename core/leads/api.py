from django.conf import settings
from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.common.middleware import client_key_for
from core.leads.exporter import export_filename, export_leads_csv
from core.leads.importer import import_leads
from core.leads.models import Lead, LeadHistory
from core.leads.outcomes import Deleted, ImportRejected, ImportSucceeded, RateLimited, Success
from core.leads.search import filter_leads, paginate
from core.leads.serializers import LeadHistorySerializer, LeadSerializer
from core.leads.services import create_lead, delete_lead, update_lead

RECENT_HISTORY = 5


def _client_key(request) -> str:
    return getattr(request, "client_key", None) or client_key_for(request)


def _raw_payload(request) -> dict:
    """request.data as a plain dict; repeated form keys (tags) become lists."""
    data = request.data
    if hasattr(data, "lists"):
        return {k: (v if len(v) > 1 else v[0]) for k, v in data.lists()}
    return dict(data) if isinstance(data, dict) else {}


def _failure_response(outcome):
    resp = Response(outcome.to_error(), status=outcome.http_status)
    if isinstance(outcome, RateLimited):
        resp["Retry-After"] = str(outcome.retry_after_seconds)
    return resp


def _not_found():
    return Response({"error": {"code": "NOT_FOUND", "message": "Lead not found"}}, status=404)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def leads_collection(request):
    """
    GET /v1/leads
    Query:
      q=<search name/phone/email>
      city, propertyType, status, timeline=<exact value>
      sort=<updatedAt-desc|updatedAt-asc|name-asc|name-desc>
      page=<int, default 1>

    POST /v1/leads
    Body: fullName, email, phone, city, propertyType, bhk, purpose, budgetMin,
          budgetMax, timeline, source, notes, tags, status
    """
    if request.method == "GET":
        qs = filter_leads(request.query_params)
        items, page = paginate(qs, request.query_params.get("page"), settings.LEADS_PAGE_SIZE)
        return Response({"items": LeadSerializer(items, many=True).data, "page": page})

    outcome = create_lead(
        owner_id=request.user.id,
        raw=_raw_payload(request),
        client_key=_client_key(request),
    )
    if not outcome.ok:
        return _failure_response(outcome)

    return Response({"lead": LeadSerializer(outcome.lead).data}, status=201)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
def leads_detail(request, lead_id):
    """
    GET /v1/leads/{lead_id}      lead + most recent history
    PUT /v1/leads/{lead_id}      full update; body must carry the updatedAt last seen
    DELETE /v1/leads/{lead_id}   owner only
    """
    if request.method == "GET":
        lead = Lead.objects.filter(id=lead_id).first()
        if not lead:
            return _not_found()
        history = LeadHistory.objects.filter(lead=lead).order_by("-changed_at")[:RECENT_HISTORY]
        return Response({
            "lead": LeadSerializer(lead).data,
            "history": LeadHistorySerializer(history, many=True).data,
            "isOwner": lead.owner_id == request.user.id,
        })

    if request.method == "DELETE":
        outcome = delete_lead(
            lead_id=lead_id,
            actor_id=request.user.id,
            client_key=_client_key(request),
        )
        if isinstance(outcome, Deleted):
            return Response(status=204)
        return _failure_response(outcome)

    raw = _raw_payload(request)
    outcome = update_lead(
        lead_id=lead_id,
        actor_id=request.user.id,
        raw=raw,
        observed_updated_at=raw.get("updatedAt"),
        client_key=_client_key(request),
    )
    if not isinstance(outcome, Success):
        return _failure_response(outcome)

    return Response({"lead": LeadSerializer(outcome.lead).data, "changes": outcome.diff})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def lead_history(request, lead_id):
    """
    GET /v1/leads/{lead_id}/history
    Query:
      limit=<int optional, default 50, max 200>
      offset=<int optional, default 0>
    """
    if not Lead.objects.filter(id=lead_id).exists():
        return _not_found()

    try:
        limit = int(request.query_params.get("limit") or 50)
    except ValueError:
        limit = 50
    limit = max(1, min(200, limit))

    try:
        offset = int(request.query_params.get("offset") or 0)
    except ValueError:
        offset = 0
    offset = max(0, offset)

    qs = LeadHistory.objects.filter(lead_id=lead_id).order_by("-changed_at", "-id")
    total = qs.count()
    items = qs[offset: offset + limit]

    return Response(
        {
            "items": LeadHistorySerializer(items, many=True).data,
            "page": {"limit": limit, "offset": offset, "total": total},
        }
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def leads_import(request):
    """
    POST /v1/leads/import  (multipart/form-data, field "file")

    All rows are validated first; any bad row means nothing is imported and
    every bad row is listed in error.details.rows.
    """
    upload = request.FILES.get("file")
    if upload is None:
        return _failure_response(ImportRejected(reason=ImportRejected.NO_FILE, detail="No file provided"))

    # never read more than one byte past the cap; the importer rejects oversize payloads
    content = upload.read(settings.LEADS_IMPORT_MAX_BYTES + 1)

    outcome = import_leads(
        content=content,
        owner_id=request.user.id,
        client_key=_client_key(request),
    )
    if isinstance(outcome, ImportSucceeded):
        return Response({"success": True, "imported": outcome.imported}, status=201)
    return _failure_response(outcome)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def leads_export(request):
    """
    GET /v1/leads/export  same filters/sort as the list, all pages, as CSV
    """
    qs = filter_leads(request.query_params)
    resp = HttpResponse(export_leads_csv(qs.iterator()), content_type="text/csv")
    resp["Content-Disposition"] = f'attachment; filename="{export_filename()}"'
    return resp
