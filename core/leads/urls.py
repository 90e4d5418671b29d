from django.urls import path
from core.leads.api import leads_collection, leads_detail, lead_history, leads_import, leads_export

urlpatterns = [
    path("leads", leads_collection, name="leads-collection"),
    path("leads/import", leads_import, name="leads-import"),
    path("leads/export", leads_export, name="leads-export"),
    path("leads/<uuid:lead_id>", leads_detail, name="leads-detail"),
    path("leads/<uuid:lead_id>/history", lead_history, name="leads-history"),
]
