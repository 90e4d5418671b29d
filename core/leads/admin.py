from django.contrib import admin
from core.leads.models import Lead, LeadHistory


class LeadHistoryInline(admin.TabularInline):
    model = LeadHistory
    extra = 0
    can_delete = False
    readonly_fields = ("changed_by", "changed_at", "diff")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ("id", "full_name", "phone", "city", "property_type", "status", "owner_id", "updated_at")
    search_fields = ("full_name", "phone", "email")
    list_filter = ("city", "property_type", "status", "timeline")
    readonly_fields = ("owner_id", "created_at", "updated_at")
    inlines = [LeadHistoryInline]
