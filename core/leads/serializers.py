from rest_framework import serializers

from core.leads.models import Lead, LeadHistory


class LeadSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name")
    propertyType = serializers.CharField(source="property_type")
    budgetMin = serializers.IntegerField(source="budget_min", allow_null=True)
    budgetMax = serializers.IntegerField(source="budget_max", allow_null=True)
    ownerId = serializers.CharField(source="owner_id")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = Lead
        fields = [
            "id",
            "fullName",
            "email",
            "phone",
            "city",
            "propertyType",
            "bhk",
            "purpose",
            "budgetMin",
            "budgetMax",
            "timeline",
            "source",
            "status",
            "notes",
            "tags",
            "ownerId",
            "createdAt",
            "updatedAt",
        ]


class LeadHistorySerializer(serializers.ModelSerializer):
    changedBy = serializers.CharField(source="changed_by")
    changedAt = serializers.DateTimeField(source="changed_at")

    class Meta:
        model = LeadHistory
        fields = [
            "id",
            "changedBy",
            "changedAt",
            "diff",
        ]
