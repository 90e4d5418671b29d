import uuid
from django.db import models
from django.utils import timezone


class Lead(models.Model):
    class City(models.TextChoices):
        CHANDIGARH = "Chandigarh", "Chandigarh"
        MOHALI = "Mohali", "Mohali"
        ZIRAKPUR = "Zirakpur", "Zirakpur"
        PANCHKULA = "Panchkula", "Panchkula"
        OTHER = "Other", "Other"

    class PropertyType(models.TextChoices):
        APARTMENT = "Apartment", "Apartment"
        VILLA = "Villa", "Villa"
        PLOT = "Plot", "Plot"
        OFFICE = "Office", "Office"
        RETAIL = "Retail", "Retail"

    class Bhk(models.TextChoices):
        ONE = "1", "1"
        TWO = "2", "2"
        THREE = "3", "3"
        FOUR = "4", "4"
        STUDIO = "Studio", "Studio"

    class Purpose(models.TextChoices):
        BUY = "Buy", "Buy"
        RENT = "Rent", "Rent"

    class Timeline(models.TextChoices):
        WITHIN_3M = "0-3m", "0-3m"
        WITHIN_6M = "3-6m", "3-6m"
        BEYOND_6M = ">6m", ">6m"
        EXPLORING = "Exploring", "Exploring"

    class Source(models.TextChoices):
        WEBSITE = "Website", "Website"
        REFERRAL = "Referral", "Referral"
        WALK_IN = "Walk-in", "Walk-in"
        CALL = "Call", "Call"
        OTHER = "Other", "Other"

    class Status(models.TextChoices):
        NEW = "New", "New"
        QUALIFIED = "Qualified", "Qualified"
        CONTACTED = "Contacted", "Contacted"
        VISITED = "Visited", "Visited"
        NEGOTIATION = "Negotiation", "Negotiation"
        CONVERTED = "Converted", "Converted"
        DROPPED = "Dropped", "Dropped"

    # bhk is mandatory for these
    RESIDENTIAL_TYPES = (PropertyType.APARTMENT, PropertyType.VILLA)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    full_name = models.CharField(max_length=80)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=15)

    city = models.CharField(max_length=16, choices=City.choices)
    property_type = models.CharField(max_length=16, choices=PropertyType.choices)
    bhk = models.CharField(max_length=8, choices=Bhk.choices, null=True, blank=True)
    purpose = models.CharField(max_length=8, choices=Purpose.choices)

    budget_min = models.PositiveIntegerField(null=True, blank=True)
    budget_max = models.PositiveIntegerField(null=True, blank=True)

    timeline = models.CharField(max_length=16, choices=Timeline.choices)
    source = models.CharField(max_length=16, choices=Source.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.NEW)

    notes = models.TextField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)

    owner_id = models.CharField(max_length=64, db_index=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "leads"
        indexes = [
            models.Index(fields=["owner_id", "updated_at"], name="leads_owner_updated_idx"),
            models.Index(fields=["status", "updated_at"], name="leads_status_updated_idx"),
            models.Index(fields=["phone"], name="leads_phone_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.phone})"


class LeadHistory(models.Model):
    """
    Append-only change log for a Lead.
    Never update rows; they go away only when the lead is deleted (FK cascade).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    lead = models.ForeignKey("leads.Lead", on_delete=models.CASCADE, related_name="history")

    changed_by = models.CharField(max_length=64)
    changed_at = models.DateTimeField(default=timezone.now, db_index=True)

    # public field name -> new value, or {"created": true, "by": <user id>}
    diff = models.JSONField(default=dict)

    class Meta:
        db_table = "lead_history"
        indexes = [
            models.Index(fields=["lead", "changed_at"], name="lead_history_lead_changed_idx"),
        ]
