import uuid

import django.db.models.deletion
from django.db import migrations, models
from django.utils import timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=80)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(max_length=15)),
                ("city", models.CharField(choices=[("Chandigarh", "Chandigarh"), ("Mohali", "Mohali"), ("Zirakpur", "Zirakpur"), ("Panchkula", "Panchkula"), ("Other", "Other")], max_length=16)),
                ("property_type", models.CharField(choices=[("Apartment", "Apartment"), ("Villa", "Villa"), ("Plot", "Plot"), ("Office", "Office"), ("Retail", "Retail")], max_length=16)),
                ("bhk", models.CharField(blank=True, choices=[("1", "1"), ("2", "2"), ("3", "3"), ("4", "4"), ("Studio", "Studio")], max_length=8, null=True)),
                ("purpose", models.CharField(choices=[("Buy", "Buy"), ("Rent", "Rent")], max_length=8)),
                ("budget_min", models.PositiveIntegerField(blank=True, null=True)),
                ("budget_max", models.PositiveIntegerField(blank=True, null=True)),
                ("timeline", models.CharField(choices=[("0-3m", "0-3m"), ("3-6m", "3-6m"), (">6m", ">6m"), ("Exploring", "Exploring")], max_length=16)),
                ("source", models.CharField(choices=[("Website", "Website"), ("Referral", "Referral"), ("Walk-in", "Walk-in"), ("Call", "Call"), ("Other", "Other")], max_length=16)),
                ("status", models.CharField(choices=[("New", "New"), ("Qualified", "Qualified"), ("Contacted", "Contacted"), ("Visited", "Visited"), ("Negotiation", "Negotiation"), ("Converted", "Converted"), ("Dropped", "Dropped")], default="New", max_length=16)),
                ("notes", models.TextField(blank=True, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("owner_id", models.CharField(db_index=True, max_length=64)),
                ("created_at", models.DateTimeField(db_index=True, default=timezone.now)),
                ("updated_at", models.DateTimeField(db_index=True, default=timezone.now)),
            ],
            options={
                "db_table": "leads",
                "indexes": [
                    models.Index(fields=["owner_id", "updated_at"], name="leads_owner_updated_idx"),
                    models.Index(fields=["status", "updated_at"], name="leads_status_updated_idx"),
                    models.Index(fields=["phone"], name="leads_phone_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeadHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("changed_by", models.CharField(max_length=64)),
                ("changed_at", models.DateTimeField(db_index=True, default=timezone.now)),
                ("diff", models.JSONField(default=dict)),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="history", to="leads.lead")),
            ],
            options={
                "db_table": "lead_history",
                "indexes": [
                    models.Index(fields=["lead", "changed_at"], name="lead_history_lead_changed_idx"),
                ],
            },
        ),
    ]
