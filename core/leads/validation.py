from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from rest_framework import serializers
from rest_framework.fields import SkipField

from core.leads.models import Lead

# (public/wire name, model attribute), in form/CSV order
LEAD_FIELDS = (
    ("fullName", "full_name"),
    ("email", "email"),
    ("phone", "phone"),
    ("city", "city"),
    ("propertyType", "property_type"),
    ("bhk", "bhk"),
    ("purpose", "purpose"),
    ("budgetMin", "budget_min"),
    ("budgetMax", "budget_max"),
    ("timeline", "timeline"),
    ("source", "source"),
    ("notes", "notes"),
    ("tags", "tags"),
    ("status", "status"),
)

PUBLIC_NAMES = {attr: public for public, attr in LEAD_FIELDS}

# blank values for these mean "not provided"
OPTIONAL_FIELDS = frozenset({"email", "bhk", "budgetMin", "budgetMax", "notes", "tags", "status"})

BUDGET_ORDER_MESSAGE = "budgetMax must be ≥ budgetMin"
BHK_REQUIRED_MESSAGE = "bhk is required for Apartment/Villa"

# budget columns are 32-bit integers
MAX_BUDGET = 2147483647


class LeadFieldsSerializer(serializers.Serializer):
    """
    Per-field rules only. Cross-field rules (budget order, bhk for residential)
    are applied by validate_lead() so they still run when another field fails.
    """

    fullName = serializers.CharField(source="full_name", min_length=2, max_length=80)
    email = serializers.EmailField(required=False, max_length=254)
    phone = serializers.RegexField(
        r"^\d{10,15}$",
        error_messages={"invalid": "Phone must be 10-15 digits."},
    )
    city = serializers.ChoiceField(choices=Lead.City.choices)
    propertyType = serializers.ChoiceField(source="property_type", choices=Lead.PropertyType.choices)
    bhk = serializers.ChoiceField(required=False, choices=Lead.Bhk.choices)
    purpose = serializers.ChoiceField(choices=Lead.Purpose.choices)
    budgetMin = serializers.IntegerField(
        source="budget_min",
        required=False,
        min_value=1,
        max_value=MAX_BUDGET,
        error_messages={
            "min_value": "budgetMin must be a positive integer.",
            "max_value": f"budgetMin must be at most {MAX_BUDGET}.",
        },
    )
    budgetMax = serializers.IntegerField(
        source="budget_max",
        required=False,
        min_value=1,
        max_value=MAX_BUDGET,
        error_messages={
            "min_value": "budgetMax must be a positive integer.",
            "max_value": f"budgetMax must be at most {MAX_BUDGET}.",
        },
    )
    timeline = serializers.ChoiceField(choices=Lead.Timeline.choices)
    source = serializers.ChoiceField(choices=Lead.Source.choices)
    notes = serializers.CharField(required=False, max_length=1000)
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    status = serializers.ChoiceField(required=False, choices=Lead.Status.choices)


@dataclass
class ValidationResult:
    data: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_tags(value):
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        # let the serializer report it
        return value
    return [t.strip() if isinstance(t, str) else t for t in value if not _is_blank(t)]


def _prepare(raw: Mapping[str, Any]) -> dict[str, Any]:
    prepared = {}
    for public, _ in LEAD_FIELDS:
        if public not in raw:
            continue
        value = raw[public]
        if public == "tags":
            value = _clean_tags(value)
            if value == []:
                continue
        if value is None or (public in OPTIONAL_FIELDS and _is_blank(value)):
            continue
        prepared[public] = value
    return prepared


def _messages(detail) -> list[str]:
    if isinstance(detail, dict):
        out = []
        for key, sub in detail.items():
            out.extend(f"[{key}] {m}" for m in _messages(sub))
        return out
    if isinstance(detail, (list, tuple)):
        out = []
        for item in detail:
            out.extend(_messages(item))
        return out
    return [str(detail)]


def validate_lead(raw: Mapping[str, Any], *, creating: bool) -> ValidationResult:
    """
    Validate a raw lead payload (form post, JSON body or parsed CSV row).

    Returns a ValidationResult whose .data is keyed by model attribute and holds
    every editable field (absent optionals as None / []), or whose .errors maps
    public field names to messages. Every field is checked; one bad field never
    hides another.

    `status` defaults to New only when creating. On update an omitted status is
    left out of .data so the stored value survives.
    """
    prepared = _prepare(raw)

    values: dict[str, Any] = {}
    errors: dict[str, list[str]] = {}

    for name, fld in LeadFieldsSerializer().fields.items():
        try:
            value = fld.run_validation(fld.get_value(prepared))
        except SkipField:
            continue
        except serializers.ValidationError as exc:
            errors[name] = _messages(exc.detail)
            continue
        values[fld.source] = value

    # cross-field checks append to whatever the field checks produced
    budget_min = values.get("budget_min")
    budget_max = values.get("budget_max")
    if budget_min is not None and budget_max is not None and budget_max < budget_min:
        errors.setdefault("budgetMax", []).append(BUDGET_ORDER_MESSAGE)

    if values.get("property_type") in Lead.RESIDENTIAL_TYPES and "bhk" not in prepared:
        errors.setdefault("bhk", []).append(BHK_REQUIRED_MESSAGE)

    if errors:
        return ValidationResult(errors=errors)

    data = {
        "email": None,
        "bhk": None,
        "budget_min": None,
        "budget_max": None,
        "notes": None,
        "tags": [],
        **values,
    }
    if "status" not in data and creating:
        data["status"] = Lead.Status.NEW.value
    return ValidationResult(data=data)
