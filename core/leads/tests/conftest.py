import pytest

from core.leads.history import record_lead_created
from core.leads.models import Lead


@pytest.fixture
def lead_payload():
    return {
        "fullName": "John Doe",
        "email": "john@example.com",
        "phone": "9876543210",
        "city": "Chandigarh",
        "propertyType": "Apartment",
        "bhk": "2",
        "purpose": "Buy",
        "budgetMin": "1000000",
        "budgetMax": "2000000",
        "timeline": "0-3m",
        "source": "Website",
        "notes": "Wants a park-facing unit",
        "tags": "hot, family",
    }


@pytest.fixture
def make_lead(db):
    def _make(owner_id="demo-user-1", **overrides):
        fields = {
            "full_name": "Asha Verma",
            "phone": "9876543210",
            "city": Lead.City.MOHALI,
            "property_type": Lead.PropertyType.PLOT,
            "purpose": Lead.Purpose.BUY,
            "timeline": Lead.Timeline.WITHIN_6M,
            "source": Lead.Source.REFERRAL,
            "tags": [],
        }
        fields.update(overrides)
        lead = Lead.objects.create(owner_id=owner_id, **fields)
        record_lead_created(lead=lead, created_by=owner_id)
        return lead

    return _make
