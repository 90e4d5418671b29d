import csv

import pytest
from django.core.management import CommandError, call_command

from core.common.ratelimit import InMemoryRateLimiter
from core.leads.importer import EXPECTED_HEADERS, import_leads, parse_leads_csv
from core.leads.models import Lead, LeadHistory
from core.leads.outcomes import ImportRejected, ImportSucceeded, RateLimited, RowErrors

HEADER = ",".join(EXPECTED_HEADERS)

GOOD_ROW = 'Ravi Kumar,ravi@example.com,9876543210,Chandigarh,Apartment,2,Buy,1000000,2000000,0-3m,Website,first visit,"hot,nri",New'
PLOT_ROW = "Meena Gill,,9123456780,Mohali,Plot,,Buy,,,>6m,Referral,,,"


def _csv(*rows, header=HEADER):
    return "\n".join([header, *rows]).encode("utf-8")


@pytest.mark.django_db
def test_valid_file_imports_every_row_with_history():
    outcome = import_leads(content=_csv(GOOD_ROW, PLOT_ROW), owner_id="demo-user-1")

    assert isinstance(outcome, ImportSucceeded)
    assert outcome.imported == 2
    assert Lead.objects.filter(owner_id="demo-user-1").count() == 2
    assert LeadHistory.objects.count() == 2

    ravi = Lead.objects.get(full_name="Ravi Kumar")
    assert ravi.tags == ["hot", "nri"]
    assert ravi.budget_max == 2000000
    meena = Lead.objects.get(full_name="Meena Gill")
    assert meena.bhk is None
    assert meena.email is None
    assert meena.status == Lead.Status.NEW


@pytest.mark.django_db
def test_missing_header_is_single_structural_error():
    header = ",".join(h for h in EXPECTED_HEADERS if h != "phone")

    outcome = import_leads(content=_csv("Ravi,x", header=header), owner_id="demo-user-1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.MISSING_HEADERS
    assert outcome.missing_headers == ["phone"]
    assert Lead.objects.count() == 0


@pytest.mark.django_db
def test_one_bad_row_imports_nothing():
    bad = GOOD_ROW.replace("9876543210", "123")
    rows = [GOOD_ROW, PLOT_ROW, bad, GOOD_ROW, PLOT_ROW]

    outcome = import_leads(content=_csv(*rows), owner_id="demo-user-1")

    assert isinstance(outcome, RowErrors)
    assert [e.row for e in outcome.errors] == [3]
    assert outcome.errors[0].message.startswith("phone: ")
    assert outcome.details()["imported"] == 0
    assert Lead.objects.count() == 0
    assert LeadHistory.objects.count() == 0


@pytest.mark.django_db
def test_every_bad_row_is_reported():
    bad_budget = GOOD_ROW.replace("1000000,2000000", "3000000,2000000")
    no_bhk = GOOD_ROW.replace("Apartment,2,", "Villa,,")

    outcome = import_leads(content=_csv(bad_budget, GOOD_ROW, no_bhk), owner_id="demo-user-1")

    assert isinstance(outcome, RowErrors)
    assert [e.as_dict() for e in outcome.errors] == [
        {"row": 1, "message": "budgetMax: budgetMax must be ≥ budgetMin"},
        {"row": 3, "message": "bhk: bhk is required for Apartment/Villa"},
    ]


def test_column_count_mismatch_is_row_error():
    parsed = parse_leads_csv("\n".join([HEADER, "Ravi,ravi@example.com,9876543210"]))

    assert parsed.rows == []
    assert parsed.errors[0].row == 1
    assert parsed.errors[0].message == f"Expected {len(EXPECTED_HEADERS)} columns, got 3"


def test_headers_in_any_order_with_extras():
    headers = list(reversed(EXPECTED_HEADERS)) + ["ignored"]
    values = dict(zip(EXPECTED_HEADERS, next(csv.reader([GOOD_ROW]))))
    row = ",".join(f'"{values[h]}"' if h in values else "x" for h in headers)

    parsed = parse_leads_csv("\n".join([",".join(headers), row]))

    assert parsed.errors == []
    assert parsed.rows[0]["full_name"] == "Ravi Kumar"
    assert parsed.rows[0]["tags"] == ["hot", "nri"]


def test_blank_lines_are_skipped_but_counted():
    bad = PLOT_ROW.replace("Meena Gill", "M")
    parsed = parse_leads_csv("\n".join([HEADER, GOOD_ROW, "", bad, ""]))

    assert len(parsed.rows) == 1
    assert [e.row for e in parsed.errors] == [3]


@pytest.mark.django_db
def test_header_only_file_is_empty_import():
    outcome = import_leads(content=_csv(), owner_id="demo-user-1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.EMPTY_IMPORT


@pytest.mark.django_db
def test_empty_file_is_empty_import():
    outcome = import_leads(content=b"  \n", owner_id="demo-user-1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.EMPTY_IMPORT


@pytest.mark.django_db
def test_too_many_rows_rejected(settings):
    settings.LEADS_IMPORT_MAX_ROWS = 3

    outcome = import_leads(content=_csv(*([PLOT_ROW] * 4)), owner_id="demo-user-1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.TOO_MANY_ROWS
    assert Lead.objects.count() == 0


@pytest.mark.django_db
def test_oversize_file_rejected(settings):
    settings.LEADS_IMPORT_MAX_BYTES = 100

    outcome = import_leads(content=_csv(GOOD_ROW, GOOD_ROW), owner_id="demo-user-1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.FILE_TOO_LARGE
    assert Lead.objects.count() == 0


@pytest.mark.django_db
def test_non_utf8_rejected():
    outcome = import_leads(content=_csv(PLOT_ROW.replace("Meena", "M\xe9ena")).decode().encode("latin-1"), owner_id="u1")

    assert isinstance(outcome, ImportRejected)
    assert outcome.reason == ImportRejected.INVALID_ENCODING


@pytest.mark.django_db
def test_utf8_bom_is_accepted():
    outcome = import_leads(content=b"\xef\xbb\xbf" + _csv(PLOT_ROW), owner_id="demo-user-1")
    assert isinstance(outcome, ImportSucceeded)


@pytest.mark.django_db
def test_rate_limit_applies_only_with_client_key():
    limiter = InMemoryRateLimiter()
    content = _csv(PLOT_ROW)

    for _ in range(3):
        assert import_leads(content=content, owner_id="u1", client_key="9.9.9.9", limiter=limiter).ok

    assert isinstance(
        import_leads(content=content, owner_id="u1", client_key="9.9.9.9", limiter=limiter),
        RateLimited,
    )
    assert import_leads(content=content, owner_id="u1", limiter=limiter).ok


@pytest.mark.django_db
def test_import_command(tmp_path):
    path = tmp_path / "leads.csv"
    path.write_bytes(_csv(GOOD_ROW, PLOT_ROW))

    call_command("import_leads_csv", str(path), owner="ops-user")

    assert Lead.objects.filter(owner_id="ops-user").count() == 2


@pytest.mark.django_db
def test_import_command_reports_row_errors(tmp_path):
    path = tmp_path / "leads.csv"
    path.write_bytes(_csv(GOOD_ROW.replace("Chandigarh", "Delhi")))

    with pytest.raises(CommandError):
        call_command("import_leads_csv", str(path), owner="ops-user")

    assert Lead.objects.count() == 0


def test_row_of_only_commas_is_a_row_error():
    empty_cells = "," * (len(EXPECTED_HEADERS) - 1)
    parsed = parse_leads_csv("\n".join([HEADER, GOOD_ROW, empty_cells, "   "]))

    assert len(parsed.rows) == 1
    assert [e.row for e in parsed.errors] == [2]
    assert parsed.errors[0].message.startswith("fullName: ")


@pytest.mark.django_db
def test_oversize_budget_in_csv_is_row_error():
    outcome = import_leads(content=_csv(GOOD_ROW.replace("2000000", "30000000000")), owner_id="demo-user-1")

    assert isinstance(outcome, RowErrors)
    assert outcome.errors[0].message.startswith("budgetMax: ")
    assert Lead.objects.count() == 0
