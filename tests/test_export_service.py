import csv
import io

import pytest

from planhaus.export_service import compute_stats, generate_summary, to_csv

DATA = {
    "project": {"name": "Alex & Sam's Wedding", "wedding_date": "2025-06-15", "venue": None, "guest_count": 120},
    "tasks": [
        {"title": "Book venue", "status": "completed", "completed_at": "2024-06-01T10:00:00", "due_date": "2024-06-15"},
        {"title": "Book florist", "status": "not_started", "completed_at": None, "due_date": "2024-10-15",
         "category": "flowers", "priority": "medium"},
    ],
    "guests": [
        {"name": "Ada", "email": "ada@example.com", "rsvp_status": "confirmed", "plus_one": 1},
        {"name": "Bo, Jr.", "rsvp_status": "pending", "plus_one": 0},
    ],
    "budget_items": [
        {"category": "venue", "item": "Planned allocation", "percent": 45, "estimated_cost": 22500,
         "actual_cost": 20000, "is_paid": 1},
        {"category": "music", "item": "Band", "percent": None, "estimated_cost": 3000, "actual_cost": None},
    ],
    "vendors": [
        {"name": "Petal Co", "category": "florist", "quote": 3200, "status": "booked", "contract_signed": 1},
        {"name": "Lens Ltd", "category": "photographer", "quote": None, "contract_signed": 0},
    ],
    "seating": {
        "tables": [{"table_id": "t-1", "name": "Family"}],
        "assignments": [{"table_id": "t-1", "seat_number": 1, "guest_name": "Ada"}],
        "unassigned_guests": [{"name": "Bo, Jr."}],
    },
}


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_compute_stats():
    stats = compute_stats(DATA["tasks"], DATA["guests"], DATA["budget_items"], DATA["vendors"])
    assert stats == {
        "total_tasks": 2,
        "completed_tasks": 1,
        "total_guests": 2,
        "confirmed_guests": 1,
        "total_budget": 25500,
        "spent_budget": 20000,
        "total_vendors": 2,
        "booked_vendors": 1,
    }


def test_guest_csv_quotes_commas():
    rows = _rows(to_csv(DATA, "guests"))
    assert rows[0][:2] == ["Name", "Email"]
    assert rows[2][0] == "Bo, Jr."
    assert rows[1][6] == "Yes"


def test_budget_and_vendor_csv_format_money():
    budget = _rows(to_csv(DATA, "budget"))
    assert budget[1][3:6] == ["$22500.00", "$20000.00", "Yes"]
    assert budget[2][4] == "$0.00"

    vendors = _rows(to_csv(DATA, "vendors"))
    assert vendors[1][4] == "$3200.00"
    assert vendors[2][4] == ""


def test_seating_csv_lists_unassigned_guests_last():
    rows = _rows(to_csv(DATA, "seating"))
    assert rows == [["Table", "Seat", "Guest"], ["Family", "1", "Ada"], ["", "", "Bo, Jr."]]


def test_unknown_entity():
    with pytest.raises(ValueError):
        to_csv(DATA, "photos")


def test_summary():
    data = dict(DATA, stats=compute_stats(DATA["tasks"], DATA["guests"], DATA["budget_items"], DATA["vendors"]))
    summary = generate_summary(data)
    assert summary.startswith("Alex & Sam's Wedding - Planning Summary")
    assert "Venue: TBD" in summary
    assert "Tasks: 1/2 completed (50%)" in summary
    assert "- Book florist (due 2024-10-15)" in summary
