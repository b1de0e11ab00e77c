import csv
import io
import logging
from typing import Any, Callable, Dict, List, Sequence, Tuple

import planhaus.db_queries as db_queries
from planhaus.helpers import execute_sql, unwrap_rows
from planhaus.projects import get_project
from planhaus.seating import get_seating_chart

EXPORT_ENTITIES = ("tasks", "guests", "budget", "vendors", "seating")


def _percent(part: float, whole: float) -> int:
    return round(part / whole * 100) if whole else 0


def _money(value: Any) -> str:
    return f"${float(value or 0):.2f}"


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def compute_stats(tasks: List[Dict[str, Any]], guests: List[Dict[str, Any]],
                  budget_items: List[Dict[str, Any]], vendors: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "total_tasks": len(tasks),
        "completed_tasks": sum(1 for t in tasks if t.get("completed_at") or t.get("status") == "completed"),
        "total_guests": len(guests),
        "confirmed_guests": sum(1 for g in guests if g.get("rsvp_status") == "confirmed"),
        "total_budget": sum(float(item.get("estimated_cost") or 0) for item in budget_items),
        "spent_budget": sum(float(item.get("actual_cost") or 0) for item in budget_items),
        "total_vendors": len(vendors),
        "booked_vendors": sum(1 for v in vendors if v.get("contract_signed")),
    }


async def get_all_project_data(project_id: str) -> Dict[str, Any]:
    """Project row, its task/guest/budget/vendor lists, the seating chart and summary stats."""
    params = {"project_id": project_id}
    project = await get_project(project_id)
    tasks = unwrap_rows(await execute_sql(db_queries.list_by_project_query("tasks", "due_date, title"), params),
                        "Listing tasks for export")
    guests = unwrap_rows(await execute_sql(db_queries.list_by_project_query("guests", "name"), params),
                         "Listing guests for export")
    budget_items = unwrap_rows(
        await execute_sql(db_queries.list_by_project_query("budget_items", "category, item"), params),
        "Listing budget items for export",
    )
    vendors = unwrap_rows(await execute_sql(db_queries.list_by_project_query("vendors", "category, name"), params),
                          "Listing vendors for export")
    seating = await get_seating_chart(project_id)

    logging.info(f"Collected export data for project {project_id}: {len(tasks)} tasks, {len(guests)} guests")
    return {
        "project": project,
        "tasks": tasks,
        "guests": guests,
        "budget_items": budget_items,
        "vendors": vendors,
        "seating": seating,
        "stats": compute_stats(tasks, guests, budget_items, vendors),
    }


def _task_rows(data):
    header = ["Title", "Description", "Category", "Due Date", "Priority", "Status", "Completed"]
    rows = [[t["title"], t.get("description") or "", t.get("category") or "", t.get("due_date") or "",
             t.get("priority") or "medium", t.get("status") or "", _yes_no(t.get("completed_at"))]
            for t in data["tasks"]]
    return header, rows


def _guest_rows(data):
    header = ["Name", "Email", "Phone", "Group", "RSVP Status", "Meal Preference", "Plus One", "Notes"]
    rows = [[g["name"], g.get("email") or "", g.get("phone") or "", g.get("group_name") or "",
             g.get("rsvp_status") or "pending", g.get("meal_preference") or "", _yes_no(g.get("plus_one")),
             g.get("notes") or ""]
            for g in data["guests"]]
    return header, rows


def _budget_rows(data):
    header = ["Category", "Item", "Percent", "Estimated Cost", "Actual Cost", "Paid", "Notes"]
    rows = [[b["category"], b["item"], "" if b.get("percent") is None else b["percent"],
             _money(b.get("estimated_cost")), _money(b.get("actual_cost")), _yes_no(b.get("is_paid")),
             b.get("notes") or ""]
            for b in data["budget_items"]]
    return header, rows


def _vendor_rows(data):
    header = ["Name", "Category", "Email", "Phone", "Quote", "Status", "Contract Signed", "Notes"]
    rows = [[v["name"], v["category"], v.get("email") or "", v.get("phone") or "",
             _money(v["quote"]) if v.get("quote") else "", v.get("status") or "pending",
             _yes_no(v.get("contract_signed")), v.get("notes") or ""]
            for v in data["vendors"]]
    return header, rows


def _seating_rows(data):
    header = ["Table", "Seat", "Guest"]
    tables = {table["table_id"]: table["name"] for table in data["seating"]["tables"]}
    rows = [[tables.get(a["table_id"], ""), a.get("seat_number") or "", a["guest_name"]]
            for a in data["seating"]["assignments"]]
    rows.extend(["", "", g["name"]] for g in data["seating"]["unassigned_guests"])
    return header, rows


_ROW_BUILDERS: Dict[str, Callable[[Dict[str, Any]], Tuple[Sequence[str], List[list]]]] = {
    "tasks": _task_rows,
    "guests": _guest_rows,
    "budget": _budget_rows,
    "vendors": _vendor_rows,
    "seating": _seating_rows,
}


def to_csv(data: Dict[str, Any], entity: str) -> str:
    """Renders one entity of ``get_all_project_data`` output as CSV text with a header row."""
    if entity not in _ROW_BUILDERS:
        raise ValueError(f"Unknown export entity '{entity}'. Expected one of {', '.join(EXPORT_ENTITIES)}.")
    header, rows = _ROW_BUILDERS[entity](data)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def generate_summary(data: Dict[str, Any]) -> str:
    """Plain-text progress report for sharing."""
    project, stats = data["project"], data["stats"]
    lines = [
        f"{project['name']} - Planning Summary",
        "",
        f"Date: {project.get('wedding_date') or 'TBD'}",
        f"Venue: {project.get('venue') or 'TBD'}",
        f"Guest count: {project.get('guest_count') or 'TBD'}",
        "",
        f"Tasks: {stats['completed_tasks']}/{stats['total_tasks']} completed "
        f"({_percent(stats['completed_tasks'], stats['total_tasks'])}%)",
        f"Guests: {stats['confirmed_guests']}/{stats['total_guests']} confirmed "
        f"({_percent(stats['confirmed_guests'], stats['total_guests'])}%)",
        f"Budget: {_money(stats['spent_budget'])}/{_money(stats['total_budget'])} used "
        f"({_percent(stats['spent_budget'], stats['total_budget'])}%)",
        f"Vendors: {stats['booked_vendors']}/{stats['total_vendors']} booked",
    ]
    open_tasks = [t for t in data["tasks"] if not t.get("completed_at") and t.get("status") != "completed"][:5]
    if open_tasks:
        lines.extend(["", "Next tasks:"])
        lines.extend(f"- {t['title']}" + (f" (due {t['due_date']})" if t.get("due_date") else "") for t in open_tasks)
    return "\n".join(lines) + "\n"
