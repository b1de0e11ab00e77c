"""
Seating chart: tables with a seat capacity and guest-to-table assignments.

A guest is either unassigned or seated at exactly one table (optionally at a
numbered seat). Moving a guest replaces the old assignment inside a single
transaction, and the unique constraint on ``seating_assignments.guest_id``
backs that up. Tables never hold more guests than ``max_seats``.
"""
import logging
from typing import Any, Dict, List, Optional

import planhaus.db_queries as db_queries
from planhaus.exceptions import NotFoundError, SeatingCapacityError
from planhaus.helpers import execute_sql, execute_sql_transaction, first_row_or_404, unwrap_rows
from planhaus.models import new_id


async def get_table(project_id: str, table_id: str) -> Dict[str, Any]:
    result = await execute_sql(db_queries.get_seating_table_query(), {"table_id": table_id})
    table = first_row_or_404(result, "Fetching seating table", "Table", table_id)
    if table["project_id"] != project_id:
        raise NotFoundError("Table", table_id)
    return table


async def _get_project_guest(project_id: str, guest_id: str) -> Dict[str, Any]:
    result = await execute_sql(db_queries.get_guest_query(), {"guest_id": guest_id})
    guest = first_row_or_404(result, "Fetching guest", "Guest", guest_id)
    if guest["project_id"] != project_id:
        raise NotFoundError("Guest", guest_id)
    return guest


async def _count_occupants(table_id: str, excluding_guest_id: str = "") -> int:
    result = await execute_sql(
        db_queries.count_table_occupants_query(),
        {"table_id": table_id, "guest_id": excluding_guest_id},
    )
    rows = unwrap_rows(result, "Counting table occupants")
    return int(rows[0]["occupants"]) if rows else 0


async def create_table(project_id: str, user_id: str, name: str, max_seats: int = 8, shape: str = "round",
                       position_x: int = 0, position_y: int = 0) -> Dict[str, Any]:
    params = {
        "table_id": new_id(),
        "project_id": project_id,
        "name": name,
        "max_seats": max_seats,
        "shape": shape,
        "position_x": position_x,
        "position_y": position_y,
        "created_by": user_id,
    }
    result = await execute_sql(db_queries.create_seating_table_query(), params)
    table = unwrap_rows(result, "Creating seating table")[0]
    logging.info(f"Created seating table {table['table_id']} ('{name}', {max_seats} seats) for project {project_id}")
    return table


async def update_table(project_id: str, table_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Applies a partial update; shrinking below the current head count or an occupied seat is refused."""
    table = await get_table(project_id, table_id)
    if not updates:
        return table

    new_max = updates.get("max_seats")
    if new_max is not None and new_max < table["max_seats"]:
        occupants = await _count_occupants(table_id)
        if occupants > new_max:
            raise SeatingCapacityError(
                f"Table '{table['name']}' has {occupants} guests seated; cannot reduce to {new_max} seats"
            )
        result = await execute_sql(db_queries.get_highest_seat_query(), {"table_id": table_id})
        highest_seat = unwrap_rows(result, "Checking occupied seats")[0]["highest_seat"]
        if highest_seat is not None and highest_seat > new_max:
            raise SeatingCapacityError(
                f"Seat {highest_seat} at table '{table['name']}' is occupied; cannot reduce to {new_max} seats"
            )

    sql = db_queries.update_fields_query("seating_tables", list(updates.keys()))
    result = await execute_sql(sql, {**updates, "table_id": table_id, "project_id": project_id})
    return first_row_or_404(result, "Updating seating table", "Table", table_id)


async def delete_table(project_id: str, table_id: str) -> bool:
    """Deletes the table and its assignments together; its guests become unassigned."""
    await get_table(project_id, table_id)
    result = await execute_sql_transaction([
        (db_queries.delete_table_assignments_query(), {"table_id": table_id}),
        (db_queries.delete_by_id_query("seating_tables"), {"table_id": table_id, "project_id": project_id}),
    ])
    deleted = unwrap_rows(result, "Deleting seating table")[1]
    logging.info(f"Deleted seating table {table_id} for project {project_id}")
    return bool(deleted)


async def assign_guest_to_table(project_id: str, guest_id: str, table_id: str,
                                seat_number: Optional[int] = None) -> Dict[str, Any]:
    """
    Seats a guest at a table, replacing any assignment they already had.

    Raises NotFoundError when the guest or table is not part of the project,
    and SeatingCapacityError when the table is full, the seat number is out
    of range, or another guest holds that seat. A failed move leaves the
    previous assignment in place.
    """
    table = await get_table(project_id, table_id)
    await _get_project_guest(project_id, guest_id)
    max_seats = table["max_seats"]

    if seat_number is not None and not 1 <= seat_number <= max_seats:
        raise SeatingCapacityError(f"Seat {seat_number} does not exist at table '{table['name']}' (1-{max_seats})")

    if await _count_occupants(table_id, guest_id) >= max_seats:
        raise SeatingCapacityError(f"Table '{table['name']}' is full ({max_seats} seats)")

    if seat_number is not None:
        holder = await execute_sql(
            db_queries.get_seat_holder_query(),
            {"table_id": table_id, "seat_number": seat_number, "guest_id": guest_id},
        )
        if unwrap_rows(holder, "Checking seat holder"):
            raise SeatingCapacityError(f"Seat {seat_number} at table '{table['name']}' is already taken")

    result = await execute_sql_transaction([
        (db_queries.delete_assignment_by_guest_query(), {"guest_id": guest_id, "project_id": project_id}),
        (db_queries.create_assignment_query(), {
            "assignment_id": new_id(),
            "project_id": project_id,
            "table_id": table_id,
            "guest_id": guest_id,
            "seat_number": seat_number,
        }, True),
    ])
    if result.get("guard_failed"):
        raise SeatingCapacityError(f"Table '{table['name']}' is full ({max_seats} seats)")
    if result.get("conflict"):
        raise SeatingCapacityError(f"Seat {seat_number} at table '{table['name']}' is already taken")

    assignment = unwrap_rows(result, "Assigning guest to table")[1][0]
    logging.info(f"Assigned guest {guest_id} to table {table_id} seat={seat_number} in project {project_id}")
    return assignment


async def remove_guest_from_table(project_id: str, guest_id: str) -> bool:
    """Unseats a guest; False when they had no assignment."""
    result = await execute_sql(
        db_queries.delete_assignment_by_guest_query(),
        {"guest_id": guest_id, "project_id": project_id},
    )
    return bool(unwrap_rows(result, "Removing guest from table"))


async def remove_assignment(project_id: str, assignment_id: str) -> bool:
    result = await execute_sql(
        db_queries.delete_assignment_query(),
        {"assignment_id": assignment_id, "project_id": project_id},
    )
    return bool(unwrap_rows(result, "Removing seating assignment"))


async def get_seating_chart(project_id: str) -> Dict[str, List[Dict[str, Any]]]:
    params = {"project_id": project_id}
    tables = unwrap_rows(
        await execute_sql(db_queries.list_by_project_query("seating_tables", "created_at, name"), params),
        "Listing seating tables",
    )
    assignments = unwrap_rows(await execute_sql(db_queries.list_assignments_query(), params), "Listing assignments")
    unassigned = unwrap_rows(
        await execute_sql(db_queries.list_unassigned_guests_query(), params),
        "Listing unassigned guests",
    )

    seated_per_table: Dict[str, int] = {}
    for assignment in assignments:
        seated_per_table[assignment["table_id"]] = seated_per_table.get(assignment["table_id"], 0) + 1
    for table in tables:
        table["seats_taken"] = seated_per_table.get(table["table_id"], 0)

    return {"tables": tables, "assignments": assignments, "unassigned_guests": unassigned}
