import pytest
import pytest_asyncio

from api.projects.services import GUESTS, create_entity
from planhaus.exceptions import NotFoundError, SeatingCapacityError
from planhaus.projects import create_project
from planhaus.seating import (
    assign_guest_to_table,
    create_table,
    delete_table,
    get_seating_chart,
    remove_assignment,
    remove_guest_from_table,
    update_table,
)

USER_ID = "user-1"


async def _add_guest(project_id, name):
    guest = await create_entity(GUESTS, project_id, USER_ID, {
        "name": name, "email": None, "phone": None, "rsvp_status": "pending", "meal_preference": None,
        "plus_one": False, "group_name": None, "notes": None,
    })
    return guest["guest_id"]


@pytest_asyncio.fixture
async def project_id(database):
    project = await create_project(USER_ID, {"name": "Seating Test"})
    return project["project_id"]


def _seated_at(chart, guest_id):
    return [a["table_id"] for a in chart["assignments"] if a["guest_id"] == guest_id]


@pytest.mark.asyncio
async def test_moving_a_guest_keeps_one_assignment(project_id):
    guest = await _add_guest(project_id, "Ada")
    table_a = await create_table(project_id, USER_ID, "A")
    table_b = await create_table(project_id, USER_ID, "B")

    await assign_guest_to_table(project_id, guest, table_a["table_id"])
    await assign_guest_to_table(project_id, guest, table_b["table_id"], seat_number=3)

    chart = await get_seating_chart(project_id)
    assert _seated_at(chart, guest) == [table_b["table_id"]]
    assert chart["unassigned_guests"] == []
    seats_taken = {table["name"]: table["seats_taken"] for table in chart["tables"]}
    assert seats_taken == {"A": 0, "B": 1}


@pytest.mark.asyncio
async def test_full_table_rejects_new_guest_and_keeps_previous_seat(project_id):
    small = await create_table(project_id, USER_ID, "Small", max_seats=2)
    other = await create_table(project_id, USER_ID, "Other")
    first, second, third = [await _add_guest(project_id, name) for name in ("Ada", "Bo", "Cy")]

    await assign_guest_to_table(project_id, first, small["table_id"])
    await assign_guest_to_table(project_id, second, small["table_id"])
    await assign_guest_to_table(project_id, third, other["table_id"])

    with pytest.raises(SeatingCapacityError):
        await assign_guest_to_table(project_id, third, small["table_id"])

    chart = await get_seating_chart(project_id)
    assert _seated_at(chart, third) == [other["table_id"]]

    # re-seating someone already at a full table is not an overflow
    await assign_guest_to_table(project_id, first, small["table_id"], seat_number=2)


@pytest.mark.asyncio
async def test_seat_number_must_exist_and_be_free(project_id):
    table = await create_table(project_id, USER_ID, "Head", max_seats=4)
    ada, bo = await _add_guest(project_id, "Ada"), await _add_guest(project_id, "Bo")

    with pytest.raises(SeatingCapacityError):
        await assign_guest_to_table(project_id, ada, table["table_id"], seat_number=5)

    await assign_guest_to_table(project_id, ada, table["table_id"], seat_number=1)
    with pytest.raises(SeatingCapacityError):
        await assign_guest_to_table(project_id, bo, table["table_id"], seat_number=1)


@pytest.mark.asyncio
async def test_unknown_guest_or_table(project_id):
    table = await create_table(project_id, USER_ID, "A")
    guest = await _add_guest(project_id, "Ada")
    with pytest.raises(NotFoundError):
        await assign_guest_to_table(project_id, "missing-guest", table["table_id"])
    with pytest.raises(NotFoundError):
        await assign_guest_to_table(project_id, guest, "missing-table")


@pytest.mark.asyncio
async def test_tables_of_other_projects_are_not_visible(project_id):
    other_project = await create_project(USER_ID, {"name": "Other"})
    foreign_table = await create_table(other_project["project_id"], USER_ID, "Foreign")
    guest = await _add_guest(project_id, "Ada")
    with pytest.raises(NotFoundError):
        await assign_guest_to_table(project_id, guest, foreign_table["table_id"])


@pytest.mark.asyncio
async def test_remove_guest_and_assignment(project_id):
    table = await create_table(project_id, USER_ID, "A")
    ada, bo = await _add_guest(project_id, "Ada"), await _add_guest(project_id, "Bo")
    await assign_guest_to_table(project_id, ada, table["table_id"])
    assignment = await assign_guest_to_table(project_id, bo, table["table_id"])

    assert await remove_guest_from_table(project_id, ada) is True
    assert await remove_guest_from_table(project_id, ada) is False
    assert await remove_assignment(project_id, assignment["assignment_id"]) is True

    chart = await get_seating_chart(project_id)
    assert chart["assignments"] == []
    assert {guest["name"] for guest in chart["unassigned_guests"]} == {"Ada", "Bo"}


@pytest.mark.asyncio
async def test_deleting_a_table_unseats_its_guests(project_id):
    table = await create_table(project_id, USER_ID, "A")
    guest = await _add_guest(project_id, "Ada")
    await assign_guest_to_table(project_id, guest, table["table_id"])

    assert await delete_table(project_id, table["table_id"]) is True

    chart = await get_seating_chart(project_id)
    assert chart["tables"] == []
    assert [g["guest_id"] for g in chart["unassigned_guests"]] == [guest]


@pytest.mark.asyncio
async def test_table_cannot_shrink_below_its_guests(project_id):
    table = await create_table(project_id, USER_ID, "A", max_seats=4)
    for name in ("Ada", "Bo", "Cy"):
        await assign_guest_to_table(project_id, await _add_guest(project_id, name), table["table_id"])

    with pytest.raises(SeatingCapacityError):
        await update_table(project_id, table["table_id"], {"max_seats": 2})

    updated = await update_table(project_id, table["table_id"], {"max_seats": 3, "name": "Family"})
    assert (updated["max_seats"], updated["name"]) == (3, "Family")


@pytest.mark.asyncio
async def test_table_cannot_shrink_below_an_occupied_seat(project_id):
    table = await create_table(project_id, USER_ID, "A", max_seats=8)
    await assign_guest_to_table(project_id, await _add_guest(project_id, "Ada"), table["table_id"], seat_number=8)

    with pytest.raises(SeatingCapacityError):
        await update_table(project_id, table["table_id"], {"max_seats": 4})

    chart = await get_seating_chart(project_id)
    assert chart["tables"][0]["max_seats"] == 8
    assert chart["assignments"][0]["seat_number"] == 8

    updated = await update_table(project_id, table["table_id"], {"max_seats": 8, "name": "Family"})
    assert updated["name"] == "Family"
