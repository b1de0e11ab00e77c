import pytest
import pytest_asyncio

from api.projects.services import BUDGET_ITEMS, TASKS, list_entities
from planhaus.exceptions import NotFoundError
from planhaus.prefill.mappings import build_prefill_bundle
from planhaus.prefill.service import (
    BUDGET_PLAN_ITEM,
    apply_prefill,
    compute_project_bundle,
    get_preference,
    put_preference,
)
from planhaus.projects import create_project, get_project, list_activities

USER_ID = "user-1"


@pytest_asyncio.fixture
async def project_id(database):
    project = await create_project(USER_ID, {"name": "Untitled"})
    return project["project_id"]


@pytest.mark.asyncio
async def test_apply_prefill_writes_everything(project_id, complete_intake):
    summary = await apply_prefill(project_id, build_prefill_bundle(complete_intake), USER_ID)

    assert summary["tasks"] == 11
    assert summary["budget_items"] == 5
    assert summary["preferences"] == ["vendor", "site", "guest", "event", "style"]
    assert "name" in summary["project_fields"]

    project = await get_project(project_id)
    assert project["name"] == "Alex & Sam's Wedding"
    assert project["city"] == "Austin"
    assert project["wedding_date"] == "2025-06-15"
    assert project["style_tags"] == ["garden", "modern"]
    assert project["budget"] == 50000

    budget = await list_entities(BUDGET_ITEMS, project_id)
    venue = next(item for item in budget if item["category"] == "venue")
    assert venue["item"] == BUDGET_PLAN_ITEM
    assert venue["estimated_cost"] == pytest.approx(22500)

    vendor_prefs = await get_preference(project_id, "vendor")
    assert vendor_prefs["radiusMiles"] == 30
    assert vendor_prefs["location"]["zip"] == "78701"

    activities = await list_activities(project_id)
    assert "prefilled" in {activity["action"] for activity in activities}


@pytest.mark.asyncio
async def test_applying_twice_keeps_one_copy(project_id, complete_intake):
    bundle = build_prefill_bundle(complete_intake)
    await apply_prefill(project_id, bundle, USER_ID)
    await apply_prefill(project_id, bundle, USER_ID)

    tasks = await list_entities(TASKS, project_id)
    assert len(tasks) == 11
    assert len({task["title"] for task in tasks}) == 11
    assert len(await list_entities(BUDGET_ITEMS, project_id)) == 5


@pytest.mark.asyncio
async def test_empty_values_do_not_blank_project_fields(project_id):
    await apply_prefill(project_id, build_prefill_bundle({"step2": {"location": {"city": "Austin"}}}), USER_ID)
    await apply_prefill(project_id, build_prefill_bundle({}), USER_ID)

    project = await get_project(project_id)
    assert project["city"] == "Austin"
    assert project["wedding_date"] is None
    assert await list_entities(TASKS, project_id) == []


@pytest.mark.asyncio
async def test_placeholder_title_keeps_existing_name(database):
    project = await create_project(USER_ID, {"name": "Our Big Day", "description": "Lakeside, small"})
    project_id = project["project_id"]

    summary = await apply_prefill(
        project_id, build_prefill_bundle({"step2": {"location": {"city": "Austin"}}}), USER_ID
    )

    assert "name" not in summary["project_fields"]
    project = await get_project(project_id)
    assert (project["name"], project["description"], project["city"]) == ("Our Big Day", "Lakeside, small", "Austin")


@pytest.mark.asyncio
async def test_compute_bundle_needs_a_linked_intake(project_id):
    with pytest.raises(NotFoundError):
        await compute_project_bundle(project_id)


@pytest.mark.asyncio
async def test_preference_documents(project_id):
    assert await get_preference(project_id, "site") is None
    await put_preference(project_id, "site", {"tone": "formal"})
    await put_preference(project_id, "site", {"tone": "playful"})
    assert await get_preference(project_id, "site") == {"tone": "playful"}

    with pytest.raises(NotFoundError):
        await get_preference(project_id, "seating")
