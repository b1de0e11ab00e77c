from fastapi import APIRouter, Depends, Query, Response, status
from typing import Any, Dict, List, Optional
import logging

from api.projects.models import (
    BudgetItemCreate,
    BudgetItemUpdate,
    BulkTaskCreate,
    GuestCreate,
    GuestUpdate,
    MemberCreate,
    PreferenceDocument,
    PrefillSummary,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    TaskCreate,
    TaskUpdate,
    VendorCreate,
    VendorUpdate,
)
from api.projects.services import (
    BUDGET_ITEMS,
    GUESTS,
    TASKS,
    VENDORS,
    Resource,
    create_entities,
    create_entity,
    delete_entity,
    list_entities,
    require_project_member,
    update_entity,
)
from api.security import get_current_user_id
from planhaus.exceptions import AccessDeniedError
from planhaus.prefill.mappings import PrefillBundle
from planhaus.prefill.service import apply_prefill, compute_project_bundle, get_preference, put_preference
from planhaus.projects import (
    OWNER_ROLE,
    add_member,
    create_project,
    get_project,
    list_activities,
    list_members,
    list_projects,
    update_project,
)

projects_router = APIRouter()


# --- Projects ---

@projects_router.get("", response_model=List[ProjectResponse])
async def get_projects(user_id: str = Depends(get_current_user_id)):
    logging.info(f"Listing projects for user {user_id}")
    return [ProjectResponse(**project) for project in await list_projects(user_id)]


@projects_router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def post_project(project: ProjectCreate, user_id: str = Depends(get_current_user_id)):
    logging.info(f"Creating project '{project.name}' for user {user_id}")
    created = await create_project(user_id, project.model_dump())
    return ProjectResponse(**created, role=OWNER_ROLE)


@projects_router.get("/{project_id}", response_model=ProjectResponse)
async def get_project_details(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    project = await get_project(project_id)
    return ProjectResponse(**project, role=membership["role"])


@projects_router.patch("/{project_id}", response_model=ProjectResponse)
async def patch_project(project_id: str, project_update: ProjectUpdate,
                        membership: Dict[str, Any] = Depends(require_project_member)):
    logging.info(f"Received update request for project {project_id}: {project_update.model_dump_json()}")
    updates = project_update.model_dump(exclude_none=True)
    project = await update_project(project_id, membership["user_id"], updates)
    return ProjectResponse(**project, role=membership["role"])


@projects_router.get("/{project_id}/members")
async def get_members(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_members(project_id)


@projects_router.post("/{project_id}/members", status_code=status.HTTP_201_CREATED)
async def post_member(project_id: str, member: MemberCreate,
                      membership: Dict[str, Any] = Depends(require_project_member)):
    if membership["role"] != OWNER_ROLE:
        raise AccessDeniedError(f"Only the project owner can add members to {project_id}")
    logging.info(f"Adding {member.user_id} to project {project_id} as {member.role}")
    return await add_member(project_id, member.user_id, member.role)


@projects_router.get("/{project_id}/activities")
async def get_activities(project_id: str, limit: int = Query(default=50, ge=1, le=500),
                         membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_activities(project_id, limit)


# --- Tasks, budget items, guests, vendors ---

async def _patch(resource: Resource, project_id: str, entity_id: str, membership: Dict[str, Any], update):
    return await update_entity(resource, project_id, entity_id, membership["user_id"],
                               update.model_dump(exclude_none=True))


@projects_router.get("/{project_id}/tasks")
async def get_tasks(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_entities(TASKS, project_id)


@projects_router.post("/{project_id}/tasks", status_code=status.HTTP_201_CREATED)
async def post_task(project_id: str, task: TaskCreate, membership: Dict[str, Any] = Depends(require_project_member)):
    return await create_entity(TASKS, project_id, membership["user_id"], task.model_dump())


@projects_router.post("/{project_id}/tasks/bulk", status_code=status.HTTP_201_CREATED)
async def post_tasks_bulk(project_id: str, request: BulkTaskCreate,
                          membership: Dict[str, Any] = Depends(require_project_member)):
    return await create_entities(TASKS, project_id, membership["user_id"],
                                 [task.model_dump() for task in request.tasks])


@projects_router.patch("/{project_id}/tasks/{task_id}")
async def patch_task(project_id: str, task_id: str, task_update: TaskUpdate,
                     membership: Dict[str, Any] = Depends(require_project_member)):
    return await _patch(TASKS, project_id, task_id, membership, task_update)


@projects_router.delete("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_task(project_id: str, task_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    await delete_entity(TASKS, project_id, task_id, membership["user_id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@projects_router.get("/{project_id}/budget")
async def get_budget_items(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_entities(BUDGET_ITEMS, project_id)


@projects_router.post("/{project_id}/budget", status_code=status.HTTP_201_CREATED)
async def post_budget_item(project_id: str, item: BudgetItemCreate,
                           membership: Dict[str, Any] = Depends(require_project_member)):
    return await create_entity(BUDGET_ITEMS, project_id, membership["user_id"], item.model_dump())


@projects_router.patch("/{project_id}/budget/{item_id}")
async def patch_budget_item(project_id: str, item_id: str, item_update: BudgetItemUpdate,
                            membership: Dict[str, Any] = Depends(require_project_member)):
    return await _patch(BUDGET_ITEMS, project_id, item_id, membership, item_update)


@projects_router.delete("/{project_id}/budget/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_budget_item(project_id: str, item_id: str,
                             membership: Dict[str, Any] = Depends(require_project_member)):
    await delete_entity(BUDGET_ITEMS, project_id, item_id, membership["user_id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@projects_router.get("/{project_id}/guests")
async def get_guests(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_entities(GUESTS, project_id)


@projects_router.post("/{project_id}/guests", status_code=status.HTTP_201_CREATED)
async def post_guest(project_id: str, guest: GuestCreate,
                     membership: Dict[str, Any] = Depends(require_project_member)):
    return await create_entity(GUESTS, project_id, membership["user_id"], guest.model_dump())


@projects_router.patch("/{project_id}/guests/{guest_id}")
async def patch_guest(project_id: str, guest_id: str, guest_update: GuestUpdate,
                      membership: Dict[str, Any] = Depends(require_project_member)):
    return await _patch(GUESTS, project_id, guest_id, membership, guest_update)


@projects_router.delete("/{project_id}/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_guest(project_id: str, guest_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    await delete_entity(GUESTS, project_id, guest_id, membership["user_id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@projects_router.get("/{project_id}/vendors")
async def get_vendors(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return await list_entities(VENDORS, project_id)


@projects_router.post("/{project_id}/vendors", status_code=status.HTTP_201_CREATED)
async def post_vendor(project_id: str, vendor: VendorCreate,
                      membership: Dict[str, Any] = Depends(require_project_member)):
    return await create_entity(VENDORS, project_id, membership["user_id"], vendor.model_dump())


@projects_router.patch("/{project_id}/vendors/{vendor_id}")
async def patch_vendor(project_id: str, vendor_id: str, vendor_update: VendorUpdate,
                       membership: Dict[str, Any] = Depends(require_project_member)):
    return await _patch(VENDORS, project_id, vendor_id, membership, vendor_update)


@projects_router.delete("/{project_id}/vendors/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_vendor(project_id: str, vendor_id: str,
                        membership: Dict[str, Any] = Depends(require_project_member)):
    await delete_entity(VENDORS, project_id, vendor_id, membership["user_id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Preferences and prefill ---

@projects_router.get("/{project_id}/preferences/{kind}", response_model=PreferenceDocument)
async def get_project_preference(project_id: str, kind: str,
                                 membership: Dict[str, Any] = Depends(require_project_member)):
    return PreferenceDocument(kind=kind, data=await get_preference(project_id, kind))


@projects_router.put("/{project_id}/preferences/{kind}", response_model=PreferenceDocument)
async def put_project_preference(project_id: str, kind: str, document: Dict[str, Any],
                                 membership: Dict[str, Any] = Depends(require_project_member)):
    logging.info(f"Replacing {kind} preferences for project {project_id}")
    return PreferenceDocument(kind=kind, data=await put_preference(project_id, kind, document))


@projects_router.get("/{project_id}/prefill", response_model=PrefillBundle, response_model_by_alias=True)
async def get_prefill_bundle(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    """Derived project data from the latest intake, without writing anything."""
    return await compute_project_bundle(project_id)


@projects_router.post("/{project_id}/prefill", response_model=PrefillSummary)
async def post_prefill(project_id: str, bundle: Optional[PrefillBundle] = None,
                       membership: Dict[str, Any] = Depends(require_project_member)):
    if bundle is None:
        bundle = await compute_project_bundle(project_id)
    logging.info(f"Applying prefill to project {project_id} for user {membership['user_id']}")
    summary = await apply_prefill(project_id, bundle, membership["user_id"])
    return PrefillSummary(**summary)
