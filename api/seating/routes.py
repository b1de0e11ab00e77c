from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import Any, Dict
import logging

from api.projects.services import require_project_member
from api.seating.models import AssignGuestRequest, SeatingChart, TableCreate, TableUpdate
from planhaus.projects import record_activity
from planhaus.seating import (
    assign_guest_to_table,
    create_table,
    delete_table,
    get_seating_chart,
    remove_assignment,
    remove_guest_from_table,
    update_table,
)

seating_router = APIRouter()


@seating_router.get("", response_model=SeatingChart)
async def get_chart(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    return SeatingChart(**await get_seating_chart(project_id))


@seating_router.post("/tables", status_code=status.HTTP_201_CREATED)
async def post_table(project_id: str, table: TableCreate,
                     membership: Dict[str, Any] = Depends(require_project_member)):
    created = await create_table(project_id, membership["user_id"], **table.model_dump())
    await record_activity(project_id, membership["user_id"], "created", "seating_table",
                          created["table_id"], created["name"])
    return created


@seating_router.patch("/tables/{table_id}")
async def patch_table(project_id: str, table_id: str, table_update: TableUpdate,
                      membership: Dict[str, Any] = Depends(require_project_member)):
    logging.info(f"Updating seating table {table_id} in project {project_id}: {table_update.model_dump_json()}")
    return await update_table(project_id, table_id, table_update.model_dump(exclude_none=True))


@seating_router.delete("/tables/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_table(project_id: str, table_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    await delete_table(project_id, table_id)
    await record_activity(project_id, membership["user_id"], "deleted", "seating_table", table_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@seating_router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def post_assignment(project_id: str, request: AssignGuestRequest,
                          membership: Dict[str, Any] = Depends(require_project_member)):
    assignment = await assign_guest_to_table(project_id, request.guest_id, request.table_id, request.seat_number)
    await record_activity(project_id, membership["user_id"], "assigned", "guest", request.guest_id,
                          details={"table_id": request.table_id, "seat_number": request.seat_number})
    return assignment


@seating_router.delete("/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_guest(project_id: str, guest_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    if not await remove_guest_from_table(project_id, guest_id):
        raise HTTPException(status_code=404, detail="Guest is not seated.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@seating_router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(project_id: str, assignment_id: str,
                            membership: Dict[str, Any] = Depends(require_project_member)):
    if not await remove_assignment(project_id, assignment_id):
        raise HTTPException(status_code=404, detail="Seating assignment not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
