from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, Response
from typing import Any, Dict
import logging

from api.projects.services import require_project_member
from planhaus.export_service import EXPORT_ENTITIES, generate_summary, get_all_project_data, to_csv

export_router = APIRouter()


@export_router.get("/stats")
async def get_stats(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    data = await get_all_project_data(project_id)
    return data["stats"]


@export_router.get("/summary.txt", response_class=PlainTextResponse)
async def get_summary(project_id: str, membership: Dict[str, Any] = Depends(require_project_member)):
    data = await get_all_project_data(project_id)
    return PlainTextResponse(generate_summary(data))


@export_router.get("/{entity}.csv")
async def get_csv(project_id: str, entity: str, membership: Dict[str, Any] = Depends(require_project_member)):
    if entity not in EXPORT_ENTITIES:
        raise HTTPException(status_code=404, detail=f"Unknown export '{entity}'.")
    logging.info(f"Exporting {entity} for project {project_id}")
    data = await get_all_project_data(project_id)
    return Response(
        content=to_csv(data, entity),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{entity}.csv"'},
    )
