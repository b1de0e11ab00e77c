import json
import logging
from typing import Any, Dict, List, Optional

import planhaus.db_queries as db_queries
from cache import get_from_cache, invalidate_cache, project_cache_key, set_to_cache
from planhaus.exceptions import AccessDeniedError, NotFoundError
from planhaus.helpers import execute_sql, first_row_or_404, loads_json, unwrap_rows
from planhaus.models import new_id

OWNER_ROLE = "owner"


def _decode_project(project: Dict[str, Any]) -> Dict[str, Any]:
    project["style_tags"] = loads_json(project.get("style_tags"), default=[])
    return project


async def create_project(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Creates a project and makes its creator the owner."""
    params = {
        "project_id": new_id(),
        "name": fields.get("name") or "New Wedding Project",
        "wedding_date": fields.get("wedding_date"),
        "city": fields.get("city"),
        "country": fields.get("country"),
        "venue": fields.get("venue"),
        "guest_count": fields.get("guest_count"),
        "budget": fields.get("budget"),
        "style": fields.get("style"),
        "description": fields.get("description"),
        "style_tags": fields.get("style_tags") or [],
        "created_by": user_id,
    }
    project = unwrap_rows(await execute_sql(db_queries.create_project_query(), params), "Creating project")[0]
    await add_member(project["project_id"], user_id, OWNER_ROLE)
    await record_activity(project["project_id"], user_id, "created", "project", project["project_id"], project["name"])
    logging.info(f"Created project {project['project_id']} for user {user_id}")
    return _decode_project(project)


async def get_project(project_id: str) -> Dict[str, Any]:
    cache_key = project_cache_key(project_id)
    cached = get_from_cache(cache_key)
    if cached:
        return cached

    result = await execute_sql(db_queries.get_project_query(), {"project_id": project_id})
    project = _decode_project(first_row_or_404(result, "Fetching project", "Project", project_id))
    set_to_cache(cache_key, project)
    return project


async def list_projects(user_id: str) -> List[Dict[str, Any]]:
    result = await execute_sql(db_queries.list_projects_for_user_query(), {"user_id": user_id})
    return [_decode_project(row) for row in unwrap_rows(result, "Listing projects")]


async def update_project(project_id: str, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    if not updates:
        return await get_project(project_id)
    sql = db_queries.update_fields_query("projects", list(updates.keys()))
    result = await execute_sql(sql, {**updates, "project_id": project_id})
    project = _decode_project(first_row_or_404(result, "Updating project", "Project", project_id))
    invalidate_cache(project_cache_key(project_id))
    await record_activity(project_id, user_id, "updated", "project", project_id, project["name"],
                          {"fields": sorted(updates.keys())})
    return project


async def add_member(project_id: str, user_id: str, role: str) -> Dict[str, Any]:
    result = await execute_sql(
        db_queries.add_project_member_query(),
        {"project_id": project_id, "user_id": user_id, "role": role},
    )
    return unwrap_rows(result, "Adding project member")[0]


async def list_members(project_id: str) -> List[Dict[str, Any]]:
    result = await execute_sql(db_queries.list_project_members_query(), {"project_id": project_id})
    return unwrap_rows(result, "Listing project members")


async def ensure_member(project_id: str, user_id: str) -> Dict[str, Any]:
    """
    Returns the caller's membership row. Raises NotFoundError for an unknown
    project and AccessDeniedError when the user is not a member.
    """
    await get_project(project_id)
    result = await execute_sql(
        db_queries.get_project_member_query(),
        {"project_id": project_id, "user_id": user_id},
    )
    rows = unwrap_rows(result, "Checking project membership")
    if not rows:
        logging.warning(f"User {user_id} denied access to project {project_id}")
        raise AccessDeniedError(f"User {user_id} is not a member of project {project_id}")
    return rows[0]


async def record_activity(project_id: str, user_id: str, action: str, entity_type: str,
                          entity_id: Optional[str] = None, entity_name: Optional[str] = None,
                          details: Optional[Dict[str, Any]] = None) -> None:
    params = {
        "activity_id": new_id(),
        "project_id": project_id,
        "user_id": user_id,
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "entity_name": entity_name,
        "details": json.dumps(details) if details is not None else None,
    }
    result = await execute_sql(db_queries.create_activity_query(), params)
    if result.get("status") == "error":
        # the feed is informational; the write it describes has already committed
        logging.error(f"Failed to record activity {action} {entity_type} for project {project_id}: {result.get('error')}")


async def list_activities(project_id: str, limit: Optional[int] = 50) -> List[Dict[str, Any]]:
    result = await execute_sql(db_queries.list_activities_query(limit), {"project_id": project_id})
    activities = unwrap_rows(result, "Listing activities")
    for activity in activities:
        activity["details"] = loads_json(activity.get("details"))
    return activities
