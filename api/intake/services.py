import logging
from typing import Any, Dict, Optional

import planhaus.db_queries as db_queries
from planhaus.helpers import execute_sql, loads_json, unwrap_rows
from planhaus.models import new_id
from planhaus.prefill.completion import get_intake_completion, is_intake_complete
from planhaus.prefill.mappings import to_budget_plan, to_project_meta
from planhaus.projects import create_project, ensure_member

DRAFT = "draft"
SUBMITTED = "submitted"


async def find_intake(user_id: str, project_id: Optional[str], any_member: bool = False) -> Optional[Dict[str, Any]]:
    """
    The caller's intake for ``project_id`` (or their unlinked draft when no
    project is given). With ``any_member`` a project intake written by another
    member is returned when the caller has none.
    """
    if project_id is None:
        result = await execute_sql(db_queries.get_unlinked_intake_query(), {"user_id": user_id})
        rows = unwrap_rows(result, "Fetching intake draft")
        return rows[0] if rows else None

    await ensure_member(project_id, user_id)
    result = await execute_sql(db_queries.get_intake_by_project_query(),
                               {"user_id": user_id, "project_id": project_id})
    rows = unwrap_rows(result, "Fetching project intake")
    if not rows and any_member:
        result = await execute_sql(db_queries.get_latest_intake_for_project_query(), {"project_id": project_id})
        rows = unwrap_rows(result, "Fetching project intake")
    return rows[0] if rows else None


def intake_data(record: Dict[str, Any]) -> Dict[str, Any]:
    return loads_json(record.get("raw_data"), default={})


def describe_intake(record: Dict[str, Any]) -> Dict[str, Any]:
    data = intake_data(record)
    return {
        "intake_id": record["intake_id"],
        "project_id": record.get("project_id"),
        "status": record["status"],
        "data": data,
        "completion_percentage": get_intake_completion(data),
        "is_complete": is_intake_complete(data),
        "updated_at": record.get("updated_at"),
    }


async def store_intake(user_id: str, project_id: Optional[str], existing: Optional[Dict[str, Any]],
                       data: Dict[str, Any], status: str) -> Dict[str, Any]:
    if existing is None:
        params = {"intake_id": new_id(), "user_id": user_id, "project_id": project_id,
                  "raw_data": data, "status": status}
        record = unwrap_rows(await execute_sql(db_queries.create_intake_query(), params), "Creating intake")[0]
        logging.info(f"Created {status} intake {record['intake_id']} for user {user_id}")
        return record

    params = {"intake_id": existing["intake_id"], "raw_data": data, "status": status}
    return unwrap_rows(await execute_sql(db_queries.update_intake_query(), params), "Updating intake")[0]


async def create_project_from_intake(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    meta = to_project_meta(data)
    budget_plan = to_budget_plan(data)
    fields = {
        "name": meta.title,
        "wedding_date": meta.date,
        "city": meta.city or None,
        "country": meta.country or None,
        "venue": meta.venue or None,
        "guest_count": meta.guest_count or None,
        "budget": budget_plan.total if budget_plan is not None else None,
        "description": meta.description,
        "style_tags": meta.style_vibes,
    }
    return await create_project(user_id, fields)


async def link_intake(intake_id: str, project_id: str) -> None:
    result = await execute_sql(db_queries.link_intake_project_query(),
                               {"intake_id": intake_id, "project_id": project_id})
    unwrap_rows(result, "Linking intake to project")
