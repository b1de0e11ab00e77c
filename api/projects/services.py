import datetime
import logging
from typing import Any, Callable, Dict, List, NamedTuple

from fastapi import Depends

import planhaus.db_queries as db_queries
from api.security import get_current_user_id
from planhaus.helpers import execute_sql, execute_sql_transaction, first_row_or_404, unwrap_rows
from planhaus.models import new_id
from planhaus.projects import ensure_member, record_activity


class Resource(NamedTuple):
    table: str
    entity_type: str
    label_field: str
    creator_column: str
    order_by: str
    create_query: Callable[[], str]

    @property
    def id_column(self) -> str:
        return db_queries.ID_COLUMNS[self.table]

    @property
    def display_name(self) -> str:
        return self.entity_type.replace("_", " ").capitalize()


TASKS = Resource("tasks", "task", "title", "created_by", "due_date, title", db_queries.create_task_query)
BUDGET_ITEMS = Resource("budget_items", "budget_item", "item", "created_by", "category, item",
                        db_queries.create_budget_item_query)
GUESTS = Resource("guests", "guest", "name", "added_by", "name", db_queries.create_guest_query)
VENDORS = Resource("vendors", "vendor", "name", "added_by", "category, name", db_queries.create_vendor_query)


async def require_project_member(project_id: str, user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """Dependency for routes under ``/projects/{project_id}``: the caller's membership row."""
    return await ensure_member(project_id, user_id)


def _create_params(resource: Resource, project_id: str, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **fields,
        resource.id_column: new_id(),
        "project_id": project_id,
        resource.creator_column: user_id,
    }


def _stamp_completion(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Keeps ``completed_at`` in step with a task status change."""
    if "status" not in updates:
        return updates
    if updates["status"] == "completed":
        updates["completed_at"] = datetime.datetime.now(datetime.timezone.utc)
    else:
        updates["completed_at"] = None
    return updates


async def list_entities(resource: Resource, project_id: str) -> List[Dict[str, Any]]:
    result = await execute_sql(db_queries.list_by_project_query(resource.table, resource.order_by),
                               {"project_id": project_id})
    return unwrap_rows(result, f"Listing {resource.table}")


async def create_entity(resource: Resource, project_id: str, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    result = await execute_sql(resource.create_query(), _create_params(resource, project_id, user_id, fields))
    row = unwrap_rows(result, f"Creating {resource.entity_type}")[0]
    await record_activity(project_id, user_id, "created", resource.entity_type,
                          row[resource.id_column], row.get(resource.label_field))
    logging.info(f"Created {resource.entity_type} {row[resource.id_column]} in project {project_id}")
    return row


async def create_entities(resource: Resource, project_id: str, user_id: str,
                          items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Creates several rows in one transaction; either all are stored or none."""
    statements = [(resource.create_query(), _create_params(resource, project_id, user_id, fields))
                  for fields in items]
    result = await execute_sql_transaction(statements)
    rows = [created[0] for created in unwrap_rows(result, f"Creating {resource.table}")]
    await record_activity(project_id, user_id, "created", resource.entity_type, None,
                          f"{len(rows)} {resource.table}", {"count": len(rows)})
    logging.info(f"Created {len(rows)} {resource.table} in project {project_id}")
    return rows


async def update_entity(resource: Resource, project_id: str, entity_id: str, user_id: str,
                        updates: Dict[str, Any]) -> Dict[str, Any]:
    if resource is TASKS:
        updates = _stamp_completion(updates)
    if not updates:
        result = await execute_sql(db_queries.get_by_id_query(resource.table),
                                   {resource.id_column: entity_id, "project_id": project_id})
        return first_row_or_404(result, f"Fetching {resource.entity_type}", resource.display_name, entity_id)

    sql = db_queries.update_fields_query(resource.table, list(updates.keys()))
    result = await execute_sql(sql, {**updates, resource.id_column: entity_id, "project_id": project_id})
    row = first_row_or_404(result, f"Updating {resource.entity_type}", resource.display_name, entity_id)
    await record_activity(project_id, user_id, "updated", resource.entity_type, entity_id,
                          row.get(resource.label_field), {"fields": sorted(updates.keys())})
    return row


async def delete_entity(resource: Resource, project_id: str, entity_id: str, user_id: str) -> None:
    # seating assignments of a deleted guest go with it (ON DELETE CASCADE)
    result = await execute_sql(db_queries.delete_by_id_query(resource.table),
                               {resource.id_column: entity_id, "project_id": project_id})
    first_row_or_404(result, f"Deleting {resource.entity_type}", resource.display_name, entity_id)
    await record_activity(project_id, user_id, "deleted", resource.entity_type, entity_id)
    logging.info(f"Deleted {resource.entity_type} {entity_id} from project {project_id}")
