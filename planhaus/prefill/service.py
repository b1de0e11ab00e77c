"""Server side of project prefill: applies a mapped intake bundle in one transaction."""
import json
import logging
from typing import Any, Dict, List, Optional

import planhaus.db_queries as db_queries
from cache import invalidate_cache, project_cache_key
from planhaus.exceptions import NotFoundError
from planhaus.helpers import execute_sql, execute_sql_transaction, first_row_or_404, loads_json, unwrap_rows
from planhaus.models import new_id
from planhaus.prefill.mappings import (
    PLACEHOLDER_DESCRIPTION,
    PLACEHOLDER_TITLE,
    PrefillBundle,
    build_prefill_bundle,
)

PREFERENCE_KINDS = ("vendor", "site", "guest", "event", "style")
BUDGET_PLAN_ITEM = "Planned allocation"


async def get_project_intake(project_id: str) -> Dict[str, Any]:
    """Latest intake JSON linked to the project, from any member."""
    result = await execute_sql(db_queries.get_latest_intake_for_project_query(), {"project_id": project_id})
    record = first_row_or_404(result, "Fetching project intake", "Intake", project_id)
    return loads_json(record["raw_data"], default={})


async def compute_project_bundle(project_id: str) -> PrefillBundle:
    return build_prefill_bundle(await get_project_intake(project_id))


def _project_updates(bundle: PrefillBundle) -> Dict[str, Any]:
    meta = bundle.project_meta
    candidates = {
        "name": meta.title,
        "wedding_date": meta.date,
        "city": meta.city,
        "country": meta.country,
        "venue": meta.venue,
        "guest_count": meta.guest_count,
        "description": meta.description,
        "style_tags": meta.style_vibes,
    }
    if bundle.budget_plan is not None and bundle.budget_plan.total:
        candidates["budget"] = bundle.budget_plan.total
    # empty or placeholder values must not replace what the project already has
    if candidates["name"] == PLACEHOLDER_TITLE:
        del candidates["name"]
    if candidates["description"] == PLACEHOLDER_DESCRIPTION:
        del candidates["description"]
    return {key: value for key, value in candidates.items() if value not in (None, "", 0, [])}


def _preference_documents(bundle: PrefillBundle) -> Dict[str, Dict[str, Any]]:
    meta = bundle.project_meta
    return {
        "vendor": bundle.vendor_filters.model_dump(mode="json", by_alias=True),
        "site": bundle.site_prefs.model_dump(mode="json", by_alias=True),
        "guest": bundle.guest_prefs.model_dump(mode="json", by_alias=True),
        "event": bundle.event_details.model_dump(mode="json", by_alias=True),
        "style": {
            "styleVibes": meta.style_vibes,
            "colorPalette": meta.color_palette,
            "priorities": meta.priorities,
        },
    }


async def apply_prefill(project_id: str, bundle: PrefillBundle, user_id: str) -> Dict[str, Any]:
    """
    Writes project metadata, budget items, seed tasks and preference documents
    for ``project_id`` as one transaction. Seed tasks are keyed by title and
    budget items by (category, item), so applying the same bundle again leaves
    a single copy of each.
    """
    statements: List[tuple] = []

    project_updates = _project_updates(bundle)
    if project_updates:
        statements.append((
            db_queries.update_fields_query("projects", list(project_updates.keys())),
            {**project_updates, "project_id": project_id},
        ))

    budget_lines = bundle.budget_plan.categories if bundle.budget_plan is not None else []
    for line in budget_lines:
        statements.append((db_queries.upsert_budget_plan_item_query(), {
            "item_id": new_id(),
            "project_id": project_id,
            "category": line.name,
            "item": BUDGET_PLAN_ITEM,
            "percent": line.percent,
            "hard_cap": line.hard_cap,
            "estimated_cost": line.estimated_cost,
            "is_paid": False,
            "created_by": user_id,
        }))

    for task in bundle.timeline_tasks:
        statements.append((db_queries.insert_seed_task_query(), {
            "task_id": new_id(),
            "project_id": project_id,
            "title": task.title,
            "description": task.description,
            "category": task.category,
            "priority": task.priority,
            "status": task.status,
            "due_date": task.due_date,
            "created_by": user_id,
        }))

    preferences = _preference_documents(bundle)
    for kind, document in preferences.items():
        statements.append((db_queries.upsert_preference_query(), {
            "preference_id": new_id(),
            "project_id": project_id,
            "kind": kind,
            "data": document,
        }))

    summary = {
        "project_fields": sorted(project_updates.keys()),
        "budget_items": len(budget_lines),
        "tasks": len(bundle.timeline_tasks),
        "preferences": list(preferences.keys()),
    }
    statements.append((db_queries.create_activity_query(), {
        "activity_id": new_id(),
        "project_id": project_id,
        "user_id": user_id,
        "action": "prefilled",
        "entity_type": "project",
        "entity_id": project_id,
        "entity_name": bundle.project_meta.title,
        "details": json.dumps(summary),
    }))

    result = await execute_sql_transaction(statements)
    unwrap_rows(result, f"Applying prefill to project {project_id}")
    invalidate_cache(project_cache_key(project_id))
    logging.info(f"Applied prefill to project {project_id}: {summary}")
    return summary


async def get_preference(project_id: str, kind: str) -> Optional[Dict[str, Any]]:
    if kind not in PREFERENCE_KINDS:
        raise NotFoundError("Preference kind", kind)
    result = await execute_sql(db_queries.get_preference_query(), {"project_id": project_id, "kind": kind})
    rows = unwrap_rows(result, "Fetching project preference")
    if not rows:
        return None
    return loads_json(rows[0]["data"], default={})


async def put_preference(project_id: str, kind: str, document: Dict[str, Any]) -> Dict[str, Any]:
    if kind not in PREFERENCE_KINDS:
        raise NotFoundError("Preference kind", kind)
    result = await execute_sql(db_queries.upsert_preference_query(), {
        "preference_id": new_id(),
        "project_id": project_id,
        "kind": kind,
        "data": document,
    })
    unwrap_rows(result, "Saving project preference")
    return document
