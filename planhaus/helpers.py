import asyncio
import datetime
import json
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from planhaus.db import get_engine
from planhaus.exceptions import ConflictError, NotFoundError, StorageError

# (sql, params) or (sql, params, require_rows); a required statement that
# returns no rows rolls the whole transaction back.
Statement = Union[Tuple[str, Optional[Dict[str, Any]]], Tuple[str, Optional[Dict[str, Any]], bool]]


class RowGuardFailed(Exception):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Statement {index} matched no rows")


def _normalize_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return value


def _normalize_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    normalized = {}
    for k, v in (params or {}).items():
        if isinstance(v, (dict, list)):
            normalized[k] = json.dumps(v)
        elif isinstance(v, (datetime.datetime, datetime.date)):
            normalized[k] = v.isoformat()
        else:
            normalized[k] = v
    return normalized


def _run_statements(statements: Sequence[Statement]) -> List[List[Dict[str, Any]]]:
    results = []
    with get_engine().begin() as conn:
        for index, statement in enumerate(statements):
            sql, params = statement[0], statement[1]
            result = conn.execute(text(sql), _normalize_params(params))
            if result.returns_rows:
                rows = [{k: _normalize_value(v) for k, v in row._mapping.items()} for row in result]
            else:
                rows = []
            if len(statement) > 2 and statement[2] and not rows:
                raise RowGuardFailed(index)
            results.append(rows)
    return results


async def execute_sql(sql: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Execute one parameterised statement and return a status envelope.

    Never raises. Returns ``{"status": "success", "data": [...rows]}`` or
    ``{"status": "error", "error": "..."}``; an integrity violation also sets
    ``"conflict": True`` so callers can map it to a 409.
    """
    start_time = time.perf_counter()
    logging.debug(f"execute_sql: Received SQL: {sql}, Params: {params}")
    try:
        results = await asyncio.to_thread(_run_statements, [(sql, params)])
    except IntegrityError as e:
        logging.warning(f"execute_sql: Integrity violation for SQL '{sql[:80]}...': {e.orig}")
        return {"status": "error", "error": str(e.orig), "conflict": True}
    except SQLAlchemyError as e:
        logging.exception(f"execute_sql: Database error executing SQL '{sql[:80]}...': {e}")
        return {"status": "error", "error": "An unexpected error occurred during SQL execution."}
    duration = (time.perf_counter() - start_time) * 1000
    logging.info(f"execute_sql: Query executed successfully. Duration: {duration:.2f}ms. SQL: {sql.strip()[:50]}...")
    return {"status": "success", "data": results[0]}


async def execute_sql_transaction(statements: Sequence[Statement]) -> Dict[str, Any]:
    """Execute several statements in one transaction.

    All statements commit together or none do. On success ``data`` holds one
    row list per statement, in order.
    """
    start_time = time.perf_counter()
    logging.debug(f"execute_sql_transaction: Received {len(statements)} statements.")
    try:
        results = await asyncio.to_thread(_run_statements, statements)
    except RowGuardFailed as e:
        logging.info(f"execute_sql_transaction: Guard on statement {e.index} failed, transaction rolled back.")
        return {"status": "error", "error": str(e), "guard_failed": True}
    except IntegrityError as e:
        logging.warning(f"execute_sql_transaction: Integrity violation, transaction rolled back: {e.orig}")
        return {"status": "error", "error": str(e.orig), "conflict": True}
    except SQLAlchemyError as e:
        logging.exception(f"execute_sql_transaction: Transaction rolled back: {e}")
        return {"status": "error", "error": "An unexpected error occurred during SQL execution."}
    duration = (time.perf_counter() - start_time) * 1000
    logging.info(f"execute_sql_transaction: Committed {len(statements)} statements. Duration: {duration:.2f}ms")
    return {"status": "success", "data": results}


def loads_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON text column; values already decoded pass through."""
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logging.warning(f"loads_json: Could not decode stored JSON value: {str(value)[:80]}")
        return default


def get_current_datetime() -> Dict[str, Any]:
    """
    Returns the current UTC date and time in ISO 8601 format.
    """
    current_utc_datetime = datetime.datetime.now(datetime.timezone.utc)
    return {"current_datetime_utc": current_utc_datetime.isoformat()}


def unwrap_rows(result: Dict[str, Any], action: str) -> List[Dict[str, Any]]:
    """Returns the rows of a success envelope, raising the matching domain error otherwise."""
    if result.get("status") == "error":
        error_message = result.get("error", "Unknown error")
        if result.get("conflict"):
            raise ConflictError(f"{action} conflicts with existing data: {error_message}")
        raise StorageError(f"{action} failed: {error_message}")
    return result.get("data") or []


def first_row_or_404(result: Dict[str, Any], action: str, entity: str, entity_id: Any = None) -> Dict[str, Any]:
    rows = unwrap_rows(result, action)
    if not rows:
        raise NotFoundError(entity, entity_id)
    return rows[0]
