from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from api.intake.models import (
    CompletionResponse,
    IntakeResponse,
    IntakeValidationFailure,
    SaveIntakeRequest,
    SubmitIntakeRequest,
)
from api.intake.services import (
    DRAFT,
    SUBMITTED,
    create_project_from_intake,
    describe_intake,
    find_intake,
    intake_data,
    link_intake,
    store_intake,
)
from api.security import get_current_user_id
from logger import intake_logger
from planhaus.intake_schema import PRESET_BUDGET_SPLITS, ValidationResult, validate_intake, validate_step
from planhaus.prefill.completion import get_intake_completion, is_intake_complete

intake_router = APIRouter()


def _reject(message: str, result: ValidationResult):
    failure = IntakeValidationFailure(message=message, errors=result.errors)
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                        detail=failure.model_dump(by_alias=True))


@intake_router.get("", response_model=IntakeResponse, response_model_by_alias=True)
async def get_intake(project_id: Optional[str] = Query(default=None, alias="projectId"),
                     user_id: str = Depends(get_current_user_id)):
    record = await find_intake(user_id, project_id, any_member=True)
    if record is None:
        intake_logger(user_id, project_id).info("No intake found")
        raise HTTPException(status_code=404, detail="No intake data found for this project")
    return IntakeResponse(**describe_intake(record))


@intake_router.post("/save", response_model=IntakeResponse, response_model_by_alias=True)
async def save_intake(request: SaveIntakeRequest, user_id: str = Depends(get_current_user_id)):
    log = intake_logger(user_id, request.project_id)
    existing = await find_intake(user_id, request.project_id)

    if request.step is not None:
        merged = dict(intake_data(existing)) if existing else {}
        merged[f"step{request.step}"] = request.data
    else:
        merged = request.data

    result = validate_intake(merged, draft=True)
    if not result.success:
        log.warning(f"Rejected intake draft: {len(result.errors)} issue(s)")
        _reject("Intake draft failed validation", result)

    status_value = existing["status"] if existing else DRAFT
    record = await store_intake(user_id, request.project_id, existing, result.data, status_value)
    log.info(f"Saved intake {record['intake_id']} step={request.step}")
    return IntakeResponse(**describe_intake(record))


@intake_router.post("/submit", response_model=IntakeResponse, response_model_by_alias=True)
async def submit_intake(request: SubmitIntakeRequest, user_id: str = Depends(get_current_user_id)):
    log = intake_logger(user_id, request.project_id)
    existing = await find_intake(user_id, request.project_id)
    payload = request.data if request.data is not None else (intake_data(existing) if existing else None)
    if payload is None:
        raise HTTPException(status_code=404, detail="No intake data found to submit")

    result = validate_intake(payload)
    if not result.success:
        log.warning(f"Rejected intake submission: {[issue.path for issue in result.errors]}")
        _reject("Intake is incomplete or invalid", result)

    project_id = request.project_id
    if project_id is None:
        project = await create_project_from_intake(user_id, result.data)
        project_id = project["project_id"]
        log = intake_logger(user_id, project_id)
        log.info(f"Created project {project_id} from submitted intake")

    record = await store_intake(user_id, project_id, existing, result.data, SUBMITTED)
    if record.get("project_id") != project_id:
        await link_intake(record["intake_id"], project_id)
        record["project_id"] = project_id

    log.info(f"Intake {record['intake_id']} submitted")
    return IntakeResponse(**describe_intake(record))


@intake_router.post("/validate/{step}", response_model=ValidationResult, response_model_by_alias=True)
async def validate_intake_step(step: str, payload: dict):
    step_name = f"step{step}" if step.isdigit() else step
    return validate_step(step_name, payload)


@intake_router.get("/completion", response_model=CompletionResponse, response_model_by_alias=True)
async def get_completion(project_id: Optional[str] = Query(default=None, alias="projectId"),
                         user_id: str = Depends(get_current_user_id)):
    record = await find_intake(user_id, project_id, any_member=True)
    data = intake_data(record) if record else {}
    return CompletionResponse(percentage=get_intake_completion(data), is_complete=is_intake_complete(data))


@intake_router.get("/presets")
async def get_budget_presets():
    return PRESET_BUDGET_SPLITS
