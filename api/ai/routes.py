from fastapi import APIRouter, Depends, Request, Response
from typing import Optional
import logging

from api.ai.models import BudgetResponse, ChatRequest, ChatResponse, ProjectAIRequest, TimelineResponse
from api.security import get_current_user_id, get_optional_user_id
from planhaus.ai import service as ai_service
from planhaus.helpers import get_current_datetime
from planhaus.projects import ensure_member, get_project
from planhaus.rate_limit import enforce_rate_limit

ai_router = APIRouter()


def _rate_limit_key(request: Request, user_id: Optional[str]) -> str:
    if user_id:
        return f"user:{user_id}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


def _count_request(request: Request, response: Response, user_id: Optional[str]) -> None:
    decision = enforce_rate_limit(request.app.state.rate_limit_store, _rate_limit_key(request, user_id))
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)


@ai_router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def chat(chat_request: ChatRequest, request: Request, response: Response,
               user_id: Optional[str] = Depends(get_optional_user_id)):
    with_project = chat_request.project_id is not None and user_id is not None
    if chat_request.project_id and user_id is None:
        logging.info("Anonymous chat request named a project; answering without project context.")
    if with_project:
        await ensure_member(chat_request.project_id, user_id)
    _count_request(request, response, user_id)

    project = await get_project(chat_request.project_id) if with_project else None

    logging.info(f"AI chat request from user={user_id}, project={chat_request.project_id}")
    answer = await ai_service.chat(request.app.state.text_generator, chat_request.message, project)
    return ChatResponse(response=answer, timestamp=get_current_datetime()["current_datetime_utc"])


@ai_router.post("/timeline", response_model=TimelineResponse, response_model_by_alias=True)
async def timeline(ai_request: ProjectAIRequest, request: Request, response: Response,
                   user_id: str = Depends(get_current_user_id)):
    await ensure_member(ai_request.project_id, user_id)
    _count_request(request, response, user_id)
    project = await get_project(ai_request.project_id)
    logging.info(f"AI timeline request for project {ai_request.project_id}")
    return TimelineResponse(timeline=await ai_service.generate_timeline(request.app.state.text_generator, project))


@ai_router.post("/budget", response_model=BudgetResponse, response_model_by_alias=True)
async def budget(ai_request: ProjectAIRequest, request: Request, response: Response,
                 user_id: str = Depends(get_current_user_id)):
    await ensure_member(ai_request.project_id, user_id)
    _count_request(request, response, user_id)
    project = await get_project(ai_request.project_id)
    logging.info(f"AI budget request for project {ai_request.project_id}")
    return BudgetResponse(budget=await ai_service.generate_budget(request.app.state.text_generator, project))
