from pydantic import Field
from typing import Any, List, Optional

from planhaus.intake_schema import CamelModel


class ChatRequest(CamelModel):
    message: str = Field(min_length=1, max_length=4000)
    project_id: Optional[str] = None

class ProjectAIRequest(CamelModel):
    project_id: str

class ChatResponse(CamelModel):
    response: str
    timestamp: str

class TimelineResponse(CamelModel):
    timeline: List[Any]

class BudgetResponse(CamelModel):
    budget: List[Any]
