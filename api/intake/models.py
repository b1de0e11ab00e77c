from pydantic import Field
from typing import Any, Dict, List, Optional

from planhaus.intake_schema import CamelModel, ValidationIssue


class SaveIntakeRequest(CamelModel):
    """Autosave payload. With ``step`` only that step is replaced; without it the whole draft is."""
    project_id: Optional[str] = None
    step: Optional[int] = Field(default=None, ge=1, le=7)
    data: Dict[str, Any]


class SubmitIntakeRequest(CamelModel):
    project_id: Optional[str] = None
    # defaults to the stored draft
    data: Optional[Dict[str, Any]] = None


class IntakeResponse(CamelModel):
    intake_id: str
    project_id: Optional[str] = None
    status: str
    data: Dict[str, Any]
    completion_percentage: int
    is_complete: bool
    updated_at: Optional[str] = None


class IntakeValidationFailure(CamelModel):
    message: str
    errors: List[ValidationIssue]


class CompletionResponse(CamelModel):
    percentage: int
    is_complete: bool
