from typing import Any

from pydantic import BaseModel

from planhaus.intake_schema import STEP_NAMES
from planhaus.prefill.mappings import IntakeLike, coerce_intake, dig


def _has_value(value: Any) -> bool:
    return value is not None and value != ""


def _step_touched(step: Any) -> bool:
    if step is None:
        return False
    if isinstance(step, BaseModel):
        values = [getattr(step, name) for name in type(step).model_fields]
    elif isinstance(step, dict):
        values = list(step.values())
    else:
        return False
    return any(_has_value(value) for value in values)


def is_intake_complete(intake: IntakeLike) -> bool:
    """True when both first names, title, date, city and budget are present and consent was given."""
    intake = coerce_intake(intake)
    checklist = (
        dig(intake, "step1", "couple", "first_name", 0),
        dig(intake, "step1", "couple", "first_name", 1),
        dig(intake, "step2", "working_title"),
        dig(intake, "step2", "date"),
        dig(intake, "step2", "location", "city"),
        dig(intake, "step3", "total_budget"),
    )
    return all(checklist) and dig(intake, "step7", "consent") is True


def get_intake_completion(intake: IntakeLike) -> int:
    """
    Percentage of the seven steps holding at least one non-empty value.

    This is a "has the step been touched" signal for progress bars: one
    filled field counts the whole step.
    """
    intake = coerce_intake(intake)
    touched = sum(1 for name in STEP_NAMES if _step_touched(dig(intake, name)))
    # half-up, so 1/7 -> 14 and 4/7 -> 57
    return int(touched * 100 / len(STEP_NAMES) + 0.5)
