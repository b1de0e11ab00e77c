import json
import logging
import re
from typing import Any, Dict, List, Optional

from planhaus.ai.client import TextGenerator
from planhaus.ai.prompts import BUDGET_BREAKDOWN, WEDDING_CHAT, WEDDING_TIMELINE, format_prompt
from planhaus.exceptions import AIServiceUnavailableError

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def _require(generator: Optional[TextGenerator]) -> TextGenerator:
    if generator is None:
        raise AIServiceUnavailableError("AI assistant is not configured")
    return generator


def project_prompt_variables(project: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Prompt variables taken from a project row; missing values stay unset."""
    if not project:
        return {}
    location = ", ".join(part for part in (project.get("city"), project.get("country")) if part)
    style_tags = project.get("style_tags") or []
    return {
        "weddingDate": project.get("wedding_date"),
        "location": location,
        "venue": project.get("venue"),
        "budget": project.get("budget"),
        "totalBudget": project.get("budget"),
        "guestCount": project.get("guest_count"),
        "style": project.get("style") or ", ".join(style_tags),
    }


def parse_json_list(text: str) -> List[Any]:
    """Decodes a JSON array from model output, tolerating code fences. Anything else yields []."""
    cleaned = _CODE_FENCE.sub("", (text or "").strip())
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        logging.warning(f"AI answer was not valid JSON; returning an empty list. Answer starts: {cleaned[:80]!r}")
        return []
    if isinstance(parsed, list):
        return parsed
    logging.warning(f"AI answer was JSON but not a list ({type(parsed).__name__}); returning an empty list.")
    return []


async def chat(generator: Optional[TextGenerator], message: str,
               project: Optional[Dict[str, Any]] = None) -> str:
    prompt = format_prompt(WEDDING_CHAT, {**project_prompt_variables(project), "question": message})
    return await _require(generator).generate(prompt)


async def generate_timeline(generator: Optional[TextGenerator], project: Dict[str, Any]) -> List[Any]:
    prompt = format_prompt(WEDDING_TIMELINE, project_prompt_variables(project))
    return parse_json_list(await _require(generator).generate(prompt))


async def generate_budget(generator: Optional[TextGenerator], project: Dict[str, Any]) -> List[Any]:
    prompt = format_prompt(BUDGET_BREAKDOWN, project_prompt_variables(project))
    return parse_json_list(await _require(generator).generate(prompt))
