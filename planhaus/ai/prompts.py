import re
from typing import Any, Dict

WEDDING_CHAT = """You are the PlanHaus wedding planning assistant. Give couples warm, specific and actionable advice.

Current wedding context:
- Wedding Date: {weddingDate}
- Location: {location}
- Budget: {budget}
- Guest Count: {guestCount}
- Style: {style}

User Question: {question}

Base the answer on their wedding details. For vendor questions, point them to the vendor search."""

WEDDING_TIMELINE = """You are an expert wedding planner. Build a wedding planning timeline with concrete tasks and deadlines for this wedding.

- Wedding Date: {weddingDate}
- Venue: {venue}
- Guest Count: {guestCount}
- Budget: {budget}

Answer with a JSON array only, one object per task:
[
  {
    "title": "Task title",
    "description": "Actionable steps",
    "category": "venue|vendors|planning|details|final",
    "priority": "high|medium|low",
    "dueDate": "YYYY-MM-DD",
    "estimatedHours": number
  }
]"""

BUDGET_BREAKDOWN = """You are a wedding budget expert. Split the budget below into categories.

- Total Budget: {totalBudget}
- Wedding Style: {style}
- Guest Count: {guestCount}
- Location: {location}

Answer with a JSON array only, one object per category:
[
  {
    "category": "category name",
    "percentage": number,
    "estimatedAmount": number,
    "description": "What this covers",
    "priority": "essential|important|optional"
  }
]"""

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def format_prompt(template: str, variables: Dict[str, Any]) -> str:
    """Fills ``{name}`` placeholders. Unknown, None or empty variables leave the placeholder as is."""

    def _substitute(match: "re.Match") -> str:
        value = variables.get(match.group(1))
        if value is None or str(value) == "":
            return match.group(0)
        return str(value)

    return _PLACEHOLDER.sub(_substitute, template)
