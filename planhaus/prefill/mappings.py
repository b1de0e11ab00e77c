"""
Pure mappers from an intake questionnaire to the seed payloads a project is
prefilled with: project metadata, budget plan, timeline tasks, vendor
filters, site content, guest management and event details.

Every mapper accepts an ``IntakeDraft`` (or ``IntakeRecord``) instance or a raw
camelCase dict, never mutates it, and returns the same output for the same
input. Missing data degrades to documented defaults instead of raising.
"""
import datetime
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from planhaus.intake_schema import CamelModel, IntakeDraft

IntakeLike = Union[BaseModel, Dict[str, Any], None]

DEFAULT_RADIUS_MILES = 50
DAYS_PER_MONTH_FRACTION = 30
PLACEHOLDER_TITLE = "New Wedding Project"
PLACEHOLDER_DESCRIPTION = "Wedding"


def coerce_intake(intake: IntakeLike) -> BaseModel:
    """Returns a model instance for ``intake``; raw dicts are parsed with the draft schema."""
    if isinstance(intake, BaseModel):
        return intake
    return IntakeDraft.model_validate(intake or {})


def dig(source: Any, *path: Union[str, int], default: Any = None) -> Any:
    """Walks attributes, dict keys and list indexes, returning ``default`` on the first missing link."""
    current = source
    for key in path:
        if current is None:
            return default
        if isinstance(key, int):
            if isinstance(current, (list, tuple)) and -len(current) <= key < len(current):
                current = current[key]
            else:
                current = None
        elif isinstance(current, dict):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return default if current is None else current


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


def parse_wedding_date(value: Any) -> Optional[datetime.date]:
    if not value:
        return None
    if isinstance(value, datetime.date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except ValueError:
        logging.warning(f"Unparseable wedding date in intake: {value!r}")
        return None


def _first_names(intake: BaseModel) -> List[str]:
    return [name for name in (dig(intake, "step1", "couple", "first_name", i) for i in (0, 1)) if name]


# --- Output models ---

class ProjectMeta(CamelModel):
    title: str
    date: Optional[datetime.date] = None
    city: str = ""
    country: str = ""
    guest_count: int = 0
    style_vibes: List[str] = []
    color_palette: List[Dict[str, Any]] = []
    priorities: List[str] = []
    venue: str = ""
    description: str = ""


class BudgetLine(CamelModel):
    name: str
    percent: float
    hard_cap: Optional[float] = None
    estimated_cost: float


class BudgetPlan(CamelModel):
    currency: str = "USD"
    total: float = 0
    categories: List[BudgetLine] = []
    must_haves: List[str] = []
    nice_to_haves: List[str] = []


class TimelineTask(CamelModel):
    title: str
    description: str
    category: str
    priority: str
    due_date: datetime.date
    status: str = "not_started"


class VendorLocation(CamelModel):
    city: str = ""
    state: str = ""
    country: str = ""
    zip: str = ""


class VendorFilters(CamelModel):
    radius_miles: float = DEFAULT_RADIUS_MILES
    location: VendorLocation
    styles: List[str] = []
    price_bands: Dict[str, str] = {}
    availability_window: Optional[Dict[str, Any]] = None
    must_haves: List[str] = []
    nice_to_haves: List[str] = []
    required_vendors: List[str] = []
    photographer_style: Optional[str] = None
    music_preference: Optional[str] = None
    floral_style: Optional[str] = None


class CoupleDisplayNames(CamelModel):
    partner1: str = ""
    partner2: str = ""


class SiteContentPrefs(CamelModel):
    tone: str = "friendly"
    bilingual: bool = False
    rsvp_preference: str = "site"
    preferred_language: str = "en"
    couple_names: CoupleDisplayNames


class GuestPrefs(CamelModel):
    estimated_count: int = 0
    adults_only: bool = False
    minors_count: int = 0
    kids_policy: str = "all"
    rsvp_preference: str = "site"
    majority_out_of_town: bool = False
    hotel_blocks_needed: int = 0
    shuttle_needed: bool = False


class CeremonyDetails(CamelModel):
    type: str = "civil"
    venue: str = ""
    officiant_needed: bool = False
    officiant_notes: str = ""


class ReceptionDetails(CamelModel):
    venue: str = ""
    same_venue: bool = False
    meal_style: str = "plated"
    bar_preference: str = "open"
    seating_style: str = "rounds"
    dance_floor_required: bool = True
    stage_required: bool = False


class TimelineDetails(CamelModel):
    preferences: str = ""
    sunset_ceremony: bool = False


class EventDetails(CamelModel):
    ceremony: CeremonyDetails
    reception: ReceptionDetails
    special_moments: List[str] = []
    timeline: TimelineDetails


class PrefillBundle(CamelModel):
    project_meta: ProjectMeta
    budget_plan: Optional[BudgetPlan] = None
    timeline_tasks: List[TimelineTask] = []
    vendor_filters: VendorFilters
    site_prefs: SiteContentPrefs
    guest_prefs: GuestPrefs
    event_details: EventDetails


# --- Timeline seed table ---

class TaskSeed(NamedTuple):
    title: str
    description: str
    category: str
    priority: str
    months_before: float


CORE_TASKS = (
    TaskSeed("Set overall wedding budget", "Determine total budget and allocate to categories",
             "planning", "high", 12),
    TaskSeed("Book ceremony and reception venues", "Secure primary venues for the wedding",
             "venue", "high", 12),
    TaskSeed("Hire wedding planner (if desired)", "Interview and book wedding planner",
             "planning", "medium", 11),
)

# (required vendor, task) in the order they are emitted
VENDOR_TASKS = (
    ("photographer", TaskSeed("Book photographer", "Research and book wedding photographer",
                              "photography", "high", 10)),
    ("caterer", TaskSeed("Book caterer", "Secure catering services for reception",
                         "catering", "high", 9)),
    ("florist", TaskSeed("Book florist", "Secure floral arrangements and decor",
                         "flowers", "medium", 8)),
    ("musician", TaskSeed("Book music/entertainment", "Secure ceremony and reception music",
                          "music", "medium", 8)),
    ("officiant", TaskSeed("Book officiant", "Secure wedding officiant",
                           "other", "medium", 7)),
    ("attire", TaskSeed("Order wedding attire", "Purchase wedding dress and groom's attire",
                        "attire", "medium", 6)),
    ("beauty", TaskSeed("Book beauty services", "Secure hair and makeup services",
                        "other", "medium", 4)),
    ("stationery", TaskSeed("Order invitations", "Design and order wedding invitations",
                            "invitations", "medium", 6)),
    ("stationery", TaskSeed("Send invitations", "Mail wedding invitations to guests",
                            "invitations", "high", 4)),
)

CLOSING_TASKS = (
    TaskSeed("Track RSVPs", "Monitor and follow up on guest RSVPs", "planning", "medium", 2),
    TaskSeed("Create seating chart", "Design seating arrangements for reception", "planning", "medium", 1),
    TaskSeed("Wedding rehearsal", "Conduct wedding ceremony rehearsal", "planning", "high", 0.1),
    TaskSeed("Final vendor meetings", "Meet with all vendors to confirm details", "planning", "high", 0.5),
)


def due_date_before(wedding_date: datetime.date, months_before: float) -> datetime.date:
    """
    Whole months are calendar months (clamped to the end of shorter months);
    the fractional part counts as ``round(fraction * 30)`` days, so 0.1 is three
    days and 0.5 is fifteen.
    """
    whole_months = int(months_before)
    extra_days = round((months_before - whole_months) * DAYS_PER_MONTH_FRACTION)
    return wedding_date - relativedelta(months=whole_months) - datetime.timedelta(days=extra_days)


# --- Mappers ---

def to_project_meta(intake: IntakeLike) -> ProjectMeta:
    intake = coerce_intake(intake)
    names = _first_names(intake)

    title = dig(intake, "step2", "working_title")
    if not title:
        if len(names) == 2:
            title = f"{names[0]} & {names[1]}'s Wedding"
        elif names:
            title = f"{names[0]}'s Wedding"
        else:
            title = PLACEHOLDER_TITLE

    return ProjectMeta(
        title=title,
        date=parse_wedding_date(dig(intake, "step2", "date")),
        city=dig(intake, "step2", "location", "city", default=""),
        country=dig(intake, "step2", "location", "country", default=""),
        guest_count=dig(intake, "step2", "guests", "estimated_guest_count", default=0),
        style_vibes=list(dig(intake, "step2", "style", "style_vibes", default=[])),
        color_palette=_dump(dig(intake, "step2", "style", "color_palette", default=[])),
        priorities=list(dig(intake, "step2", "style", "priorities", default=[])),
        venue=dig(intake, "step2", "venues", "ceremony_venue_name", default=""),
        description=f"Wedding for {' and '.join(names)}" if names else PLACEHOLDER_DESCRIPTION,
    )


def to_budget_plan(intake: IntakeLike) -> Optional[BudgetPlan]:
    """None when the budget step is absent, as opposed to a zero budget."""
    intake = coerce_intake(intake)
    step3 = dig(intake, "step3")
    if step3 is None:
        return None

    total = dig(step3, "total_budget", default=0)
    lines = []
    for category in dig(step3, "categories", default=[]):
        percent = dig(category, "percent", default=0)
        hard_cap = dig(category, "hard_cap")
        estimated = hard_cap if hard_cap is not None else percent / 100 * total
        lines.append(BudgetLine(name=dig(category, "name", default="misc"), percent=percent,
                                hard_cap=hard_cap, estimated_cost=estimated))

    return BudgetPlan(
        currency=dig(step3, "currency", default="USD"),
        total=total,
        categories=lines,
        must_haves=list(dig(step3, "must_haves", default=[])),
        nice_to_haves=list(dig(step3, "nice_to_haves", default=[])),
    )


def to_timeline_seed(intake: IntakeLike) -> List[TimelineTask]:
    """
    Core tasks, then vendor tasks for each required vendor in a fixed order,
    then closing tasks. Without a wedding date there is nothing to schedule
    against and the seed is empty.
    """
    intake = coerce_intake(intake)
    wedding_date = parse_wedding_date(dig(intake, "step2", "date"))
    if wedding_date is None:
        return []

    required_vendors = set(dig(intake, "step5", "required_vendors", default=[]))
    seeds = list(CORE_TASKS)
    seeds.extend(seed for vendor, seed in VENDOR_TASKS if vendor in required_vendors)
    seeds.extend(CLOSING_TASKS)

    return [
        TimelineTask(
            title=seed.title,
            description=seed.description,
            category=seed.category,
            priority=seed.priority,
            due_date=due_date_before(wedding_date, seed.months_before),
        )
        for seed in seeds
    ]


def to_vendor_filters(intake: IntakeLike) -> VendorFilters:
    intake = coerce_intake(intake)
    return VendorFilters(
        radius_miles=dig(intake, "step5", "search", "radius_miles", default=DEFAULT_RADIUS_MILES),
        location=VendorLocation(
            city=dig(intake, "step2", "location", "city", default=""),
            state=dig(intake, "step2", "location", "state", default=""),
            country=dig(intake, "step2", "location", "country", default=""),
            zip=dig(intake, "step5", "search", "preferred_zip", default=""),
        ),
        styles=list(dig(intake, "step2", "style", "style_vibes", default=[])),
        price_bands=dict(dig(intake, "step5", "budget_bands", default={})),
        availability_window=_dump(dig(intake, "step5", "search", "availability_window")),
        must_haves=list(dig(intake, "step3", "must_haves", default=[])),
        nice_to_haves=list(dig(intake, "step3", "nice_to_haves", default=[])),
        required_vendors=list(dig(intake, "step5", "required_vendors", default=[])),
        photographer_style=dig(intake, "step5", "photographer", "style"),
        music_preference=dig(intake, "step5", "music", "band_or_dj"),
        floral_style=dig(intake, "step5", "florals", "style"),
    )


def _partner_display_name(intake: BaseModel, index: int) -> str:
    parts = (dig(intake, "step1", "couple", "first_name", index),
             dig(intake, "step1", "couple", "last_name", index))
    return " ".join(part for part in parts if part)


def to_site_content_prefs(intake: IntakeLike) -> SiteContentPrefs:
    intake = coerce_intake(intake)
    return SiteContentPrefs(
        tone=dig(intake, "step6", "website", "copy_tone", default="friendly"),
        bilingual=dig(intake, "step6", "website", "bilingual_site", default=False),
        rsvp_preference=dig(intake, "step6", "guests", "rsvp_preference", default="site"),
        preferred_language=dig(intake, "step1", "preferred_language", default="en"),
        couple_names=CoupleDisplayNames(
            partner1=_partner_display_name(intake, 0),
            partner2=_partner_display_name(intake, 1),
        ),
    )


def to_guest_prefs(intake: IntakeLike) -> GuestPrefs:
    intake = coerce_intake(intake)
    return GuestPrefs(
        estimated_count=dig(intake, "step2", "guests", "estimated_guest_count", default=0),
        adults_only=dig(intake, "step2", "guests", "adults_only", default=False),
        minors_count=dig(intake, "step2", "guests", "minors_count", default=0),
        kids_policy=dig(intake, "step6", "guests", "kids_policy", default="all"),
        rsvp_preference=dig(intake, "step6", "guests", "rsvp_preference", default="site"),
        majority_out_of_town=dig(intake, "step6", "travel", "majority_from_out_of_town", default=False),
        hotel_blocks_needed=dig(intake, "step6", "travel", "hotel_blocks_needed", default=0),
        shuttle_needed=dig(intake, "step6", "travel", "shuttle_needed", default=False),
    )


def to_event_details(intake: IntakeLike) -> EventDetails:
    intake = coerce_intake(intake)
    ceremony_venue = dig(intake, "step2", "venues", "ceremony_venue_name", default="")
    return EventDetails(
        ceremony=CeremonyDetails(
            type=dig(intake, "step4", "ceremony", "type", default="civil"),
            venue=ceremony_venue,
            officiant_needed=dig(intake, "step4", "ceremony", "officiant_needed", default=False),
            officiant_notes=dig(intake, "step4", "ceremony", "officiant_notes", default=""),
        ),
        reception=ReceptionDetails(
            venue=dig(intake, "step2", "venues", "reception_venue_name") or ceremony_venue,
            same_venue=dig(intake, "step2", "venues", "both_same_venue", default=False),
            meal_style=dig(intake, "step4", "dining", "meal_style", default="plated"),
            bar_preference=dig(intake, "step4", "dining", "bar_preference", default="open"),
            seating_style=dig(intake, "step4", "seating", "style", default="rounds"),
            # an explicit False is kept; only a missing value defaults to True
            dance_floor_required=dig(intake, "step4", "seating", "dance_floor_required", default=True),
            stage_required=dig(intake, "step4", "seating", "stage_required", default=False),
        ),
        special_moments=list(dig(intake, "step4", "special_moments", default=[])),
        timeline=TimelineDetails(
            preferences=dig(intake, "step4", "timeline", "preferences", default=""),
            sunset_ceremony=dig(intake, "step4", "timeline", "sunset_ceremony", default=False),
        ),
    )


def build_prefill_bundle(intake: IntakeLike) -> PrefillBundle:
    """Runs all seven mappers over one intake."""
    intake = coerce_intake(intake)
    return PrefillBundle(
        project_meta=to_project_meta(intake),
        budget_plan=to_budget_plan(intake),
        timeline_tasks=to_timeline_seed(intake),
        vendor_filters=to_vendor_filters(intake),
        site_prefs=to_site_content_prefs(intake),
        guest_prefs=to_guest_prefs(intake),
        event_details=to_event_details(intake),
    )
