"""
Pydantic models for the seven-step wedding intake questionnaire.

Wire names are camelCase (``firstName``, ``totalBudget``); attributes are
snake_case. ``IntakeRecord`` is the complete, submittable intake and
``IntakeDraft`` is the same shape with every field optional at every depth.
Validation never raises: ``validate_step`` and ``validate_intake`` return a
``ValidationResult`` describing either the normalized data or the issues.
"""
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, create_model, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

PHONE_PATTERN = r"^[+]?[(]?[\d\s\-()]{10,}$"
E164_PHONE_PATTERN = r"^\+[1-9]\d{1,14}$"
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
URL_OR_EMPTY_PATTERN = r"^(https?://\S+)?$"

BUDGET_CATEGORIES = (
    "venue", "catering", "bar", "photography", "video", "florals", "planning", "music",
    "attire", "stationery", "rentals", "cake", "transportation", "beauty", "misc",
)

PRESET_BUDGET_SPLITS: Dict[str, List[Dict[str, Any]]] = {
    "classic": [
        {"name": "venue", "percent": 45},
        {"name": "catering", "percent": 30},
        {"name": "photography", "percent": 10},
        {"name": "florals", "percent": 8},
        {"name": "music", "percent": 7},
    ],
    "diy-heavy": [
        {"name": "venue", "percent": 50},
        {"name": "catering", "percent": 25},
        {"name": "photography", "percent": 15},
        {"name": "florals", "percent": 5},
        {"name": "music", "percent": 5},
    ],
    "luxury": [
        {"name": "venue", "percent": 35},
        {"name": "catering", "percent": 25},
        {"name": "photography", "percent": 15},
        {"name": "florals", "percent": 12},
        {"name": "music", "percent": 8},
        {"name": "attire", "percent": 5},
    ],
    "minimalist": [
        {"name": "venue", "percent": 60},
        {"name": "catering", "percent": 25},
        {"name": "photography", "percent": 10},
        {"name": "music", "percent": 5},
    ],
}

NonEmptyStr = Annotated[str, Field(min_length=1)]
E164Phone = Annotated[str, Field(pattern=E164_PHONE_PATTERN)]
Phone = Annotated[str, Field(pattern=PHONE_PATTERN)]
UrlOrEmpty = Annotated[str, Field(pattern=URL_OR_EMPTY_PATTERN)]

Pronouns = Literal["he/him", "she/her", "they/them", "he/they", "she/they", "other"]
DecisionMaker = Literal["Partner A", "Partner B", "Planner", "Parent"]
StyleVibe = Literal["modern", "rustic", "moody", "classic", "whimsical", "garden",
                    "industrial", "beach", "mountain", "destination", "boho"]
Priority = Literal["music", "food", "photos", "decor", "convenience", "budget",
                   "late-night", "sustainability"]
BudgetCategoryName = Literal["venue", "catering", "bar", "photography", "video", "florals",
                             "planning", "music", "attire", "stationery", "rentals",
                             "cake", "transportation", "beauty", "misc"]
VendorType = Literal["photographer", "videographer", "florist", "caterer", "musician",
                     "officiant", "transportation", "beauty", "attire", "stationery"]
RentalType = Literal["tables", "chairs", "linens", "lounge-furniture", "lighting",
                     "tenting", "restrooms"]
SpecialMoment = Literal["first-look", "private-vows", "sparkler-exit", "cigar-bar", "afterparty"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Step 1: Couple & Contacts ---

class CoupleNames(CamelModel):
    first_name: List[NonEmptyStr] = Field(min_length=2, max_length=2)
    last_name: List[NonEmptyStr] = Field(min_length=2, max_length=2)


class CoupleStep(CamelModel):
    couple: CoupleNames
    emails: List[EmailStr] = Field(min_length=1)
    phones: List[E164Phone] = Field(min_length=1)
    pronouns: Pronouns
    preferred_language: Literal["en", "de"] = "en"
    communication_preferences: Literal["email", "sms", "both"] = "email"
    decision_makers: List[DecisionMaker] = Field(min_length=1)


# --- Step 2: Wedding Basics ---

class DateWindow(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class Location(CamelModel):
    city: NonEmptyStr
    state: NonEmptyStr
    country: NonEmptyStr


class Venues(CamelModel):
    ceremony_venue_name: NonEmptyStr
    reception_venue_name: Optional[str] = None
    both_same_venue: bool = False


class Settings(CamelModel):
    indoor_outdoor: List[Literal["indoor", "outdoor", "covered"]] = Field(min_length=1)
    accessibility_needs: Optional[str] = None


class GuestEstimate(CamelModel):
    estimated_guest_count: int = Field(ge=1, le=5000)
    adults_only: bool = False
    minors_count: Optional[int] = Field(default=None, ge=0)


class Vip(CamelModel):
    name: NonEmptyStr
    role: NonEmptyStr


class PaletteColor(CamelModel):
    name: NonEmptyStr
    hex: Annotated[str, Field(pattern=HEX_COLOR_PATTERN)]


class Style(CamelModel):
    style_vibes: List[StyleVibe] = Field(min_length=1)
    color_palette: List[PaletteColor] = []
    priorities: List[Priority] = Field(min_length=1, max_length=5)


class WeddingBasicsStep(CamelModel):
    working_title: NonEmptyStr
    date: NonEmptyStr
    is_date_flexible: bool = False
    flexibility_window: Optional[DateWindow] = None
    location: Location
    venues: Venues
    settings: Settings
    guests: GuestEstimate
    vips: List[Vip] = []
    style: Style


# --- Step 3: Budget ---

class BudgetCategory(CamelModel):
    name: BudgetCategoryName
    percent: float = Field(ge=0, le=100)
    hard_cap: Optional[float] = Field(default=None, ge=0)


class BudgetStep(CamelModel):
    total_budget: float = Field(gt=0)
    currency: Literal["USD", "EUR", "GBP", "CAD", "AUD"] = "USD"
    preset_split: Literal["classic", "diy-heavy", "luxury", "minimalist", "custom"] = "classic"
    categories: List[BudgetCategory]
    must_haves: List[str] = []
    nice_to_haves: List[str] = []

    @field_validator("categories")
    @classmethod
    def percentages_sum_to_hundred(cls, categories):
        # within one percentage point of 100
        total = sum(category.percent for category in categories)
        if abs(total - 100) >= 1:
            raise PydanticCustomError(
                "budget_percent_sum",
                "Category percentages must sum to 100% (got {total})",
                {"total": total},
            )
        return categories


# --- Step 4: Ceremony & Reception ---

class Ceremony(CamelModel):
    type: Literal["civil", "religious-light", "religious-traditional", "symbolic"]
    officiant_needed: bool = False
    officiant_notes: Optional[str] = None


class TimelinePreferences(CamelModel):
    preferences: Optional[str] = None
    sunset_ceremony: bool = False


class Dining(CamelModel):
    meal_style: Literal["plated", "buffet", "family-style", "stations", "cocktail-style"]
    bar_preference: Literal["open", "limited", "cash", "dry"]


class Seating(CamelModel):
    style: Literal["long-tables", "u-shape", "rounds", "mixed"]
    dance_floor_required: bool = True
    stage_required: bool = False


class Timing(CamelModel):
    noise_ordinance_time: Optional[str] = None
    venue_cutoff_time: Optional[str] = None


class CeremonyReceptionStep(CamelModel):
    ceremony: Ceremony
    timeline: TimelinePreferences
    dining: Dining
    seating: Seating
    special_moments: List[SpecialMoment] = []
    timing: Timing


# --- Step 5: Vendor Preferences ---

class PhotographerPrefs(CamelModel):
    style: Optional[Literal["editorial", "documentary", "fine-art", "flash", "film"]] = None


class MusicPrefs(CamelModel):
    band_or_dj: Optional[Literal["band", "dj", "both", "unsure"]] = Field(default=None, alias="bandOrDJ")
    genres: List[str] = []


class FloralPrefs(CamelModel):
    style: Optional[Literal["minimal", "lush", "moody", "seasonal-wild"]] = None


class CateringPrefs(CamelModel):
    notes: Optional[str] = None
    dietary_restrictions: List[str] = []
    cuisine_preferences: List[str] = []


class VendorSearch(CamelModel):
    radius_miles: float = Field(default=50, ge=1, le=100)
    preferred_zip: Optional[str] = None
    availability_window: Optional[DateWindow] = None


class VendorPreferencesStep(CamelModel):
    required_vendors: List[VendorType] = Field(min_length=1)
    photographer: PhotographerPrefs
    music: MusicPrefs
    florals: FloralPrefs
    catering: CateringPrefs
    rentals: List[RentalType] = []
    budget_bands: Dict[str, Literal["low", "medium", "high"]] = {}
    search: VendorSearch
    inspiration: List[UrlOrEmpty] = []


# --- Step 6: Guests, Travel & Logistics ---

class Travel(CamelModel):
    majority_from_out_of_town: bool = False
    hotel_blocks_needed: Optional[int] = Field(default=None, ge=0)
    shuttle_needed: bool = False
    ceremony_to_reception_travel_time: Optional[float] = Field(default=None, ge=0)
    accessibility_notes: Optional[str] = None


class GuestPolicy(CamelModel):
    kids_policy: Literal["all", "family-only", "none"] = "all"
    rsvp_preference: Literal["site", "email", "qr-code"] = "site"


class Website(CamelModel):
    needed: bool = False
    copy_tone: Literal["friendly", "formal", "playful"] = "friendly"
    bilingual_site: bool = False


class LogisticsStep(CamelModel):
    travel: Travel
    guests: GuestPolicy
    website: Website


# --- Step 7: Review & Submit ---

class ReviewSubmitStep(CamelModel):
    consent: bool
    email_copy: bool = False

    @field_validator("consent")
    @classmethod
    def consent_must_be_given(cls, consent):
        if consent is not True:
            raise PydanticCustomError("consent_required", "You must consent to data use")
        return consent


class IntakeRecord(CamelModel):
    step1: CoupleStep
    step2: WeddingBasicsStep
    step3: BudgetStep
    step4: CeremonyReceptionStep
    step5: VendorPreferencesStep
    step6: LogisticsStep
    step7: ReviewSubmitStep


STEP_MODELS: Dict[str, Type[CamelModel]] = {
    "step1": CoupleStep,
    "step2": WeddingBasicsStep,
    "step3": BudgetStep,
    "step4": CeremonyReceptionStep,
    "step5": VendorPreferencesStep,
    "step6": LogisticsStep,
    "step7": ReviewSubmitStep,
}
STEP_NAMES = tuple(STEP_MODELS)


# --- Draft (deep partial) models ---

_partial_models: Dict[Type[BaseModel], Type[BaseModel]] = {}


def _partial_annotation(annotation: Any) -> Any:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return make_partial_model(annotation)
    origin = get_origin(annotation)
    if origin is list:
        (item,) = get_args(annotation)
        return List[_partial_annotation(item)]
    if origin is Union:
        return Union[tuple(_partial_annotation(arg) for arg in get_args(annotation))]
    return annotation


def make_partial_model(model: Type[BaseModel]) -> Type[BaseModel]:
    """
    Builds a copy of ``model`` where every field, and every field of every
    nested model, is optional and defaults to None. Field constraints still
    apply to values that are present; validators are not carried over, so
    cross-field rules (percentage sum, consent) are skipped for drafts.
    """
    if model in _partial_models:
        return _partial_models[model]

    fields = {}
    for name, field in model.model_fields.items():
        annotation = _partial_annotation(field.annotation)
        if field.metadata:
            annotation = Annotated[(annotation, *field.metadata)]
        fields[name] = (Optional[annotation], Field(default=None, alias=field.alias))

    partial = create_model(f"{model.__name__}Draft", __base__=CamelModel, **fields)
    _partial_models[model] = partial
    return partial


IntakeDraft = make_partial_model(IntakeRecord)


# --- Validation results ---

class ValidationIssue(CamelModel):
    path: str
    message: str
    code: str


class ValidationResult(CamelModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    errors: List[ValidationIssue] = []


def _issues_from_error(exc: ValidationError) -> List[ValidationIssue]:
    issues = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        issues.append(ValidationIssue(path=path, message=error["msg"], code=error["type"]))
    return issues


def _validate(model: Type[BaseModel], payload: Any) -> ValidationResult:
    try:
        instance = model.model_validate(payload)
    except ValidationError as e:
        issues = _issues_from_error(e)
        logging.debug(f"Intake validation against {model.__name__} failed with {len(issues)} issue(s).")
        return ValidationResult(success=False, errors=issues)
    return ValidationResult(success=True, data=instance.model_dump(mode="json", by_alias=True, exclude_none=True))


def validate_step(step_name: str, payload: Any) -> ValidationResult:
    """Validates one step payload (``"step1"`` .. ``"step7"``) against its complete schema."""
    model = STEP_MODELS.get(step_name)
    if model is None:
        return ValidationResult(
            success=False,
            errors=[ValidationIssue(path="step", message=f"Unknown intake step '{step_name}'", code="unknown_step")],
        )
    return _validate(model, payload)


def validate_intake(payload: Any, draft: bool = False) -> ValidationResult:
    """Validates a whole intake, either as a complete submission or as a draft."""
    return _validate(IntakeDraft if draft else IntakeRecord, payload)


def calculate_budget_remaining(categories: List[Union[BudgetCategory, Dict[str, Any]]]) -> float:
    """Percentage points not yet allocated to any category (negative when over-allocated)."""
    total = 0.0
    for category in categories:
        percent = category.get("percent") if isinstance(category, dict) else category.percent
        total += percent or 0
    return 100 - total
