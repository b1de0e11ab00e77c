from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import date

from planhaus.intake_schema import Phone

TaskPriority = Literal["low", "medium", "high"]
TaskStatus = Literal["not_started", "in_progress", "completed"]
RsvpStatus = Literal["pending", "confirmed", "declined"]
VendorStatus = Literal["pending", "researching", "contacted", "booked", "declined"]
MemberRole = Literal["owner", "edit", "view"]


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    wedding_date: Optional[date] = None
    city: Optional[str] = None
    country: Optional[str] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = Field(default=None, ge=1, le=5000)
    budget: Optional[float] = Field(default=None, ge=0)
    style: Optional[str] = None
    description: Optional[str] = None
    style_tags: List[str] = []

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    wedding_date: Optional[date] = None
    city: Optional[str] = None
    country: Optional[str] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = Field(default=None, ge=1, le=5000)
    budget: Optional[float] = Field(default=None, ge=0)
    style: Optional[str] = None
    description: Optional[str] = None
    style_tags: Optional[List[str]] = None

class ProjectResponse(BaseModel):
    project_id: str
    name: str
    wedding_date: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = None
    budget: Optional[float] = None
    style: Optional[str] = None
    description: Optional[str] = None
    style_tags: List[str] = []
    created_by: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    role: Optional[str] = None

class MemberCreate(BaseModel):
    user_id: str = Field(min_length=1)
    role: MemberRole = "edit"


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "not_started"
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

class BulkTaskCreate(BaseModel):
    tasks: List[TaskCreate] = Field(min_length=1)


class BudgetItemCreate(BaseModel):
    category: str = Field(min_length=1)
    item: str = Field(min_length=1)
    percent: Optional[float] = Field(default=None, ge=0, le=100)
    hard_cap: Optional[float] = Field(default=None, ge=0)
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    vendor_id: Optional[str] = None
    is_paid: bool = False
    notes: Optional[str] = None

class BudgetItemUpdate(BaseModel):
    category: Optional[str] = Field(default=None, min_length=1)
    item: Optional[str] = Field(default=None, min_length=1)
    percent: Optional[float] = Field(default=None, ge=0, le=100)
    hard_cap: Optional[float] = Field(default=None, ge=0)
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    vendor_id: Optional[str] = None
    is_paid: Optional[bool] = None
    notes: Optional[str] = None


class GuestCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    rsvp_status: RsvpStatus = "pending"
    meal_preference: Optional[str] = None
    plus_one: bool = False
    group_name: Optional[str] = None
    notes: Optional[str] = None

class GuestUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    rsvp_status: Optional[RsvpStatus] = None
    meal_preference: Optional[str] = None
    plus_one: Optional[bool] = None
    group_name: Optional[str] = None
    notes: Optional[str] = None


class VendorCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    website: Optional[str] = None
    quote: Optional[float] = Field(default=None, ge=0)
    status: VendorStatus = "pending"
    contract_signed: bool = False
    notes: Optional[str] = None

class VendorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    website: Optional[str] = None
    quote: Optional[float] = Field(default=None, ge=0)
    status: Optional[VendorStatus] = None
    contract_signed: Optional[bool] = None
    notes: Optional[str] = None


class PrefillSummary(BaseModel):
    project_fields: List[str]
    budget_items: int
    tasks: int
    preferences: List[str]

class PreferenceDocument(BaseModel):
    kind: str
    data: Optional[Dict[str, Any]] = None
