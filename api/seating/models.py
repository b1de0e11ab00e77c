from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

TableShape = Literal["round", "rectangle", "square"]


class TableCreate(BaseModel):
    name: str = Field(min_length=1)
    max_seats: int = Field(default=8, ge=1, le=50)
    shape: TableShape = "round"
    position_x: int = 0
    position_y: int = 0

class TableUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    max_seats: Optional[int] = Field(default=None, ge=1, le=50)
    shape: Optional[TableShape] = None
    position_x: Optional[int] = None
    position_y: Optional[int] = None

class AssignGuestRequest(BaseModel):
    guest_id: str
    table_id: str
    seat_number: Optional[int] = Field(default=None, ge=1)

class SeatingChart(BaseModel):
    tables: List[Dict[str, Any]]
    assignments: List[Dict[str, Any]]
    unassigned_guests: List[Dict[str, Any]]
