# /callscript/models/api.py

from pydantic import BaseModel, Field
from typing import Any, List, Dict, Optional
from datetime import datetime

from callscript.models.script import TabulationInfo

# Request and response bodies for the HTTP surface.

class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str

class StartSessionRequest(BaseModel):
    attendance_type: Optional[str] = None
    person_type: Optional[str] = None
    product_id: Optional[str] = None
    operator_name: Optional[str] = Field(default=None, max_length=255)

class AdvanceRequest(BaseModel):
    next_step_id: Optional[str] = None

class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=255)

class ProductSelectRequest(BaseModel):
    product_id: str = Field(..., min_length=1)

class CustomerRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=120)
    full_name: Optional[str] = Field(default=None, max_length=255)

class ButtonView(BaseModel):
    id: str
    label: str
    next_step_id: Optional[str] = None
    primary: bool = False
    variant: Optional[str] = None

class StepView(BaseModel):
    """A step as the operator screen consumes it: raw and rendered content."""
    id: str
    title: str
    highlighted_title: str
    content: str
    rendered_content: str
    buttons: List[ButtonView]
    tabulation_info: Optional[TabulationInfo] = None

class SessionView(BaseModel):
    operator_id: str
    is_active: bool
    can_go_back: bool
    history: List[str]
    search_query: str = ""
    attendance_config: Optional[Dict[str, str]] = None
    current_step: Optional[StepView] = None
