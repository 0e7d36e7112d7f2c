# /callscript/models/script.py

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set
from pydantic import BaseModel, ConfigDict, Field

# Core script models. Steps are the nodes of a product's script graph and
# buttons are its edges; the navigation session only ever sees these
# validated records, never raw imported JSON.


class AttendanceType(str, Enum):
    """Direction of the call."""
    ATIVO = "ativo"
    RECEPTIVO = "receptivo"


class PersonType(str, Enum):
    """Whether the customer is an individual or a company."""
    FISICA = "fisica"
    JURIDICA = "juridica"


class TabulationInfo(BaseModel):
    """Advisory end-of-call outcome shown to the operator on a step."""
    name: str
    description: str = ""


class ScriptButton(BaseModel):
    id: str = Field(..., min_length=1)
    label: str
    next_step_id: Optional[str] = Field(default=None, description="Target step id, or None to end the call")
    order: int = 0
    primary: bool = False
    variant: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.next_step_id is None


class ScriptStep(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    content: str = ""
    order: int = 0
    buttons: List[ScriptButton] = Field(default_factory=list)
    product_id: Optional[str] = None
    tabulation_info: Optional[TabulationInfo] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def sorted_buttons(self) -> List[ScriptButton]:
        """Buttons in display order. Traversal never depends on this order."""
        return sorted(self.buttons, key=lambda button: button.order)

    def belongs_to(self, product_id: str) -> bool:
        # The product back-reference is optional; unscoped steps match any product.
        return self.product_id is None or self.product_id == product_id


class Product(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    script_id: str = Field(..., description="Id of the entry step of this product's script")
    attendance_types: Set[AttendanceType] = Field(default_factory=lambda: set(AttendanceType))
    person_types: Set[PersonType] = Field(default_factory=lambda: set(PersonType))
    is_active: bool = True
    category: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def is_eligible(self, attendance_type: AttendanceType, person_type: PersonType) -> bool:
        return (
            self.is_active
            and attendance_type in self.attendance_types
            and person_type in self.person_types
        )


class AttendanceConfig(BaseModel):
    """Frozen selection used to start a navigation session."""
    attendance_type: AttendanceType
    person_type: PersonType
    product_id: str

    model_config = ConfigDict(frozen=True)
