from pydantic import BaseModel, Field, computed_field
from typing import Any, Dict, List, Optional
from datetime import date


# ==============================================================================
# ROWS AS RETURNED BY THE DATA API
# ==============================================================================

class Drug(BaseModel):
    drug_id: Optional[int] = None
    drug_name: Optional[str] = None
    company: Optional[str] = None
    storage_date: Optional[date] = None
    expiry_date: Optional[date] = None
    retail_price: Optional[float] = None
    current_quantity: Optional[int] = None


class RestockRequest(BaseModel):
    restock_id: Optional[int] = None
    drug_name: Optional[str] = None
    quantity_needed: Optional[int] = None
    price_per_unit: Optional[float] = None
    supplier: Optional[str] = None

    @computed_field
    @property
    def total_cost(self) -> Optional[float]:
        # Display-time only, never stored
        if self.quantity_needed is None or self.price_per_unit is None:
            return None
        return round(self.quantity_needed * self.price_per_unit, 2)


class Employee(BaseModel):
    employee_id: Optional[int] = None
    name: Optional[str] = None
    shift: Optional[str] = None
    salary: Optional[float] = None


# ==============================================================================
# INSERT FORMS
# ==============================================================================

class DrugCreate(BaseModel):
    drug_name: str
    company: str
    storage_date: Optional[date] = None
    expiry_date: Optional[date] = None
    retail_price: float = Field(0, ge=0)
    current_quantity: int = Field(0, ge=0)


class RestockCreate(BaseModel):
    drug_name: str
    supplier: str
    quantity_needed: int = Field(0, ge=0)
    price_per_unit: float = Field(0, ge=0)


class EmployeeCreate(BaseModel):
    name: str
    shift: str
    salary: float = Field(0, ge=0)


# ==============================================================================
# API RESPONSES
# ==============================================================================

class RecordList(BaseModel):
    view: str
    title: str
    search: str = ""
    rows: List[Dict[str, Any]]
    total: int
    loading: bool = False
    error: Optional[str] = None
    empty_message: Optional[str] = None
    can_insert: bool = True


class RecordCreated(BaseModel):
    view: str
    row: Dict[str, Any]
    message: str
