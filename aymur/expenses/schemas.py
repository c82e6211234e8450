"""
Recurring expense schemas.

A recurring expense is a template; each generation inserts one unpaid,
pending expense and moves the template's next_due_date forward.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CreateRecurringExpenseRequest(BaseModel):
    """POST /expenses/recurring"""
    expense_category_id: str = Field(..., min_length=1)
    description: str = Field(..., min_length=3, max_length=1000)
    vendor_name: Optional[str] = Field(None, max_length=255)
    amount: float = Field(..., gt=0)
    frequency: Frequency
    auto_approve: bool = False
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0 = Sunday; weekly only")
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class GenerateExpenseRequest(BaseModel):
    """POST /expenses/recurring/{id}/generate — date defaults to next_due_date."""
    expense_date: Optional[date] = None
