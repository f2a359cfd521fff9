from decimal import Decimal
from typing import Generic, Optional, TypeVar
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from expense_portal.services.money import format_amount, from_minor_units
from .constants import DEFAULT_CURRENCY

T = TypeVar("T")


class CamelModel(BaseModel):
    """Wire names are camelCase; attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Expense(CamelModel):
    expense_id: int
    user_id: int
    category_id: int
    status_id: int
    amount_minor: int = Field(..., ge=0)
    currency: str = DEFAULT_CURRENCY
    expense_date: date
    description: Optional[str] = None
    receipt_file: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    # Display fields joined in by the gateway; never written back
    user_name: Optional[str] = None
    category_name: Optional[str] = None
    status_name: Optional[str] = None
    reviewer_name: Optional[str] = None

    @computed_field(alias="amountMajor")  # type: ignore[prop-decorator]
    @property
    def amount_major(self) -> float:
        return from_minor_units(self.amount_minor)

    @computed_field(alias="formattedAmount")  # type: ignore[prop-decorator]
    @property
    def formatted_amount(self) -> str:
        return format_amount(self.amount_minor, self.currency)


class ExpenseCategory(CamelModel):
    category_id: int
    category_name: str
    is_active: bool = True


class ExpenseStatus(CamelModel):
    status_id: int
    status_name: str


class User(CamelModel):
    user_id: int
    user_name: str
    email: str
    role_id: int
    manager_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    role_name: Optional[str] = None


class Role(CamelModel):
    role_id: int
    role_name: str
    description: Optional[str] = None


class CreateExpenseRequest(CamelModel):
    """Payload for creating an expense.

    ``amount`` is in major units (pounds). Positivity is checked by the
    expense service, not here, so that a non-positive amount is a 400
    rejection rather than a schema error. ``user_id`` falls back to the
    configured default user when omitted.
    """

    amount: Decimal
    expense_date: date
    category_id: int
    description: Optional[str] = None
    user_id: Optional[int] = None

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class UpdateExpenseStatusRequest(CamelModel):
    status: str
    reviewer_id: int = 0


class ApiResponse(CamelModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_details: Optional[str] = None
