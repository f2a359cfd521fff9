"""Expense domain service.

Stateless orchestration over ``ExpenseGateway``. Input rules (positive
amount, known status name) are enforced here before the gateway is touched.
Gateway failures propagate unchanged as ``DataAccessError``; substituting demo
data is the presentation layer's decision, not this module's.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from expense_portal.core.errors import NotFoundError, ValidationError
from expense_portal.db.gateway import ExpenseGateway
from expense_portal.models import (
    EXPENSE_STATUSES,
    CreateExpenseRequest,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    User,
    canonical_status,
)
from expense_portal.models.constants import DEFAULT_CURRENCY
from .money import MAX_AMOUNT_MINOR, to_minor_units

logger = logging.getLogger("app.expenses")


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


class ExpenseService:
    def __init__(
        self,
        gateway: ExpenseGateway,
        default_user_id: int = 1,
        currency: str = DEFAULT_CURRENCY,
    ):
        self.gateway = gateway
        self.default_user_id = default_user_id
        self.currency = currency

    def list_expenses(
        self, filter: Optional[str] = None, status: Optional[str] = None
    ) -> List[Expense]:
        return self.gateway.list_expenses(filter=_clean(filter), status=_clean(status))

    def list_pending_expenses(self, filter: Optional[str] = None) -> List[Expense]:
        return self.gateway.list_pending_expenses(filter=_clean(filter))

    def get_expense(self, expense_id: int) -> Expense:
        expense = self.gateway.get_expense(expense_id)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    def create_expense(self, request: CreateExpenseRequest) -> Expense:
        if request.amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        amount_minor = to_minor_units(request.amount)
        if amount_minor > MAX_AMOUNT_MINOR:
            raise ValidationError("Amount is too large")
        user_id = request.user_id if request.user_id is not None else self.default_user_id
        expense = self.gateway.create_expense(
            user_id=user_id,
            category_id=request.category_id,
            amount_minor=amount_minor,
            expense_date=request.expense_date,
            description=_clean(request.description),
            currency=self.currency,
        )
        logger.info(
            "expense %s created for user %s (%s minor units)",
            expense.expense_id,
            user_id,
            amount_minor,
        )
        return expense

    def update_expense_status(self, expense_id: int, status: str, reviewer_id: int) -> bool:
        canonical = canonical_status(status)
        if canonical is None:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(EXPENSE_STATUSES)}"
            )
        affected = self.gateway.update_expense_status(expense_id, canonical, reviewer_id)
        logger.info(
            "expense %s -> %s by reviewer %s (rows=%s)",
            expense_id,
            canonical,
            reviewer_id,
            affected,
        )
        return affected > 0

    def list_categories(self) -> List[ExpenseCategory]:
        return self.gateway.list_categories()

    def list_statuses(self) -> List[ExpenseStatus]:
        return self.gateway.list_statuses()

    def list_users(self) -> List[User]:
        return self.gateway.list_users()
