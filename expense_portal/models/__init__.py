"""Pydantic domain models for the Expense Management portal."""

from .constants import (
    EXPENSE_STATUSES,
    PENDING_STATUSES,
    DEFAULT_CURRENCY,
    ChatRole,
    canonical_status,
)  # re-export
from .expense import (
    ApiResponse,
    CreateExpenseRequest,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    Role,
    UpdateExpenseStatusRequest,
    User,
)
from .chat import ChatHistoryItem, ChatRequest, ChatResponse, ChatStatusResponse

__all__ = [
    "EXPENSE_STATUSES",
    "PENDING_STATUSES",
    "DEFAULT_CURRENCY",
    "ChatRole",
    "canonical_status",
    "ApiResponse",
    "CreateExpenseRequest",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "Role",
    "UpdateExpenseStatusRequest",
    "User",
    "ChatHistoryItem",
    "ChatRequest",
    "ChatResponse",
    "ChatStatusResponse",
]
