"""Request-scoped accessors for objects built once in ``create_app``."""

from fastapi import Request

from expense_portal.core.config import Settings
from expense_portal.services.assistant import ExpenseAssistant
from expense_portal.services.expense_service import ExpenseService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_expense_service(request: Request) -> ExpenseService:
    return request.app.state.expense_service


def get_assistant(request: Request) -> ExpenseAssistant:
    return request.app.state.assistant
