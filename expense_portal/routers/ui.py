from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from expense_portal.core.config import Settings
from expense_portal.core.errors import DataAccessError, ValidationError
from expense_portal.dependencies import get_app_settings, get_expense_service
from expense_portal.models import CreateExpenseRequest
from expense_portal.models.constants import APPROVED, REJECTED, SUBMITTED
from expense_portal.services import demo_data
from expense_portal.services.degrade import (
    PAGE_DEMO_DATA_ERROR,
    FallbackResult,
    load_or_fallback,
)
from expense_portal.services.expense_service import ExpenseService

router = APIRouter(tags=["ui"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

logger = logging.getLogger("app.ui")

# Submissions from the expenses page carry no reviewer
NO_REVIEWER = 0


def _base_context(settings: Settings, active_page: str) -> Dict[str, Any]:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "active_page": active_page,
        "error_message": None,
        "error_details": None,
        "success_message": None,
    }


def _apply_fallback(context: Dict[str, Any], result: FallbackResult) -> None:
    if result.degraded:
        context["error_message"] = result.error
        context["error_details"] = result.error_details


def _pending_context(
    settings: Settings, service: ExpenseService, filter: Optional[str]
) -> Dict[str, Any]:
    context = _base_context(settings, "approve")
    result = load_or_fallback(
        lambda: service.list_pending_expenses(filter),
        demo_data.demo_pending_expenses,
        "pending expenses",
        error=PAGE_DEMO_DATA_ERROR,
    )
    _apply_fallback(context, result)
    context.update({"expenses": result.data, "filter": filter or ""})
    return context


@router.get("/", response_class=HTMLResponse)
async def ui_expenses(
    request: Request,
    filter: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    context = _base_context(settings, "expenses")
    expenses = load_or_fallback(
        lambda: service.list_expenses(filter, status_filter),
        demo_data.demo_expenses,
        "expenses",
        error=PAGE_DEMO_DATA_ERROR,
    )
    _apply_fallback(context, expenses)
    if expenses.degraded:
        statuses = demo_data.demo_statuses()
    else:
        statuses = load_or_fallback(
            service.list_statuses, demo_data.demo_statuses, "statuses"
        ).data
    context.update(
        {
            "expenses": expenses.data,
            "statuses": statuses,
            "filter": filter or "",
            "status_filter": status_filter or "",
        }
    )
    return templates.TemplateResponse(request, "expenses.html", context)


@router.post("/expenses/{expense_id}/submit", response_class=RedirectResponse)
async def ui_submit_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    try:
        service.update_expense_status(expense_id, SUBMITTED, NO_REVIEWER)
    except DataAccessError:
        logger.exception("error submitting expense %s", expense_id)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


def _add_expense_context(
    settings: Settings, service: ExpenseService, form: Dict[str, Any]
) -> Dict[str, Any]:
    context = _base_context(settings, "add")
    categories = load_or_fallback(
        service.list_categories, demo_data.demo_categories, "categories"
    )
    context.update({"categories": categories.data, "form": form})
    return context


@router.get("/expenses/add", response_class=HTMLResponse)
async def ui_add_expense_form(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    form = {"expense_date": date.today().isoformat()}
    context = _add_expense_context(settings, service, form)
    return templates.TemplateResponse(request, "add_expense.html", context)


@router.post("/expenses/add", response_class=HTMLResponse)
async def ui_add_expense_submit(
    request: Request,
    amount: str = Form(""),
    expense_date: str = Form(""),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    form_state = {
        "amount": amount,
        "expense_date": expense_date,
        "category_id": category_id,
        "description": description or "",
    }
    context = _add_expense_context(settings, service, form_state)
    errors: List[str] = []

    try:
        parsed_amount = Decimal(amount.strip())
        if not parsed_amount.is_finite():
            raise InvalidOperation(amount)
    except InvalidOperation:
        parsed_amount = None
        errors.append("Amount must be a number")
    if parsed_amount is not None and parsed_amount <= 0:
        errors.append("Amount must be greater than 0")

    parsed_date: Optional[date] = None
    if not expense_date.strip():
        errors.append("Date is required")
    else:
        try:
            parsed_date = date.fromisoformat(expense_date.strip())
        except ValueError:
            errors.append("Invalid date format")

    if not errors:
        request_model = CreateExpenseRequest(
            amount=parsed_amount,
            expense_date=parsed_date,
            category_id=category_id,
            description=description,
            user_id=settings.default_user_id,
        )
        try:
            expense = service.create_expense(request_model)
        except ValidationError as exc:
            errors.append(exc.message)
        except DataAccessError as exc:
            logger.error("error creating expense", exc_info=exc)
            errors.append(f"Unable to create expense: {exc}")
        else:
            context["success_message"] = "Expense created successfully!"
            context["created_expense"] = expense
            # Keep only the date for the next entry
            context["form"] = {"expense_date": date.today().isoformat()}

    if errors:
        context["error_message"] = "; ".join(errors)
    return templates.TemplateResponse(request, "add_expense.html", context)


@router.get("/approve", response_class=HTMLResponse)
async def ui_approve(
    request: Request,
    filter: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    context = _pending_context(settings, service, filter)
    return templates.TemplateResponse(request, "approve.html", context)


async def _review(
    request: Request,
    expense_id: int,
    new_status: str,
    done_message: str,
    settings: Settings,
    service: ExpenseService,
):
    message: Optional[str] = None
    failure: Optional[str] = None
    try:
        service.update_expense_status(expense_id, new_status, settings.default_reviewer_id)
        message = done_message
    except DataAccessError as exc:
        logger.error("error reviewing expense %s", expense_id, exc_info=exc)
        failure = f"Unable to update expense: {exc}"

    context = _pending_context(settings, service, None)
    if message:
        context["success_message"] = message
    if failure:
        context["error_message"] = failure
    return templates.TemplateResponse(request, "approve.html", context)


@router.post("/approve/{expense_id}/approve", response_class=HTMLResponse)
async def ui_approve_expense(
    request: Request,
    expense_id: int,
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    return await _review(
        request, expense_id, APPROVED, "Expense approved successfully!", settings, service
    )


@router.post("/approve/{expense_id}/reject", response_class=HTMLResponse)
async def ui_reject_expense(
    request: Request,
    expense_id: int,
    settings: Settings = Depends(get_app_settings),
    service: ExpenseService = Depends(get_expense_service),
):
    return await _review(request, expense_id, REJECTED, "Expense rejected.", settings, service)


@router.get("/chat", response_class=HTMLResponse)
async def ui_chat(request: Request, settings: Settings = Depends(get_app_settings)):
    context = _base_context(settings, "chat")
    context["is_configured"] = request.app.state.assistant.is_configured
    return templates.TemplateResponse(request, "chat.html", context)
