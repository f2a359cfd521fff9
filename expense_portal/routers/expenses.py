import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from expense_portal.core.errors import DataAccessError
from expense_portal.dependencies import get_expense_service
from expense_portal.models import (
    ApiResponse,
    CreateExpenseRequest,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    UpdateExpenseStatusRequest,
    User,
)
from expense_portal.services import demo_data
from expense_portal.services.degrade import FallbackResult, error_details, load_or_fallback
from expense_portal.services.expense_service import ExpenseService

router = APIRouter(prefix="/api/expenses", tags=["expenses"])

logger = logging.getLogger("app.api.expenses")


# Helpers ----------------------------------------------------------


def _envelope(model, result: FallbackResult):
    return model(
        success=not result.degraded,
        data=result.data,
        error=result.error,
        error_details=result.error_details,
    )


# Routes -----------------------------------------------------------
# Fixed paths are declared before /{expense_id} so they are not captured by it.
@router.get(
    "",
    response_model=ApiResponse[List[Expense]],
    summary="List expenses with optional text and status filters",
)
async def list_expenses(
    filter: Optional[str] = Query(None, description="Text filter for description/category"),
    status: Optional[str] = Query(None, description="Filter by status name"),
    service: ExpenseService = Depends(get_expense_service),
):
    result = load_or_fallback(
        lambda: service.list_expenses(filter, status),
        demo_data.demo_expenses,
        "expenses",
    )
    return _envelope(ApiResponse[List[Expense]], result)


@router.get(
    "/pending",
    response_model=ApiResponse[List[Expense]],
    summary="List expenses awaiting review",
)
async def list_pending_expenses(
    filter: Optional[str] = Query(None, description="Text filter"),
    service: ExpenseService = Depends(get_expense_service),
):
    result = load_or_fallback(
        lambda: service.list_pending_expenses(filter),
        demo_data.demo_pending_expenses,
        "pending expenses",
    )
    return _envelope(ApiResponse[List[Expense]], result)


@router.get("/categories", response_model=ApiResponse[List[ExpenseCategory]])
async def list_categories(service: ExpenseService = Depends(get_expense_service)):
    result = load_or_fallback(
        service.list_categories, demo_data.demo_categories, "categories"
    )
    return _envelope(ApiResponse[List[ExpenseCategory]], result)


@router.get("/statuses", response_model=ApiResponse[List[ExpenseStatus]])
async def list_statuses(service: ExpenseService = Depends(get_expense_service)):
    result = load_or_fallback(service.list_statuses, demo_data.demo_statuses, "statuses")
    return _envelope(ApiResponse[List[ExpenseStatus]], result)


@router.get("/users", response_model=ApiResponse[List[User]])
async def list_users(service: ExpenseService = Depends(get_expense_service)):
    result = load_or_fallback(service.list_users, demo_data.demo_users, "users")
    return _envelope(ApiResponse[List[User]], result)


@router.get(
    "/{expense_id}",
    response_model=ApiResponse[Expense],
    summary="Get a single expense",
    responses={404: {"description": "Expense not found"}},
)
async def get_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    # NotFoundError propagates to the 404 handler; only store failures land here
    try:
        expense = service.get_expense(expense_id)
    except DataAccessError as exc:
        logger.error("error getting expense %s", expense_id, exc_info=exc)
        return ApiResponse[Expense](
            success=False,
            error="Database connection failed",
            error_details=error_details(exc),
        )
    return ApiResponse[Expense](success=True, data=expense)


@router.post(
    "",
    response_model=ApiResponse[Expense],
    status_code=201,
    summary="Create an expense",
    responses={400: {"description": "Amount must be greater than 0"}},
)
async def create_expense(
    payload: CreateExpenseRequest,
    response: Response,
    service: ExpenseService = Depends(get_expense_service),
):
    try:
        expense = service.create_expense(payload)
    except DataAccessError as exc:
        logger.error("error creating expense", exc_info=exc)
        response.status_code = 200
        return ApiResponse[Expense](
            success=False,
            error="Database connection failed - expense not created",
            error_details=error_details(exc),
        )
    response.headers["Location"] = f"{router.prefix}/{expense.expense_id}"
    return ApiResponse[Expense](success=True, data=expense)


@router.put(
    "/{expense_id}/status",
    response_model=ApiResponse[bool],
    summary="Submit, approve or reject an expense",
    responses={400: {"description": "Invalid status"}},
)
async def update_expense_status(
    expense_id: int,
    payload: UpdateExpenseStatusRequest,
    service: ExpenseService = Depends(get_expense_service),
):
    try:
        updated = service.update_expense_status(
            expense_id, payload.status, payload.reviewer_id
        )
    except DataAccessError as exc:
        logger.error("error updating expense status for %s", expense_id, exc_info=exc)
        return ApiResponse[bool](
            success=False,
            error="Database connection failed - status not updated",
            error_details=error_details(exc),
        )
    return ApiResponse[bool](success=updated, data=updated)
