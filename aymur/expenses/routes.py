"""
Recurring expense routes.

Endpoints:
    POST /recurring                  Create a recurring expense template
    GET  /recurring                  List templates (optionally active only)
    PUT  /recurring/{id}/pause       Stop generating
    PUT  /recurring/{id}/resume      Start generating again
    POST /recurring/{id}/generate    Create the next expense from a template
"""

from fastapi import APIRouter, Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from aymur.config import get_database
from aymur.rbac import PermissionKey, require_permission
from aymur.tenant import require_shop_id
from aymur.utils import success_response
from .schemas import CreateRecurringExpenseRequest, GenerateExpenseRequest
from .service import RecurringExpenseService

expenses_router = APIRouter()


@expenses_router.post("/recurring")
@require_permission(PermissionKey.EXPENSES_CREATE)
async def create_recurring(
    request: Request,
    body: CreateRecurringExpenseRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Create a template; the first due date is its start date."""
    svc = RecurringExpenseService(db, require_shop_id(request))
    doc = await svc.create(body.model_dump(), created_by=request.state.user.get("sub"))
    return success_response(data=doc, message="Recurring expense created", code=201)


@expenses_router.get("/recurring")
@require_permission(PermissionKey.EXPENSES_VIEW)
async def list_recurring(
    request: Request,
    active_only: bool = Query(False),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RecurringExpenseService(db, require_shop_id(request))
    docs = await svc.list_recurring(active_only=active_only)
    return success_response(data={"recurring_expenses": docs, "total": len(docs)})


@expenses_router.put("/recurring/{recurring_id}/pause")
@require_permission(PermissionKey.EXPENSES_CREATE)
async def pause_recurring(
    request: Request,
    recurring_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RecurringExpenseService(db, require_shop_id(request))
    doc = await svc.set_active(recurring_id, False)
    return success_response(data=doc, message="Recurring expense paused")


@expenses_router.put("/recurring/{recurring_id}/resume")
@require_permission(PermissionKey.EXPENSES_CREATE)
async def resume_recurring(
    request: Request,
    recurring_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RecurringExpenseService(db, require_shop_id(request))
    doc = await svc.set_active(recurring_id, True)
    return success_response(data=doc, message="Recurring expense resumed")


@expenses_router.post("/recurring/{recurring_id}/generate")
@require_permission(PermissionKey.EXPENSES_CREATE)
async def generate_expense(
    request: Request,
    recurring_id: str,
    body: GenerateExpenseRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    Create an unpaid expense from the template, dated `expense_date` or the
    template's next due date, and move the schedule forward.
    """
    svc = RecurringExpenseService(db, require_shop_id(request))
    expense = await svc.generate_expense(
        recurring_id,
        expense_date=body.expense_date,
        created_by=request.state.user.get("sub"),
    )
    return success_response(data=expense, message="Expense generated", code=201)
