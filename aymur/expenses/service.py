"""
Recurring expense service.

Collections used (shop-scoped):
    - {shop}_recurring_expenses : templates with their schedule
    - {shop}_expenses           : generated expense records

Dates are stored as ISO strings (YYYY-MM-DD).
"""

from datetime import date, datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from aymur.tenant import get_shop_collection
from aymur.utils import ConflictError, Logger, NotFoundError, parse_object_id, serialize_mongo_doc
from .schedule import advance_schedule

logger = Logger("expenses")


def _to_iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return value


class RecurringExpenseService:
    def __init__(self, db: AsyncIOMotorDatabase, shop_id: str):
        self.shop_id = shop_id
        self.recurring = get_shop_collection(db, shop_id, "recurring_expenses")
        self.expenses = get_shop_collection(db, shop_id, "expenses")

    # ── Expense number generation ────────────────────────────────

    async def _generate_expense_number(self, on: date) -> str:
        """Sequential per day: EXP-YYYYMMDD-XXXX"""
        prefix = f"EXP-{on.strftime('%Y%m%d')}-"
        last = await self.expenses.find_one(
            {"expense_number": {"$regex": f"^{prefix}"}},
            sort=[("expense_number", -1)],
        )
        if last:
            last_num = int(last["expense_number"].split("-")[-1])
            return f"{prefix}{str(last_num + 1).zfill(4)}"
        return f"{prefix}0001"

    async def _get_template(self, recurring_id: str) -> dict:
        doc = await self.recurring.find_one(
            {
                "_id": parse_object_id(recurring_id, "recurring expense ID"),
                "is_deleted": {"$ne": True},
            }
        )
        if not doc:
            raise NotFoundError("Recurring expense not found")
        return doc

    # ── CRUD ─────────────────────────────────────────────────────

    async def create(self, data: dict, created_by: Optional[str] = None) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            **data,
            "frequency": getattr(data["frequency"], "value", data["frequency"]),
            "start_date": _to_iso(data["start_date"]),
            "end_date": _to_iso(data.get("end_date")),
            "next_due_date": _to_iso(data["start_date"]),
            "last_generated_date": None,
            "is_active": True,
            "is_deleted": False,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.recurring.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_mongo_doc(doc)

    async def list_recurring(self, active_only: bool = False) -> list[dict]:
        filters: dict = {"is_deleted": {"$ne": True}}
        if active_only:
            filters["is_active"] = True
        cursor = self.recurring.find(filters).sort("next_due_date", 1)
        return [serialize_mongo_doc(d) async for d in cursor]

    async def set_active(self, recurring_id: str, is_active: bool) -> dict:
        template = await self._get_template(recurring_id)
        result = await self.recurring.find_one_and_update(
            {"_id": template["_id"]},
            {"$set": {"is_active": is_active, "updated_at": datetime.now(timezone.utc)}},
            return_document=True,
        )
        return serialize_mongo_doc(result)

    # ── Generation ───────────────────────────────────────────────

    async def generate_expense(
        self,
        recurring_id: str,
        expense_date: Optional[date] = None,
        created_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> dict:
        """Create one expense from the template and advance its schedule."""
        today = today or datetime.now(timezone.utc).date()
        template = await self._get_template(recurring_id)

        if template.get("is_active") is not True:
            raise ConflictError("Cannot generate expense from inactive recurring expense")

        end_date = date.fromisoformat(template["end_date"]) if template.get("end_date") else None
        if end_date is not None and end_date < today:
            raise ConflictError("Recurring expense has ended")

        current_due = date.fromisoformat(template["next_due_date"])
        final_date = expense_date or current_due

        now = datetime.now(timezone.utc)
        expense = {
            "expense_category_id": template["expense_category_id"],
            "expense_number": await self._generate_expense_number(final_date),
            "description": template["description"],
            "vendor_name": template.get("vendor_name"),
            "amount": template["amount"],
            "expense_date": final_date.isoformat(),
            "payment_status": "unpaid",
            "approval_status": "approved" if template.get("auto_approve") else "pending",
            "paid_amount": 0,
            "recurring_expense_id": recurring_id,
            "notes": "Generated from recurring expense",
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.expenses.insert_one(expense)
        expense["_id"] = result.inserted_id

        upcoming, is_active = advance_schedule(
            current_due,
            template["frequency"],
            template.get("day_of_month"),
            end_date,
            day_of_week=template.get("day_of_week"),
        )
        await self.recurring.update_one(
            {"_id": template["_id"]},
            {
                "$set": {
                    "last_generated_date": final_date.isoformat(),
                    "next_due_date": upcoming.isoformat(),
                    "is_active": is_active,
                    "updated_at": now,
                }
            },
        )
        logger.info(
            f"Generated {expense['expense_number']} from recurring {recurring_id}; "
            f"next due {upcoming.isoformat()}{'' if is_active else ' (schedule ended)'}"
        )
        return serialize_mongo_doc(expense)
