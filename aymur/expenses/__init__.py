from .schedule import advance_schedule, next_due_date
from .service import RecurringExpenseService
from .routes import expenses_router

__all__ = [
    "advance_schedule",
    "next_due_date",
    "RecurringExpenseService",
    "expenses_router",
]
