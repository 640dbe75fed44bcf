from enum import Enum

class TransactionType(Enum):
    """Represents whether money is coming in or out"""
    EXPENSE = "expense" # out
    INCOME = "income" # in

class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class RecordKind(Enum):
    """Collections held by the record store"""
    TRANSACTIONS = "transactions"
    TASKS = "tasks"
    SHOPPING = "shopping"
    SETTINGS = "settings"

class BudgetAlertKind(Enum):
    NINETY_PERCENT = "ninety-percent"
    EXCEEDED = "exceeded"

class ReminderWindow(Enum):
    """One-shot lead-time windows for task reminders"""
    DAY_BEFORE = "24h"
    HOUR_BEFORE = "1h"
    OVERDUE = "overdue"
