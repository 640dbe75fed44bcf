import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from datetime import date, datetime
from typing import Any, Dict, Optional
from pocket_tracker.domain.enums import Priority, TransactionType


def generate_id() -> str:
    """Return a fresh record identifier"""
    return uuid.uuid4().hex


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: Optional[str]) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.now()


@dataclass
class Transaction:
    """Core domain model representing a single income or expense"""
    type: TransactionType
    description: str
    amount: Decimal
    category: str
    date: date
    payment: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    recurring: bool = False
    from_shopping: bool = False
    shopping_item_id: Optional[str] = None
    id: str = field(default_factory=generate_id)

    def copy_for(self, day: date, created_at: datetime, **changes) -> "Transaction":
        """Clone this transaction as a new record dated `day`."""
        return replace(
            self,
            id=generate_id(),
            date=day,
            created_at=created_at,
            **changes,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "amount": str(self.amount), # Store as string for precision
            "category": self.category,
            "date": self.date.isoformat(),
            "payment": self.payment,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
            "recurring": self.recurring,
            "fromShopping": self.from_shopping,
            "shoppingItemId": self.shopping_item_id,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Transaction":
        return cls(
            id=record["id"],
            type=TransactionType(record["type"]),
            description=record["description"],
            amount=Decimal(str(record["amount"])),
            category=record.get("category") or "Other",
            date=_parse_date(record["date"]),
            payment=record.get("payment"),
            notes=record.get("notes"),
            created_at=_parse_datetime(record.get("createdAt")),
            recurring=bool(record.get("recurring", False)),
            from_shopping=bool(record.get("fromShopping", False)),
            shopping_item_id=record.get("shoppingItemId"),
        )

    def __repr__(self):
        sign = "+" if self.type == TransactionType.INCOME else "-"
        return f"Transaction({self.date}, {self.description[:30]}, {sign}${self.amount})"


@dataclass
class Task:
    """A to-do item, optionally due on a calendar day"""
    title: str
    priority: Priority = Priority.MEDIUM
    category: Optional[str] = None
    due_date: Optional[date] = None
    completed: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=generate_id)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority.value,
            "category": self.category,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        return cls(
            id=record["id"],
            title=record["title"],
            priority=Priority(record.get("priority", Priority.MEDIUM.value)),
            category=record.get("category"),
            due_date=_parse_date(record.get("dueDate")),
            completed=bool(record.get("completed", False)),
            created_at=_parse_datetime(record.get("createdAt")),
        )


@dataclass
class ShoppingItem:
    """An entry on the shopping list"""
    item: str
    quantity: int = 1
    price: Decimal = Decimal("0")
    category: str = "Other"
    purchased: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=generate_id)

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {self.quantity}")
        if self.price < 0:
            raise ValueError(f"Price cannot be negative, got {self.price}")

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item,
            "quantity": self.quantity,
            "price": str(self.price),
            "category": self.category,
            "purchased": self.purchased,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ShoppingItem":
        return cls(
            id=record["id"],
            item=record["item"],
            quantity=int(record.get("quantity", 1)),
            price=Decimal(str(record.get("price", "0"))),
            category=record.get("category") or "Other",
            purchased=bool(record.get("purchased", False)),
            created_at=_parse_datetime(record.get("createdAt")),
        )


@dataclass(frozen=True)
class Settings:
    """User preferences. Read-only for the automation engine."""
    currency: str = "USD"
    budget: Decimal = Decimal("0") # 0 means unset
    notifications: bool = True
    voice: bool = True
    auto_categ: bool = True
    theme: str = "light"

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": "settings",
            "currency": self.currency,
            "budget": str(self.budget),
            "notifications": self.notifications,
            "voice": self.voice,
            "autoCateg": self.auto_categ,
            "theme": self.theme,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Settings":
        defaults = cls()
        return cls(
            currency=record.get("currency", defaults.currency),
            budget=Decimal(str(record.get("budget", defaults.budget))),
            notifications=bool(record.get("notifications", defaults.notifications)),
            voice=bool(record.get("voice", defaults.voice)),
            auto_categ=bool(record.get("autoCateg", defaults.auto_categ)),
            theme=record.get("theme", defaults.theme),
        )
