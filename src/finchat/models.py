from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from uuid import uuid4

GUEST_USER_ID = "guest"


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_guest(identity: str | None) -> bool:
    return identity is None or identity == GUEST_USER_ID


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

    @classmethod
    def parse(cls, value: str) -> Sender:
        lowered = value.strip().lower()
        # Records written by the web client used "bot" for the assistant.
        if lowered == "bot":
            return cls.ASSISTANT
        return cls(lowered)


@dataclass(frozen=True)
class Message:
    text: str
    sender: Sender
    timestamp: datetime = field(default_factory=utc_now)
    language: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def is_user(self) -> bool:
        return self.sender is Sender.USER


@dataclass(frozen=True)
class Account:
    is_recurring_income: bool = False
    recurring_amount: float = 0.0


@dataclass(frozen=True)
class Expense:
    category: str
    amount: float
    date: str | date | None = None


@dataclass(frozen=True)
class FinancialSnapshot:
    total_balance: float = 0.0
    accounts: tuple[Account, ...] = ()
    savings_goal: float = 0.0
    expenses: tuple[Expense, ...] = ()

    @property
    def monthly_income(self) -> float:
        return sum(a.recurring_amount for a in self.accounts if a.is_recurring_income)

    @classmethod
    def from_document(cls, document: dict | None) -> FinancialSnapshot:
        """Build a snapshot from the provider's camelCase user document.

        Missing or null fields fall back to zero / empty, matching how the
        prompt treats an absent document.
        """
        if not document:
            return cls()
        accounts = tuple(
            Account(
                is_recurring_income=bool(raw.get("isRecurringIncome", False)),
                recurring_amount=_to_number(raw.get("recurringAmount")),
            )
            for raw in document.get("accounts") or []
            if isinstance(raw, dict)
        )
        expenses = tuple(
            Expense(
                category=str(raw.get("category", "")),
                amount=_to_number(raw.get("amount")),
                date=raw.get("date"),
            )
            for raw in document.get("expenses") or []
            if isinstance(raw, dict)
        )
        return cls(
            total_balance=_to_number(document.get("totalBalance")),
            accounts=accounts,
            savings_goal=_to_number(document.get("savingsGoal")),
            expenses=expenses,
        )


@dataclass
class Session:
    identity: str | None
    language_preference: str
    transcript: list[Message] = field(default_factory=list)
    send_in_flight: bool = False

    @property
    def user_id(self) -> str:
        return GUEST_USER_ID if is_guest(self.identity) else str(self.identity)


def _to_number(value: object) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
