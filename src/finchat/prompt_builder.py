from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from finchat.models import Expense, FinancialSnapshot, Message

RECENT_EXPENSES = 3
RECENT_MESSAGES = 3
CURRENCY_SYMBOL = "₹"


def format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_expense_date(value: str | date | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return text


def _expense_line(expense: Expense) -> str:
    return (
        f"- {expense.category}: {CURRENCY_SYMBOL}{format_amount(expense.amount)} "
        f"({format_expense_date(expense.date)})"
    )


def build_prompt(
    snapshot: FinancialSnapshot | None,
    transcript: Sequence[Message],
    new_input: str,
    language: str = "en",
) -> str:
    """Render the generation prompt for one user turn.

    Only the last few expenses and transcript entries are included so the
    prompt stays bounded as the conversation grows.
    """
    snapshot = snapshot or FinancialSnapshot()

    activity = "\n".join(_expense_line(e) for e in snapshot.expenses[-RECENT_EXPENSES:])
    recent_chat = "\n".join(
        f"{m.sender.value}: {m.text}" for m in list(transcript)[-RECENT_MESSAGES:]
    )

    return f"""\
You are an intelligent financial assistant. Please reply in this language: {language}

Financial Overview:
- Total Balance: {CURRENCY_SYMBOL}{format_amount(snapshot.total_balance)}
- Monthly Income: {CURRENCY_SYMBOL}{format_amount(snapshot.monthly_income)}
- Savings Goal: {CURRENCY_SYMBOL}{format_amount(snapshot.savings_goal)}

Recent Activity:
{activity}

Recent Chat:
{recent_chat}

User's new message: {new_input}

Please provide a helpful and personalized response in {language}."""
