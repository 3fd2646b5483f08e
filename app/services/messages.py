"""WhatsApp message text."""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.utils.dates import format_local, utcnow

FOOTER_DEDUCT = "🤖 *Automated message — Savings Manager*"
FOOTER_SEND = "🤖 *This is an automated message — please don't reply.*"


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def format_amount(value: float) -> str:
    """₹ figures: 250.0 -> '250', 99.5 -> '99.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _text_or_dash(value: Optional[str]) -> str:
    if value is None:
        return "—"
    text = str(value).strip()
    return text or "—"


def build_debit_message(
    *,
    date: datetime,
    name: str,
    saved_amount: float,
    amount: float,
    previous_balance: float,
    todays_spent: float,
    new_balance: float,
    note: Optional[str] = None,
    footer: str = FOOTER_DEDUCT
) -> str:
    return "\n".join([
        f"📅 *Date:* {format_local(date, local_tz())}",
        f"👤 Name: {name}",
        "",
        f"💰 *Fixed Saved Amount:* ₹{format_amount(saved_amount)}",
        f"💸 Debited: ₹{format_amount(amount)}",
        f"💳 Previous Balance: ₹{format_amount(previous_balance)}",
        f"🧾 Today's Total Spent: ₹{format_amount(todays_spent)}",
        f"📉 *Available Balance:* ₹{format_amount(new_balance)}",
        "",
        f"📝 *Note:* {_text_or_dash(note)}",
        "",
        footer,
    ])


def build_loan_reminder(
    *,
    name: str,
    amount: float,
    borrowed_at: Optional[datetime] = None,
    reason: Optional[str] = None
) -> str:
    borrowed = format_local(borrowed_at or utcnow(), local_tz())
    return "\n".join([
        "🔔 *Reminder: Please return*",
        "",
        f"Hi {name},",
        "This is a reminder for the borrowed amount:",
        "",
        f"💸 Amount: ₹{format_amount(amount)}",
        f"🗓 Borrowed on: {borrowed}",
        f"📝 Reason: {_text_or_dash(reason)}",
        "",
        "Please return at your earliest convenience. 🙏",
        "",
        "— Savings Manager",
    ])
