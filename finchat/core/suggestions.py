"""Keyword-driven follow-up suggestions and action buttons for replies."""

from typing import List, Optional, Sequence, Tuple

from ..types.responses import ActionButton
from .transfer import detect_transfer

MAX_SUGGESTIONS = 5
MAX_ACTION_BUTTONS = 4

# (keywords matched against the reply, suggestions offered)
_CONTENT_SUGGESTIONS: Sequence[Tuple[Tuple[str, ...], Tuple[str, ...]]] = (
    (("expense", "spending"), ("Add a new expense", "View spending by category", "Set expense budget", "Analyze spending trends")),
    (("income", "salary"), ("Log new income", "Set up recurring salary", "Update monthly income", "Track income sources")),
    (("budget",), ("Create new budget", "Check budget status", "Adjust budget limits", "Monthly budget review")),
    (("bill", "payment"), ("Add bill reminder", "Mark bill as paid", "Set up auto-pay", "View upcoming bills")),
    (("goal", "save"), ("Create savings goal", "Update goal progress", "Adjust goal target", "Goal achievement plan")),
    (("debt", "loan"), ("Add debt tracker", "Create payment plan", "Calculate payoff time", "Debt consolidation advice")),
    (("crypto", "sui", "transfer"), ("Send SUI transfer", "Check crypto balance", "View transfer history", "Connect wallet")),
    (("report", "analysis"), ("Generate monthly report", "Spending breakdown", "Income vs expenses", "Financial health check")),
    (("account", "bank"), ("Add bank account", "Update balance", "Account reconciliation", "Transfer between accounts")),
)

_INPUT_SUGGESTIONS: Sequence[Tuple[Tuple[str, ...], Tuple[str, ...]]] = (
    (("help", "how"), ("Step-by-step guide", "Best practices", "Common mistakes to avoid")),
    (("start", "begin"), ("Quick setup wizard", "Getting started tips", "Essential first steps")),
    (("improve", "better"), ("Optimization tips", "Advanced strategies", "Financial health check")),
)

_FALLBACK_SUGGESTIONS = ("Add transaction", "Create budget", "Set financial goal", "View insights")

TRANSFER_BUTTONS = (
    ActionButton(label="Execute SUI Transfer", action="crypto-transfer", variant="primary"),
    ActionButton(label="Review Transfer Details", action="review-transfer", variant="secondary"),
    ActionButton(label="Cancel Transfer", action="cancel-transfer", variant="secondary"),
)


def _any_in(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def generate_suggestions(content: str, user_input: Optional[str] = None) -> List[str]:
    lowered = (content or "").lower()
    suggestions: List[str] = []

    for keywords, offered in _CONTENT_SUGGESTIONS:
        if _any_in(lowered, keywords):
            suggestions.extend(offered)

    if user_input:
        lowered_input = user_input.lower()
        for keywords, offered in _INPUT_SUGGESTIONS:
            if _any_in(lowered_input, keywords):
                suggestions.extend(offered)

    if not suggestions:
        suggestions.extend(_FALLBACK_SUGGESTIONS)

    return _dedupe(suggestions)[:MAX_SUGGESTIONS]


def generate_action_buttons(content: str, user_input: Optional[str] = None) -> List[ActionButton]:
    """Buttons for the reply. A transfer in ``user_input`` wins outright."""

    lowered = (content or "").lower()
    buttons: List[ActionButton] = []

    if user_input:
        if detect_transfer(user_input) is not None:
            return list(TRANSFER_BUTTONS)
        if _any_in(user_input.lower(), ("crypto", "sui", "transfer")):
            buttons.append(ActionButton(label="Crypto Tools", action="crypto-tools"))

    def add(label: str, action: str, variant: str = "primary") -> None:
        buttons.append(ActionButton(label=label, action=action, variant=variant))

    if "add" in lowered and "transaction" in lowered:
        add("Add Transaction", "add-transaction")
    if "create" in lowered and "budget" in lowered:
        add("Create Budget", "add-budget")
    if "set" in lowered and _any_in(lowered, ("goal", "save")):
        add("Set Savings Goal", "add-goal")
    if _any_in(lowered, ("bill", "reminder")):
        add("Add Bill Reminder", "add-bill")
    if "bank" in lowered and "account" in lowered:
        add("Add Bank Account", "add-account")
    if _any_in(lowered, ("recurring", "regular")):
        add("Set Recurring Item", "add-recurring")
    if _any_in(lowered, ("income", "salary")):
        add("Log Income", "add-income")
    if _any_in(lowered, ("expense", "spend")):
        add("Log Expense", "add-expense")
    if _any_in(lowered, ("report", "summary")):
        add("Generate Report", "generate-report", "secondary")
    if _any_in(lowered, ("analysis", "insight")):
        add("View Insights", "view-insights", "secondary")

    if user_input and "debt" in user_input.lower():
        add("Track Debt", "add-debt", "secondary")

    if not buttons:
        add("Add Transaction", "add-transaction")
        add("Create Budget", "add-budget", "secondary")

    return buttons[:MAX_ACTION_BUTTONS]


__all__ = ["MAX_ACTION_BUTTONS", "MAX_SUGGESTIONS", "TRANSFER_BUTTONS", "generate_action_buttons", "generate_suggestions"]
