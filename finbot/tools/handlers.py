"""
Command Handlers

One coroutine per CommandKind. A handler receives the application state,
the parsed command and the inbound message, performs the mutation or query
and returns the reply text (None for no reply).
"""

import platform
from datetime import timezone
from decimal import Decimal
from typing import Awaitable, Callable, Dict, Optional

from finbot.channel import InboundMessage
from finbot.errors import AttachmentProcessingFailure, EmptyLedger, NoReceiptPending
from finbot.logger import ErrorType, create_logger
from finbot.schemas.ledger import FALLBACK_CATEGORY, INCOME_CATEGORY, Entry, EntryKind
from finbot.services.ledger import Period, total_value, totals_by_category
from finbot.state import AppState
from finbot.tools import messages
from finbot.tools.command_parser import Command, CommandKind
from finbot.tools.report_formatter import (
    format_currency,
    render_alerts,
    render_budgets,
    render_by_category,
    render_contacts,
    render_insights,
    render_period,
    render_ranking,
    render_status,
    render_summary,
    sort_totals,
)

logger = create_logger("handlers")

Handler = Callable[[AppState, Command, InboundMessage], Awaitable[Optional[str]]]

HANDLERS: Dict[CommandKind, Handler] = {}


def handles(kind: CommandKind):
    """Register the decorated coroutine as the handler for kind"""
    def decorator(fn: Handler) -> Handler:
        HANDLERS[kind] = fn
        return fn
    return decorator


def _new_entry(state: AppState, message: InboundMessage, **fields) -> Entry:
    return Entry(timestamp=state.now().astimezone(timezone.utc), author=message.author, **fields)


def _with_alerts(state: AppState, reply: str) -> str:
    alerts = state.monitor.check_alerts()
    if alerts:
        reply += "\n\n" + render_alerts(alerts)
    return reply


# ============================================================================
# ADMIN
# ============================================================================

@handles(CommandKind.ALLOW_CONTACT)
async def allow_contact(state: AppState, command: Command, message: InboundMessage) -> str:
    if state.gate.allow(command.text):
        return messages.CONTACT_ALLOWED.format(contact=command.text)
    return messages.CONTACT_ALREADY_ALLOWED


@handles(CommandKind.REMOVE_CONTACT)
async def remove_contact(state: AppState, command: Command, message: InboundMessage) -> str:
    if state.gate.remove(command.text):
        return messages.CONTACT_REMOVED.format(contact=command.text)
    return messages.CONTACT_NOT_FOUND


@handles(CommandKind.LIST_CONTACTS)
async def list_contacts(state: AppState, command: Command, message: InboundMessage) -> str:
    return render_contacts(state.gate.contacts())


@handles(CommandKind.BIND_CONVERSATION)
async def bind_conversation(state: AppState, command: Command, message: InboundMessage) -> str:
    state.gate.bind(message.chat_id)
    return messages.CHAT_BOUND


# ============================================================================
# RECORDING
# ============================================================================

@handles(CommandKind.RECORD_EXPENSE)
async def record_expense(state: AppState, command: Command, message: InboundMessage) -> str:
    category = state.categories.resolve(command.text)
    entry = state.ledger.append(_new_entry(
        state, message, value=command.amount, category=category, kind=EntryKind.TEXT,
    ))
    reply = messages.EXPENSE_RECORDED.format(value=format_currency(entry.value), category=category)
    return _with_alerts(state, reply)


@handles(CommandKind.RECORD_INCOME)
async def record_income(state: AppState, command: Command, message: InboundMessage) -> str:
    entry = state.ledger.append(_new_entry(
        state, message,
        value=command.amount,
        category=INCOME_CATEGORY,
        kind=EntryKind.INCOME,
        source=command.text,
    ))
    return messages.INCOME_RECORDED.format(value=format_currency(entry.value), source=command.text)


@handles(CommandKind.UPLOAD_RECEIPT)
async def upload_receipt(state: AppState, command: Command, message: InboundMessage) -> str:
    try:
        filename = await state.receipts.store(message)
    except AttachmentProcessingFailure as e:
        logger.error("Receipt processing failed", {
            "error_type": ErrorType.ATTACHMENT_ERROR.value,
            "error": str(e),
        })
        return messages.RECEIPT_FAILED

    # Value stays zero until "valor comprovante" fills it in
    state.ledger.append(_new_entry(
        state, message,
        value=Decimal("0"),
        category=FALLBACK_CATEGORY,
        kind=EntryKind.RECEIPT_PENDING,
        attachment=filename,
    ))
    return messages.RECEIPT_SAVED


@handles(CommandKind.AMEND_RECEIPT)
async def amend_receipt(state: AppState, command: Command, message: InboundMessage) -> str:
    category = state.categories.resolve(command.text)
    try:
        entry = state.ledger.amend_receipt(command.amount, category)
    except NoReceiptPending:
        return messages.NO_PENDING_RECEIPT
    reply = messages.RECEIPT_UPDATED.format(value=format_currency(entry.value), category=category)
    return _with_alerts(state, reply)


@handles(CommandKind.UNDO_LAST)
async def undo_last(state: AppState, command: Command, message: InboundMessage) -> str:
    try:
        entry = state.ledger.undo_last()
    except EmptyLedger:
        return messages.NOTHING_TO_UNDO
    return messages.UNDO_DONE.format(value=format_currency(entry.value), category=entry.category)


# ============================================================================
# CONFIGURATION
# ============================================================================

@handles(CommandKind.DEFINE_BUDGET)
async def define_budget(state: AppState, command: Command, message: InboundMessage) -> str:
    if command.amount <= 0 or not command.text:
        return messages.BUDGET_INVALID
    state.budgets.set(command.text, command.amount)
    return messages.BUDGET_SET.format(value=format_currency(command.amount), category=command.text)


@handles(CommandKind.ADD_KEYWORD)
async def add_keyword(state: AppState, command: Command, message: InboundMessage) -> str:
    if not command.keyword or not command.text:
        return messages.KEYWORD_INVALID
    if state.categories.add_keyword(command.keyword, command.text):
        return messages.KEYWORD_ADDED.format(keyword=command.keyword, category=command.text)
    return messages.KEYWORD_EXISTS.format(keyword=command.keyword, category=command.text)


# ============================================================================
# QUERIES
# ============================================================================

@handles(CommandKind.SUMMARY)
async def summary(state: AppState, command: Command, message: InboundMessage) -> str:
    if not len(state.ledger):
        return messages.NO_EXPENSES
    expenses = state.ledger.expenses()
    recent = sorted(expenses, key=lambda entry: entry.timestamp, reverse=True)[:5]
    return render_summary(
        total_value(state.ledger.incomes()),
        total_value(expenses),
        recent,
        state.settings.tzinfo,
    )


@handles(CommandKind.SUMMARY_BY_CATEGORY)
async def summary_by_category(state: AppState, command: Command, message: InboundMessage) -> str:
    if not len(state.ledger):
        return messages.NO_EXPENSES
    return render_by_category(sort_totals(state.ledger.by_category(), state.categories.names()))


@handles(CommandKind.SUMMARY_PERIOD)
async def summary_period(state: AppState, command: Command, message: InboundMessage) -> str:
    label = messages.PERIOD_LABELS[command.period.value]
    expenses = state.ledger.expenses(state.ledger.by_period(command.period))
    if not expenses:
        return messages.NO_EXPENSES_FOR_PERIOD.format(period=label)
    totals = sort_totals(totals_by_category(expenses), state.categories.names())
    return render_period(label, total_value(expenses), totals)


@handles(CommandKind.RANKING)
async def ranking(state: AppState, command: Command, message: InboundMessage) -> str:
    if not len(state.ledger):
        return messages.NO_EXPENSES
    month_expenses = state.ledger.expenses(state.ledger.by_period(Period.MONTH))
    if not month_expenses:
        return messages.NO_EXPENSES_THIS_MONTH
    return render_ranking(sort_totals(totals_by_category(month_expenses), state.categories.names()))


@handles(CommandKind.INSIGHTS)
async def insights(state: AppState, command: Command, message: InboundMessage) -> str:
    generated = state.insights.generate()
    if not generated:
        return messages.NO_INSIGHTS
    return render_insights(generated)


@handles(CommandKind.BUDGETS)
async def budgets(state: AppState, command: Command, message: InboundMessage) -> str:
    if not len(state.budgets):
        return messages.NO_BUDGETS
    return render_budgets(state.monitor.overview())


@handles(CommandKind.STATUS)
async def status(state: AppState, command: Command, message: InboundMessage) -> str:
    return render_status(
        state.uptime(),
        len(state.ledger),
        len(state.gate.contacts()),
        platform.python_version(),
    )


@handles(CommandKind.HELP)
async def help_text(state: AppState, command: Command, message: InboundMessage) -> str:
    if message.is_self:
        return f"{messages.HELP_TEXT}\n\n{messages.ADMIN_HELP_TEXT}"
    return messages.HELP_TEXT
