"""
Command Parser - ordered pattern rules

Incoming text is lower-cased and tried against RULES in order; the first
rule that matches produces the Command and the rest are skipped. The
patterns overlap (an expense sentence could also contain a fixed phrase, a
receipt caption could also read like an amendment), so the order below is
part of the behavior:

1. admin commands (owner only)
2. record expense
3. record income
4. receipt upload (attachment + "comprovante"/"receipt" in the body)
5. receipt amendment
6. define budget
7. add keyword to category
8. fixed-phrase queries

Text that matches nothing yields None and gets no reply.
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional, Tuple

from finbot.services.ledger import Period


class CommandKind(str, Enum):
    ALLOW_CONTACT = "allow_contact"
    REMOVE_CONTACT = "remove_contact"
    LIST_CONTACTS = "list_contacts"
    BIND_CONVERSATION = "bind_conversation"
    RECORD_EXPENSE = "record_expense"
    RECORD_INCOME = "record_income"
    UPLOAD_RECEIPT = "upload_receipt"
    AMEND_RECEIPT = "amend_receipt"
    DEFINE_BUDGET = "define_budget"
    ADD_KEYWORD = "add_keyword"
    SUMMARY = "summary"
    SUMMARY_BY_CATEGORY = "summary_by_category"
    SUMMARY_PERIOD = "summary_period"
    INSIGHTS = "insights"
    BUDGETS = "budgets"
    UNDO_LAST = "undo_last"
    RANKING = "ranking"
    STATUS = "status"
    HELP = "help"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    amount: Optional[Decimal] = None
    text: Optional[str] = None  # category, income source or contact id
    keyword: Optional[str] = None
    period: Optional[Period] = None


@dataclass(frozen=True)
class ParseContext:
    text: str  # lower-cased and trimmed
    is_self: bool
    has_attachment: bool


# ============================================================================
# PATTERNS
# ============================================================================

# Optional "r$" / "$" prefix, then digits with an optional "." or "," separator
AMOUNT = r"r?\$?\s*(\d+[.,]?\d*)"

EXPENSE_PATTERN = re.compile(r"(?:gastei|spent)\s*" + AMOUNT + r"\s+(?:com|on)\s+(.+)")
INCOME_PATTERN = re.compile(r"(?:recebi|received)\s*" + AMOUNT + r"\s+(?:de|com|from|with)\s+(.+)")
AMEND_PATTERN = re.compile(r"(?:valor\s+comprovante|set\s+receipt\s+value)\s*" + AMOUNT + r"\s+(.+)")
BUDGET_PATTERN = re.compile(
    r"(?:(?:definir|criar)\s+or[çc]amento\s+(?:de|para)|(?:set|create)\s+budget\s+for)\s+(.+)\s+" + AMOUNT
)
KEYWORD_PATTERNS = (
    re.compile(r"adicionar\s+(.+)\s+(?:à|a|na)\s+categoria\s+(.+)"),
    re.compile(r"add\s+(.+)\s+to\s+category\s+(.+)"),
)
PERIOD_PATTERN = re.compile(r"(?:resumo|summary)\s+(hoje|today|semana|week|m[êe]s|month|ano|year)")

RECEIPT_KEYWORDS = ("comprovante", "receipt")

ALLOW_PREFIXES = ("permitir ", "allow ")
REMOVE_PREFIXES = ("remover ", "remove ")
LIST_CONTACTS_PHRASES = ("listar permitidos", "list allowed")
BIND_PHRASES = ("configurar chat", "bind chat")

PERIOD_WORDS = {
    "hoje": Period.DAY,
    "today": Period.DAY,
    "semana": Period.WEEK,
    "week": Period.WEEK,
    "mês": Period.MONTH,
    "mes": Period.MONTH,
    "month": Period.MONTH,
    "ano": Period.YEAR,
    "year": Period.YEAR,
}

# Exact phrases, checked in this order (the period summary sits after the
# by-category summary)
FIXED_PHRASES: List[Tuple[Tuple[str, ...], CommandKind]] = [
    (("resumo", "summary"), CommandKind.SUMMARY),
    (("resumo por categoria", "summary by category"), CommandKind.SUMMARY_BY_CATEGORY),
    (("insights", "dicas", "tips"), CommandKind.INSIGHTS),
    (("orçamentos", "orcamentos", "budgets"), CommandKind.BUDGETS),
    (("excluir último", "excluir ultimo", "undo last"), CommandKind.UNDO_LAST),
    (("ranking", "ranking de gastos"), CommandKind.RANKING),
    (("status", "status servidor"), CommandKind.STATUS),
    (("ajuda", "help"), CommandKind.HELP),
]


def parse_amount(raw: str) -> Decimal:
    """Amount with either '.' or ',' as decimal separator"""
    return Decimal(raw.replace(",", "."))


# ============================================================================
# RULES
# ============================================================================

def _match_admin(ctx: ParseContext) -> Optional[Command]:
    if not ctx.is_self:
        return None
    for prefix in ALLOW_PREFIXES:
        if ctx.text.startswith(prefix):
            return Command(CommandKind.ALLOW_CONTACT, text=ctx.text[len(prefix):].strip())
    for prefix in REMOVE_PREFIXES:
        if ctx.text.startswith(prefix):
            return Command(CommandKind.REMOVE_CONTACT, text=ctx.text[len(prefix):].strip())
    if ctx.text in LIST_CONTACTS_PHRASES:
        return Command(CommandKind.LIST_CONTACTS)
    if ctx.text in BIND_PHRASES:
        return Command(CommandKind.BIND_CONVERSATION)
    return None


def _match_expense(ctx: ParseContext) -> Optional[Command]:
    match = EXPENSE_PATTERN.search(ctx.text)
    if not match:
        return None
    return Command(CommandKind.RECORD_EXPENSE, amount=parse_amount(match.group(1)), text=match.group(2).strip())


def _match_income(ctx: ParseContext) -> Optional[Command]:
    match = INCOME_PATTERN.search(ctx.text)
    if not match:
        return None
    return Command(CommandKind.RECORD_INCOME, amount=parse_amount(match.group(1)), text=match.group(2).strip())


def _match_receipt_upload(ctx: ParseContext) -> Optional[Command]:
    if ctx.has_attachment and any(word in ctx.text for word in RECEIPT_KEYWORDS):
        return Command(CommandKind.UPLOAD_RECEIPT)
    return None


def _match_receipt_amendment(ctx: ParseContext) -> Optional[Command]:
    match = AMEND_PATTERN.search(ctx.text)
    if not match:
        return None
    return Command(CommandKind.AMEND_RECEIPT, amount=parse_amount(match.group(1)), text=match.group(2).strip())


def _match_budget(ctx: ParseContext) -> Optional[Command]:
    match = BUDGET_PATTERN.search(ctx.text)
    if not match:
        return None
    return Command(CommandKind.DEFINE_BUDGET, amount=parse_amount(match.group(2)), text=match.group(1).strip())


def _match_keyword(ctx: ParseContext) -> Optional[Command]:
    for pattern in KEYWORD_PATTERNS:
        match = pattern.search(ctx.text)
        if match:
            return Command(CommandKind.ADD_KEYWORD, keyword=match.group(1).strip(), text=match.group(2).strip())
    return None


def _match_fixed_phrase(ctx: ParseContext) -> Optional[Command]:
    for phrases, kind in FIXED_PHRASES[:2]:
        if ctx.text in phrases:
            return Command(kind)
    match = PERIOD_PATTERN.fullmatch(ctx.text)
    if match:
        return Command(CommandKind.SUMMARY_PERIOD, period=PERIOD_WORDS[match.group(1)])
    for phrases, kind in FIXED_PHRASES[2:]:
        if ctx.text in phrases:
            return Command(kind)
    return None


RULES: List[Tuple[str, Callable[[ParseContext], Optional[Command]]]] = [
    ("admin", _match_admin),
    ("record_expense", _match_expense),
    ("record_income", _match_income),
    ("receipt_upload", _match_receipt_upload),
    ("receipt_amendment", _match_receipt_amendment),
    ("define_budget", _match_budget),
    ("add_keyword", _match_keyword),
    ("fixed_phrase", _match_fixed_phrase),
]


def parse(text: Optional[str], is_self: bool = False, has_attachment: bool = False) -> Optional[Command]:
    """Return the Command of the first matching rule, or None when nothing matches"""
    ctx = ParseContext(text=(text or "").lower().strip(), is_self=is_self, has_attachment=has_attachment)
    for _name, matcher in RULES:
        command = matcher(ctx)
        if command is not None:
            return command
    return None
