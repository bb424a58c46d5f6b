"""
Report Formatter - aggregation results rendered as chat text

Pure functions. Values are shown with the `R$` prefix and two decimals,
dates as DD/MM/YYYY. Category totals are listed from highest to lowest;
equal totals keep Category Table order.
"""

from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from finbot.schemas.ledger import SELF_AUTHOR, AlertMessage, BudgetStatus, Entry

CURRENCY_PREFIX = "R$"
MEDALS = ("🥇", "🥈", "🥉")


# ============================================================================
# PRIMITIVES
# ============================================================================

def format_currency(value: Decimal | float | int) -> str:
    return f"{CURRENCY_PREFIX}{Decimal(str(value)):.2f}"


def format_percent(value: Decimal | float) -> str:
    """Whole percent, halves rounded away from zero (12.5 -> 13%)"""
    rounded = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{rounded}%"


def format_date(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    return moment.astimezone(tz).strftime("%d/%m/%Y")


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    return f"{days}d {hours}h {minutes}m"


def rank_marker(index: int) -> str:
    """Medal for the first three positions (0-based index), 'N.' afterwards"""
    return MEDALS[index] if index < len(MEDALS) else f"{index + 1}."


def sort_totals(
    totals: Dict[str, Decimal],
    category_order: Sequence[str] = (),
) -> List[Tuple[str, Decimal]]:
    """Descending by value; ties by category order, then first appearance"""
    rank = {name: position for position, name in enumerate(category_order)}
    appearance = {name: position for position, name in enumerate(totals)}

    def sort_key(item: Tuple[str, Decimal]):
        name, value = item
        return (-value, rank.get(name, len(rank) + appearance[name]))

    return sorted(totals.items(), key=sort_key)


# ============================================================================
# REPORTS
# ============================================================================

def render_summary(
    total_income: Decimal,
    total_expenses: Decimal,
    recent_expenses: Iterable[Entry],
    tz: Optional[tzinfo] = None,
) -> str:
    balance = total_income - total_expenses
    lines = [
        "📊 *RESUMO FINANCEIRO*",
        "",
        f"💰 Total de receitas: {format_currency(total_income)}",
        f"💸 Total de gastos: {format_currency(total_expenses)}",
        f"{'✅' if balance >= 0 else '❌'} Saldo: {format_currency(balance)}",
        "",
        "*Últimos 5 gastos:*",
    ]
    for position, entry in enumerate(recent_expenses, start=1):
        author = "você" if entry.author == SELF_AUTHOR else entry.author
        lines.append(
            f"{position}. {format_date(entry.timestamp, tz)} - {entry.category}: "
            f"{format_currency(entry.value)} (por {author})"
        )
    return "\n".join(lines)


def render_by_category(sorted_totals: List[Tuple[str, Decimal]]) -> str:
    lines = ["📊 *GASTOS POR CATEGORIA*", ""]
    lines.extend(f"{category}: {format_currency(value)}" for category, value in sorted_totals)
    return "\n".join(lines)


def render_period(label: str, total: Decimal, sorted_totals: List[Tuple[str, Decimal]]) -> str:
    lines = [f"📊 *RESUMO DE {label.upper()}*", "", f"Total: {format_currency(total)}", ""]
    for category, value in sorted_totals:
        share = value / total * 100 if total else Decimal("0")
        lines.append(f"{category}: {format_currency(value)} ({format_percent(share)})")
    return "\n".join(lines)


def render_ranking(sorted_totals: List[Tuple[str, Decimal]]) -> str:
    lines = ["🏆 *RANKING DE GASTOS DO MÊS*", ""]
    for index, (category, value) in enumerate(sorted_totals):
        lines.append(f"{rank_marker(index)} {category}: {format_currency(value)}")
    return "\n".join(lines)


def render_budgets(statuses: Iterable[BudgetStatus]) -> str:
    icons = {"exceeded": "🚨", "warning": "⚠️", None: "✅"}
    lines = ["📊 *ORÇAMENTOS DO MÊS*", ""]
    for status in statuses:
        lines.append(
            f"{icons[status.level]} {status.category}: {format_currency(status.spent)} de "
            f"{format_currency(status.limit)} ({format_percent(status.percentage)})"
        )
    return "\n".join(lines)


def render_alert(alert: AlertMessage) -> str:
    usage = f"({format_currency(alert.spent)} de {format_currency(alert.limit)})"
    if alert.level == "exceeded":
        return f"🚨 ALERTA: Orçamento de {alert.category} EXCEDIDO! {usage}"
    return (
        f"⚠️ Você já usou {format_percent(alert.percentage)} do orçamento de "
        f"{alert.category} {usage}"
    )


def render_alerts(alerts: Iterable[AlertMessage]) -> str:
    return "\n".join(render_alert(alert) for alert in alerts)


def render_insights(insights: Sequence[str]) -> str:
    return "📊 *INSIGHTS FINANCEIROS*\n\n" + "\n\n".join(insights)


def render_contacts(contacts: Sequence[str]) -> str:
    if not contacts:
        return "📭 Nenhum contato na lista de permitidos."
    lines = ["📋 Contatos permitidos:", ""]
    lines.extend(f"{position}. {contact}" for position, contact in enumerate(contacts, start=1))
    return "\n".join(lines)


def render_status(uptime_seconds: float, entry_count: int, contact_count: int, python_version: str) -> str:
    return "\n".join([
        "🖥️ *STATUS DO SERVIDOR*",
        "",
        "✅ Bot está online",
        f"⏱️ Tempo de atividade: {format_uptime(uptime_seconds)}",
        f"📊 Gastos registrados: {entry_count}",
        f"👥 Contatos permitidos: {contact_count}",
        f"💾 Versão do Python: {python_version}",
    ])
