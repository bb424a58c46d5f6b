"""Insight Generator - observations derived from ledger history"""
from decimal import Decimal
from typing import List, Optional, Tuple

from finbot.services.ledger import Ledger, Period, total_value, totals_by_category
from finbot.tools.report_formatter import format_currency, format_percent

NOT_ENOUGH_DATA = "Registre mais gastos para receber insights personalizados."


class InsightGenerator:
    """
    Builds human-readable insights once enough entries exist.

    Month totals here count every entry kind, income included. Category
    reports and the ranking exclude income.
    """

    def __init__(self, ledger: Ledger, min_entries: int = 5):
        self.ledger = ledger
        self.min_entries = min_entries

    def top_category(self) -> Optional[Tuple[str, Decimal]]:
        """Category with the highest current-month total; the first maximum wins"""
        best: Optional[Tuple[str, Decimal]] = None
        for category, value in totals_by_category(self.ledger.by_period(Period.MONTH)).items():
            if value > (best[1] if best else Decimal("0")):
                best = (category, value)
        return best

    def month_over_month(self) -> Optional[str]:
        # Calendar month numbers only: the year is ignored
        current_month = self.ledger.now().month
        previous_month = 12 if current_month == 1 else current_month - 1

        previous = self.ledger.entries_in_month_number(previous_month)
        if not previous:
            return None
        total_previous = total_value(previous)
        if not total_previous:
            return None
        total_current = total_value(self.ledger.entries_in_month_number(current_month))

        difference = total_current - total_previous
        percentage = format_percent(abs(difference) / total_previous * 100)
        if difference > 0:
            return f"📈 Seus gastos aumentaram {percentage} em relação ao mês anterior."
        if difference < 0:
            return f"📉 Seus gastos diminuíram {percentage} em relação ao mês anterior. Parabéns!"
        return "🔄 Seus gastos estão estáveis em relação ao mês anterior."

    def generate(self) -> List[str]:
        if len(self.ledger) < self.min_entries:
            return [NOT_ENOUGH_DATA]

        insights = []
        top = self.top_category()
        if top:
            category, value = top
            insights.append(f"📊 Seu maior gasto este mês foi com {category}: {format_currency(value)}")

        comparison = self.month_over_month()
        if comparison:
            insights.append(comparison)
        return insights
