from datetime import datetime, timezone

from conftest import Clock, make_entry

from finbot.database import MemoryStore
from finbot.schemas.ledger import INCOME_CATEGORY, EntryKind
from finbot.services.insights import NOT_ENOUGH_DATA, InsightGenerator
from finbot.services.ledger import Ledger

OCTOBER = datetime(2026, 10, 10, tzinfo=timezone.utc)
SEPTEMBER = datetime(2026, 9, 10, tzinfo=timezone.utc)


def make_insights(entries, now=None):
    clock = Clock(now) if now else Clock()
    return InsightGenerator(Ledger(MemoryStore(), entries, tz=timezone.utc, clock=clock))


def test_needs_five_entries():
    generator = make_insights([make_entry(10, "lazer", when=OCTOBER)] * 4)
    assert generator.generate() == [NOT_ENOUGH_DATA]


def test_top_category_and_increase():
    entries = [
        make_entry(100, "alimentação", when=SEPTEMBER),
        make_entry(90, "alimentação", when=OCTOBER),
        make_entry(30, "transporte", when=OCTOBER),
        make_entry(20, "lazer", when=OCTOBER),
        make_entry(10, "transporte", when=OCTOBER),
    ]

    assert make_insights(entries).generate() == [
        "📊 Seu maior gasto este mês foi com alimentação: R$90.00",
        "📈 Seus gastos aumentaram 50% em relação ao mês anterior.",
    ]


def test_decrease():
    entries = [make_entry(100, "lazer", when=SEPTEMBER)] + [make_entry(10, "lazer", when=OCTOBER)] * 4
    insights = make_insights(entries).generate()
    assert insights[1] == "📉 Seus gastos diminuíram 60% em relação ao mês anterior. Parabéns!"


def test_stable():
    entries = [make_entry(40, "lazer", when=SEPTEMBER)] + [make_entry(10, "lazer", when=OCTOBER)] * 4
    insights = make_insights(entries).generate()
    assert insights[1] == "🔄 Seus gastos estão estáveis em relação ao mês anterior."


def test_no_comparison_without_previous_month():
    entries = [make_entry(10, "lazer", when=OCTOBER)] * 5
    assert make_insights(entries).generate() == ["📊 Seu maior gasto este mês foi com lazer: R$50.00"]


def test_no_comparison_when_previous_month_total_is_zero():
    entries = [make_entry(0, "comprovante", when=SEPTEMBER, kind=EntryKind.RECEIPT_PENDING)]
    entries += [make_entry(10, "lazer", when=OCTOBER)] * 4
    assert make_insights(entries).month_over_month() is None


def test_income_counts_in_month_totals():
    entries = [
        make_entry(100, "alimentação", when=SEPTEMBER),
        make_entry(1000, INCOME_CATEGORY, when=OCTOBER, kind=EntryKind.INCOME),
        make_entry(20, "alimentação", when=OCTOBER),
        make_entry(20, "lazer", when=OCTOBER),
        make_entry(10, "lazer", when=OCTOBER),
    ]

    assert make_insights(entries).generate() == [
        "📊 Seu maior gasto este mês foi com receita: R$1000.00",
        "📈 Seus gastos aumentaram 950% em relação ao mês anterior.",
    ]


def test_first_maximum_wins_on_tie():
    entries = [make_entry(10, "lazer", when=OCTOBER), make_entry(10, "saúde", when=OCTOBER)]
    assert make_insights(entries).top_category()[0] == "lazer"


def test_january_compares_with_december():
    now = datetime(2027, 1, 15, 12, 0, tzinfo=timezone.utc)
    entries = [
        make_entry(200, "lazer", when=datetime(2026, 12, 10, tzinfo=timezone.utc)),
        make_entry(100, "lazer", when=datetime(2027, 1, 10, tzinfo=timezone.utc)),
    ]
    assert make_insights(entries, now=now).month_over_month() == (
        "📉 Seus gastos diminuíram 50% em relação ao mês anterior. Parabéns!"
    )


def test_month_comparison_ignores_year():
    entries = [
        make_entry(100, "lazer", when=SEPTEMBER),
        make_entry(100, "lazer", when=datetime(2025, 10, 3, tzinfo=timezone.utc)),
        make_entry(100, "lazer", when=OCTOBER),
    ]
    # both Octobers count as the current month
    assert make_insights(entries).month_over_month() == (
        "📈 Seus gastos aumentaram 100% em relação ao mês anterior."
    )
